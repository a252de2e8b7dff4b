"""
Tests for TradeAnalyticsEngine grouping and filtering.
"""

import datetime

import pytest

from trade_analytics_engine import (
    AGAINST_TREND,
    WEEKDAYS,
    WITH_TREND,
    AnalyticsOptions,
    Dimension,
    InvalidInputError,
    TradeAnalyticsEngine,
    summarize,
)
from tests.fixtures.test_data import EXAMPLE_TRADES, make_trade


def by_key(summaries):
    return {s.group_key: s for s in summaries}


class TestWorkedExample:
    """The two-trade example: a pivot win with the trend and a bare loss against it."""

    def setup_method(self):
        self.engine = TradeAnalyticsEngine()

    def test_day_of_week(self):
        monday = by_key(self.engine.summarize_by_day_of_week(EXAMPLE_TRADES))["Monday"]
        assert (monday.total, monday.wins, monday.losses, monday.breakeven) == (2, 1, 1, 0)
        assert monday.win_rate == 50
        assert monday.profit_loss == 20

    def test_trend(self):
        with_trend, against_trend = self.engine.summarize_by_trend_alignment(EXAMPLE_TRADES)
        assert with_trend.group_key == WITH_TREND
        assert (with_trend.total, with_trend.wins, with_trend.win_rate, with_trend.profit_loss) == (1, 1, 100, 50)
        assert against_trend.group_key == AGAINST_TREND
        assert (against_trend.total, against_trend.losses, against_trend.win_rate, against_trend.profit_loss) == (1, 1, 0, -30)

    def test_confluence_count(self):
        summaries = self.engine.summarize_by_confluence_count(EXAMPLE_TRADES)
        assert [s.group_key for s in summaries] == [0, 1]
        groups = by_key(summaries)
        assert groups[1].total == 1 and groups[1].win_rate == 100
        assert groups[0].total == 1 and groups[0].win_rate == 0
        assert groups[1].avg_profit_loss == 50
        assert groups[0].avg_profit_loss == -30


class TestPreFilter:
    def setup_method(self):
        self.engine = TradeAnalyticsEngine()
        self.trades = [
            make_trade(10, date=datetime.date(2024, 3, 1)),
            make_trade(20, date=datetime.date(2024, 4, 1), market_condition="Imbalanced"),
            make_trade(30, date=datetime.date(2023, 3, 1)),
            make_trade(40, date=None),
        ]

    def test_no_options_keeps_everything(self):
        assert self.engine.filter_trades(self.trades) == self.trades

    def test_month_and_year(self):
        filtered = self.engine.filter_trades(self.trades, AnalyticsOptions(month=3, year=2024))
        assert [t.profit_loss for t in filtered] == [10]

    def test_month_across_years(self):
        filtered = self.engine.filter_trades(self.trades, AnalyticsOptions(month=3))
        assert [t.profit_loss for t in filtered] == [10, 30]

    def test_undated_trades_excluded_by_date_filters(self):
        filtered = self.engine.filter_trades(self.trades, AnalyticsOptions(year=2024))
        assert 40 not in [t.profit_loss for t in filtered]

    def test_market_condition_exact_match(self):
        filtered = self.engine.filter_trades(self.trades, AnalyticsOptions(market_condition="Imbalanced"))
        assert [t.profit_loss for t in filtered] == [20]

    def test_input_not_mutated(self):
        original = list(self.trades)
        self.engine.summarize_by_market_condition(self.trades, AnalyticsOptions(year=2024))
        assert self.trades == original


class TestMarketCondition:
    def test_unknown_bucket_and_count_conservation(self):
        trades = [
            make_trade(10, market_condition="Balanced"),
            make_trade(-5, market_condition=""),
            make_trade(0, market_condition=None),
            make_trade(7, market_condition="None"),
            make_trade(3, market_condition="Imbalanced"),
        ]
        summaries = TradeAnalyticsEngine().summarize_by_market_condition(trades)
        groups = by_key(summaries)
        assert set(groups) == {"Balanced", "Unknown", "Imbalanced"}
        assert groups["Unknown"].total == 3
        assert sum(s.total for s in summaries) == len(trades)

    def test_single_trade_condition_still_reported(self):
        summaries = TradeAnalyticsEngine().summarize_by_market_condition([make_trade(1, market_condition="Trending")])
        assert [s.group_key for s in summaries] == ["Trending"]


class TestDayOfWeek:
    def test_weekdays_preseeded(self):
        summaries = TradeAnalyticsEngine().summarize_by_day_of_week([make_trade(5, day="Wednesday")])
        assert [s.group_key for s in summaries] == list(WEEKDAYS)
        assert by_key(summaries)["Monday"].total == 0
        assert by_key(summaries)["Monday"].win_rate == 0

    def test_non_canonical_days_go_to_unknown(self):
        trades = [
            make_trade(5, day="Saturday"),
            make_trade(-5, day=None),
            make_trade(1, day=""),
            make_trade(2, day="Friday"),
        ]
        summaries = TradeAnalyticsEngine().summarize_by_day_of_week(trades)
        assert summaries[-1].group_key == "Unknown"
        assert summaries[-1].total == 3
        assert sum(s.total for s in summaries) == len(trades)

    def test_no_unknown_bucket_when_all_days_valid(self):
        summaries = TradeAnalyticsEngine().summarize_by_day_of_week([make_trade(5, day="Friday")])
        assert "Unknown" not in by_key(summaries)


class TestTrendAlignment:
    def test_always_two_groups(self):
        summaries = TradeAnalyticsEngine().summarize_by_trend_alignment([])
        assert [s.group_key for s in summaries] == [WITH_TREND, AGAINST_TREND]
        assert all(s.total == 0 for s in summaries)

    def test_exclusivity_and_skipping(self):
        trades = [
            make_trade(10, action="Sell", direction="Bearish"),
            make_trade(-10, action="Buy", direction="Bearish"),
            make_trade(5, action=None, direction="Bullish"),
            make_trade(5, action="Buy", direction=""),
            make_trade(5, action="Buy", direction="None"),
        ]
        with_trend, against_trend = TradeAnalyticsEngine().summarize_by_trend_alignment(trades)
        assert with_trend.total == 1 and with_trend.wins == 1
        assert against_trend.total == 1 and against_trend.losses == 1


class TestConfluenceCount:
    def test_empty_buckets_dropped_and_five_created_on_demand(self):
        trades = [
            make_trade(10, pivots="R1", banking_level="1.1", ma="50", fib="61.8", top_bob_fv="TOB"),
            make_trade(-4, pivots="R1", banking_level="1.1"),
        ]
        summaries = TradeAnalyticsEngine().summarize_by_confluence_count(trades)
        assert [s.group_key for s in summaries] == [2, 5]
        assert by_key(summaries)[5].win_rate == 100

    def test_none_sentinels_do_not_count(self):
        trades = [make_trade(1, pivots="None", ma="none", fib="  ")]
        summaries = TradeAnalyticsEngine().summarize_by_confluence_count(trades)
        assert [s.group_key for s in summaries] == [0]


class TestConfluenceCombination:
    def setup_method(self):
        self.engine = TradeAnalyticsEngine()

    def test_key_uses_fixed_tag_order_and_values(self):
        trades = [make_trade(10, fib="61.8", pivots="R1", top_bob_fv="FV")]
        summaries = self.engine.summarize_by_confluence_combination(trades)
        assert summaries[0].group_key == "P:R1 + F:61.8 + T:FV"
        assert summaries[0].confluence_values == {"P": {"R1": 1}, "F": {"61.8": 1}, "T": {"FV": 1}}

    def test_trades_without_confluence_excluded(self):
        trades = [make_trade(10), make_trade(-10, pivots="S1")]
        summaries = self.engine.summarize_by_confluence_combination(trades)
        assert [s.group_key for s in summaries] == ["P:S1"]
        assert sum(s.total for s in summaries) == 1

    def test_split_by_market_condition(self):
        trades = [
            make_trade(10, pivots="R1", market_condition="Balanced"),
            make_trade(-10, pivots="R1", market_condition="Imbalanced"),
            make_trade(5, pivots="R1", market_condition=""),
        ]
        summaries = self.engine.summarize_by_confluence_combination(
            trades, AnalyticsOptions(split_by_market_condition=True)
        )
        groups = by_key(summaries)
        assert set(groups) == {"P:R1 (Balanced)", "P:R1 (Imbalanced)", "P:R1 (Unknown)"}
        assert groups["P:R1 (Imbalanced)"].market_condition == "Imbalanced"

    def test_type_only_keys_merge_values(self):
        trades = [make_trade(10, pivots="R1"), make_trade(-10, pivots="S2")]
        summaries = self.engine.summarize_by_confluence_combination(
            trades, AnalyticsOptions(combination_by_type_only=True)
        )
        assert len(summaries) == 1
        assert summaries[0].group_key == "P"
        assert summaries[0].confluence_values == {"P": {"R1": 1, "S2": 1}}

    def test_sorted_by_win_rate_then_average_and_capped(self):
        trades = []
        for i in range(20):
            # alternate wins and losses across 20 distinct pivot values
            trades.append(make_trade(i + 1 if i % 2 == 0 else -(i + 1), pivots=f"L{i}"))
        summaries = self.engine.summarize_by_confluence_combination(trades)
        assert len(summaries) == 15
        ranking = [(s.win_rate, s.avg_profit_loss) for s in summaries]
        assert ranking == sorted(ranking, key=lambda r: (-r[0], -r[1]))
        assert summaries[0].group_key == "P:L18"

    def test_limit_override(self):
        trades = [make_trade(1, pivots=f"L{i}") for i in range(5)]
        summaries = self.engine.summarize_by_confluence_combination(trades, AnalyticsOptions(combination_limit=2))
        assert len(summaries) == 2


class TestSummaryInvariants:
    def test_partition_and_breakeven_only_group(self):
        trades = [make_trade(0, market_condition="Flat"), make_trade(0, market_condition="Flat")]
        summaries = TradeAnalyticsEngine().summarize_by_market_condition(trades)
        flat = summaries[0]
        assert flat.breakeven == 2
        assert flat.win_rate == 0
        for dimension in Dimension:
            for s in summarize(trades, dimension):
                assert s.wins + s.losses + s.breakeven == s.total

    def test_breakeven_excluded_from_win_rate(self):
        trades = [make_trade(10), make_trade(0), make_trade(-5), make_trade(8)]
        monday = by_key(TradeAnalyticsEngine().summarize_by_day_of_week(trades))["Monday"]
        # 2 wins out of 3 decisive trades
        assert monday.win_rate == 67

    def test_to_dict_shape(self):
        summary = TradeAnalyticsEngine().summarize_by_confluence_count(EXAMPLE_TRADES)[0]
        payload = summary.to_dict()
        assert payload["groupKey"] == 0
        assert "avgProfitLoss" in payload
        assert payload["winRate"] == 0


class TestInvalidInput:
    @pytest.mark.parametrize("bad", [None, "trades", {"a": 1}, 42])
    def test_non_list_rejected(self, bad):
        with pytest.raises(InvalidInputError):
            TradeAnalyticsEngine().summarize_by_market_condition(bad)

    def test_non_trade_items_rejected(self):
        with pytest.raises(InvalidInputError):
            TradeAnalyticsEngine().summarize_by_day_of_week([{"profit_loss": 1}])

    def test_invalid_input_is_type_error(self):
        assert issubclass(InvalidInputError, TypeError)


def test_summarize_dispatch_accepts_string_dimension():
    summaries = summarize(EXAMPLE_TRADES, "trend")
    assert [s.group_key for s in summaries] == [WITH_TREND, AGAINST_TREND]


def test_engine_from_config_uses_limit():
    class StubConfig:
        combination_separator = " & "
        unknown_label = "N/A"
        combination_limit = 1

    engine = TradeAnalyticsEngine.from_config(StubConfig())
    trades = [
        make_trade(1, pivots="R1", fib="50", market_condition=""),
        make_trade(2, pivots="R2"),
    ]
    summaries = engine.summarize_by_confluence_combination(trades, AnalyticsOptions(split_by_market_condition=True))
    assert len(summaries) == 1
    assert summaries[0].group_key in ("P:R1 & F:50 (N/A)", "P:R2 (Balanced)")


def test_print_table(capsys):
    engine = TradeAnalyticsEngine()
    engine.print_table(engine.summarize_by_confluence_count(EXAMPLE_TRADES), "Confluence Count Analysis")
    out = capsys.readouterr().out
    assert "Confluence Count Analysis" in out
    assert "Avg P/L" in out
    assert "100%" in out


def test_print_table_empty(capsys):
    TradeAnalyticsEngine().print_table([])
    assert "No trades to analyze." in capsys.readouterr().out
