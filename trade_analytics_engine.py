import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence

from confluence import (
    DEFAULT_SEPARATOR,
    active_confluences,
    count_confluences,
    format_combination_key,
    is_present,
)
from group_summary import GroupAccumulator, GroupKey, GroupSummary
from trade import Trade

LOGGER = logging.getLogger(__name__)

WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday")
WITH_TREND = "With Trend"
AGAINST_TREND = "Against Trend"
SEEDED_CONFLUENCE_COUNTS = (0, 1, 2, 3, 4)
DEFAULT_COMBINATION_LIMIT = 15


class InvalidInputError(TypeError):
    """Raised when the analytics are handed something other than a list of trades."""


class Dimension(str, Enum):
    MARKET_CONDITION = "market_condition"
    DAY_OF_WEEK = "day_of_week"
    TREND = "trend"
    CONFLUENCE_COUNT = "confluence_count"
    CONFLUENCE_COMBINATION = "confluence_combination"


@dataclass(frozen=True)
class AnalyticsOptions:
    """Filters and grouping switches for a single summarize call."""
    month: Optional[int] = None             # 1-12
    year: Optional[int] = None
    market_condition: Optional[str] = None
    split_by_market_condition: bool = False
    combination_by_type_only: bool = False
    combination_limit: Optional[int] = None


def validate_trades(trades) -> None:
    if not isinstance(trades, (list, tuple)):
        raise InvalidInputError(
            f"Input 'trades' must be a list of Trade objects, got {type(trades).__name__}."
        )
    for index, trade in enumerate(trades):
        if not isinstance(trade, Trade):
            raise InvalidInputError(
                f"Item {index} of 'trades' is {type(trade).__name__}, expected Trade."
            )


class TradeAnalyticsEngine:
    """
    Groups journal trades along one dimension and rolls up win rate and P/L
    for each group.

    Every summarize_* method validates its input, applies the pre-filter from
    the given AnalyticsOptions and returns a new list of GroupSummary objects.
    The input list is never modified.

    Args:
        combination_separator (str): Joins the parts of a confluence combination key.
        unknown_label (str): Bucket name for trades missing the grouped field.
        combination_limit (int): Max number of confluence combinations reported.
    """

    def __init__(
        self,
        combination_separator: str = DEFAULT_SEPARATOR,
        unknown_label: str = "Unknown",
        combination_limit: int = DEFAULT_COMBINATION_LIMIT,
    ):
        self.combination_separator = combination_separator
        self.unknown_label = unknown_label
        self.combination_limit = combination_limit

    @classmethod
    def from_config(cls, config) -> "TradeAnalyticsEngine":
        return cls(
            combination_separator=config.combination_separator,
            unknown_label=config.unknown_label,
            combination_limit=config.combination_limit,
        )

    # --- Pre-filtering ---
    def filter_trades(self, trades: Sequence[Trade], options: Optional[AnalyticsOptions] = None) -> List[Trade]:
        """Returns the trades matching the month, year and market condition in options."""
        validate_trades(trades)
        options = options or AnalyticsOptions()
        return [trade for trade in trades if self._matches(trade, options)]

    def _matches(self, trade: Trade, options: AnalyticsOptions) -> bool:
        if options.year is not None or options.month is not None:
            if trade.date is None:
                return False
            if options.year is not None and trade.date.year != options.year:
                return False
            if options.month is not None and trade.date.month != options.month:
                return False
        if options.market_condition is not None and trade.market_condition != options.market_condition:
            return False
        return True

    def _label(self, value: Optional[str]) -> str:
        return str(value).strip() if is_present(value) else self.unknown_label

    # --- Dimensions ---
    def summarize_by_market_condition(
        self, trades: Sequence[Trade], options: Optional[AnalyticsOptions] = None
    ) -> List[GroupSummary]:
        accumulators: Dict[GroupKey, GroupAccumulator] = {}
        for trade in self.filter_trades(trades, options):
            condition = self._label(trade.market_condition)
            self._bucket(accumulators, condition).add(trade)
        return [acc.build() for acc in accumulators.values()]

    def summarize_by_day_of_week(
        self, trades: Sequence[Trade], options: Optional[AnalyticsOptions] = None
    ) -> List[GroupSummary]:
        accumulators: Dict[GroupKey, GroupAccumulator] = {day: GroupAccumulator(day) for day in WEEKDAYS}
        for trade in self.filter_trades(trades, options):
            day = trade.day.strip() if isinstance(trade.day, str) else None
            if day not in WEEKDAYS:
                LOGGER.debug("Trade %s has unrecognised day %r", trade.id, trade.day)
                day = self.unknown_label
            self._bucket(accumulators, day).add(trade)
        return [acc.build() for acc in accumulators.values()]

    def summarize_by_trend_alignment(
        self, trades: Sequence[Trade], options: Optional[AnalyticsOptions] = None
    ) -> List[GroupSummary]:
        with_trend = GroupAccumulator(WITH_TREND)
        against_trend = GroupAccumulator(AGAINST_TREND)
        for trade in self.filter_trades(trades, options):
            if not (is_present(trade.action) and is_present(trade.direction)):
                LOGGER.debug("Skipping trade %s without action/direction", trade.id)
                continue
            action = trade.action.strip().capitalize()
            direction = trade.direction.strip().capitalize()
            is_with_trend = (action == "Buy" and direction == "Bullish") or (
                action == "Sell" and direction == "Bearish"
            )
            (with_trend if is_with_trend else against_trend).add(trade)
        return [with_trend.build(), against_trend.build()]

    def summarize_by_confluence_count(
        self, trades: Sequence[Trade], options: Optional[AnalyticsOptions] = None
    ) -> List[GroupSummary]:
        accumulators: Dict[GroupKey, GroupAccumulator] = {
            count: GroupAccumulator(count) for count in SEEDED_CONFLUENCE_COUNTS
        }
        for trade in self.filter_trades(trades, options):
            count = count_confluences(trade)
            self._bucket(accumulators, count).add(trade)
        return [
            accumulators[count].build(with_average=True)
            for count in sorted(accumulators)
            if accumulators[count].total > 0
        ]

    def summarize_by_confluence_combination(
        self, trades: Sequence[Trade], options: Optional[AnalyticsOptions] = None
    ) -> List[GroupSummary]:
        """
        Groups trades by the exact set of confluences they were taken on.

        Trades with no active confluence are left out. When
        split_by_market_condition is set, the market condition is appended to
        the key as " (<condition>)" so the same combination in different
        conditions is reported separately. Results are ordered by win rate,
        then average P/L, and capped at the combination limit.
        """
        options = options or AnalyticsOptions()
        accumulators: Dict[GroupKey, GroupAccumulator] = {}
        for trade in self.filter_trades(trades, options):
            active = active_confluences(trade)
            if not active:
                continue
            key = format_combination_key(active, options.combination_by_type_only, self.combination_separator)
            condition = None
            if options.split_by_market_condition:
                condition = self._label(trade.market_condition)
                key = f"{key} ({condition})"
            accumulator = self._bucket(accumulators, key)
            accumulator.market_condition = condition
            accumulator.add(trade)
            accumulator.track_values(active)

        results = [acc.build(with_average=True) for acc in accumulators.values()]
        results.sort(key=lambda summary: (-summary.win_rate, -summary.avg_profit_loss))
        limit = options.combination_limit if options.combination_limit is not None else self.combination_limit
        return results[:limit]

    def summarize(
        self,
        trades: Sequence[Trade],
        dimension: Dimension,
        options: Optional[AnalyticsOptions] = None,
    ) -> List[GroupSummary]:
        handlers = {
            Dimension.MARKET_CONDITION: self.summarize_by_market_condition,
            Dimension.DAY_OF_WEEK: self.summarize_by_day_of_week,
            Dimension.TREND: self.summarize_by_trend_alignment,
            Dimension.CONFLUENCE_COUNT: self.summarize_by_confluence_count,
            Dimension.CONFLUENCE_COMBINATION: self.summarize_by_confluence_combination,
        }
        return handlers[Dimension(dimension)](trades, options)

    @staticmethod
    def _bucket(accumulators: Dict[GroupKey, GroupAccumulator], key: GroupKey) -> GroupAccumulator:
        if key not in accumulators:
            accumulators[key] = GroupAccumulator(key)
        return accumulators[key]

    def print_table(self, summaries: Iterable[GroupSummary], title: Optional[str] = None):
        summaries = list(summaries)
        if title:
            print(f"\n--- {title} ---")
        if not summaries:
            print("\nNo trades to analyze.")
            return

        show_avg = any(s.avg_profit_loss is not None for s in summaries)
        key_width = max(10, max(len(str(s.group_key)) for s in summaries))
        headers = ["Group", "Total", "W", "L", "BE", "Win Rate", "P/L"]
        widths = [key_width, 6, 5, 5, 5, 9, 12]
        if show_avg:
            headers.append("Avg P/L")
            widths.append(10)

        header_line = " | ".join(
            f"{h:<{w}}" if i == 0 else f"{h:>{w}}" for i, (h, w) in enumerate(zip(headers, widths))
        )
        separator = '-' * len(header_line)
        print(separator)
        print(header_line)
        print(separator)

        for s in summaries:
            cells = [
                str(s.group_key), str(s.total), str(s.wins), str(s.losses), str(s.breakeven),
                f"{s.win_rate}%", f"{s.profit_loss:.2f}",
            ]
            if show_avg:
                cells.append(f"{s.avg_profit_loss:.2f}" if s.avg_profit_loss is not None else "")
            print(" | ".join(
                f"{c:<{w}}" if i == 0 else f"{c:>{w}}" for i, (c, w) in enumerate(zip(cells, widths))
            ))
        print(separator)


def summarize(
    trades: Sequence[Trade],
    dimension: Dimension,
    options: Optional[AnalyticsOptions] = None,
) -> List[GroupSummary]:
    """Summarizes trades along one dimension with default engine settings."""
    return TradeAnalyticsEngine().summarize(trades, dimension, options)
