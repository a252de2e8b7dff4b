import datetime
import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional, Sequence

from group_summary import calculate_win_rate
from streak import Streak
from trade import Trade
from trade_analytics_engine import AnalyticsOptions, TradeAnalyticsEngine
from trade_loader import parse_number

LOGGER = logging.getLogger(__name__)


@dataclass
class PerformanceOverview:
    """Headline metrics for a filtered set of trades."""
    total_trades: int = 0
    winning_trades: int = 0
    losing_trades: int = 0
    breakeven_trades: int = 0
    win_rate: int = 0
    total_profit_loss: float = 0.0
    total_true_reward: float = 0.0
    total_pips: float = 0.0
    max_consecutive_losses: int = 0
    max_consecutive_wins: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _sum_numeric(values) -> float:
    total = 0.0
    for value in values:
        number = parse_number(value)
        if number is not None:
            total += number
    return total


def _chronological_key(trade: Trade):
    return (trade.date or datetime.date.min, trade.entry_time or "")


def compute_overview(
    trades: Sequence[Trade],
    options: Optional[AnalyticsOptions] = None,
    engine: Optional[TradeAnalyticsEngine] = None,
) -> PerformanceOverview:
    """
    Computes totals, win rate, reward/pip sums and streaks for the trades
    matching options.

    Streaks are measured over the trades sorted by date and entry time.
    Unparsable true reward / true TP-SL values count as zero.
    """
    engine = engine or TradeAnalyticsEngine()
    filtered = engine.filter_trades(trades, options)
    if not filtered:
        return PerformanceOverview()

    wins = sum(1 for t in filtered if t.is_win)
    losses = sum(1 for t in filtered if t.is_loss)
    breakeven = sum(1 for t in filtered if t.is_breakeven)

    streak = Streak()
    for trade in sorted(filtered, key=_chronological_key):
        streak.process(trade.profit_loss)

    overview = PerformanceOverview(
        total_trades=len(filtered),
        winning_trades=wins,
        losing_trades=losses,
        breakeven_trades=breakeven,
        win_rate=calculate_win_rate(wins, len(filtered), breakeven),
        total_profit_loss=sum(t.profit_loss for t in filtered),
        total_true_reward=_sum_numeric(t.true_reward for t in filtered),
        total_pips=_sum_numeric(t.true_tp_sl for t in filtered),
        max_consecutive_losses=streak.max_consecutive_losses,
        max_consecutive_wins=streak.max_consecutive_wins,
    )
    LOGGER.debug("Computed overview for %d trades", overview.total_trades)
    return overview
