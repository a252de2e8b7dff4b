"""
Key-insight summaries derived from GroupSummary lists.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from confluence import CONFLUENCE_LABELS, DEFAULT_SEPARATOR
from group_summary import GroupSummary
from trade_analytics_engine import AGAINST_TREND, WITH_TREND


@dataclass
class BestAndWorst:
    best_by_win_rate: GroupSummary
    worst_by_win_rate: GroupSummary
    most_profitable: GroupSummary
    least_profitable: GroupSummary
    most_common: GroupSummary


@dataclass
class TrendComparison:
    with_trend: GroupSummary
    against_trend: GroupSummary
    favoured_by_win_rate: str
    win_rate_difference: int
    favoured_by_profit: str
    profit_difference: float


def best_and_worst(summaries: Sequence[GroupSummary]) -> Optional[BestAndWorst]:
    """Picks the stand-out groups of one dimension. Ties keep the first group in input order."""
    if not summaries:
        return None
    return BestAndWorst(
        best_by_win_rate=max(summaries, key=lambda s: s.win_rate),
        worst_by_win_rate=min(summaries, key=lambda s: s.win_rate),
        most_profitable=max(summaries, key=lambda s: s.profit_loss),
        least_profitable=min(summaries, key=lambda s: s.profit_loss),
        most_common=max(summaries, key=lambda s: s.total),
    )


def trend_comparison(summaries: Sequence[GroupSummary]) -> Optional[TrendComparison]:
    by_key = {s.group_key: s for s in summaries}
    with_trend = by_key.get(WITH_TREND)
    against_trend = by_key.get(AGAINST_TREND)
    if with_trend is None or against_trend is None:
        return None

    if with_trend.win_rate > against_trend.win_rate:
        favoured_rate = WITH_TREND
    else:
        favoured_rate = AGAINST_TREND
    if with_trend.profit_loss > against_trend.profit_loss:
        favoured_profit = WITH_TREND
    else:
        favoured_profit = AGAINST_TREND

    return TrendComparison(
        with_trend=with_trend,
        against_trend=against_trend,
        favoured_by_win_rate=favoured_rate,
        win_rate_difference=abs(with_trend.win_rate - against_trend.win_rate),
        favoured_by_profit=favoured_profit,
        profit_difference=abs(with_trend.profit_loss - against_trend.profit_loss),
    )


def top_combinations(summaries: Sequence[GroupSummary], n: int = 3) -> Dict[str, List[GroupSummary]]:
    """
    Top combinations by win rate (taken in the order given, which is already
    ranked by the engine) and by total P/L.
    """
    return {
        "by_win_rate": list(summaries[:n]),
        "by_profit_loss": sorted(summaries, key=lambda s: s.profit_loss, reverse=True)[:n],
    }


def format_combination(key: str, separator: str = DEFAULT_SEPARATOR) -> str:
    """
    Renders a combination key for people, e.g.
    "P:R1 + F:61.8 (Balanced)" -> "Pivot R1 + Fib 61.8 (Balanced)".
    """
    if not key:
        return "N/A"
    base, suffix = key, ""
    if " (" in key and key.endswith(")"):
        split_at = key.rindex(" (")
        base, suffix = key[:split_at], key[split_at:]

    parts = []
    for part in base.split(separator):
        tag, _, value = part.partition(":")
        label = CONFLUENCE_LABELS.get(tag, tag)
        parts.append(f"{label} {value}" if value else label)
    return separator.join(parts) + suffix


def describe_best_and_worst(insights: BestAndWorst, subject: str) -> List[str]:
    return [
        f"Best {subject} (Win Rate): {insights.best_by_win_rate.group_key} ({insights.best_by_win_rate.win_rate}% WR)",
        f"Worst {subject} (Win Rate): {insights.worst_by_win_rate.group_key} ({insights.worst_by_win_rate.win_rate}% WR)",
        f"Most Profitable {subject}: {insights.most_profitable.group_key} (${insights.most_profitable.profit_loss:.2f} P/L)",
        f"Least Profitable {subject}: {insights.least_profitable.group_key} (${insights.least_profitable.profit_loss:.2f} P/L)",
        f"Most Common {subject}: {insights.most_common.group_key} "
        f"({insights.most_common.total} trades, {insights.most_common.win_rate}% WR)",
    ]


def describe_trend(comparison: TrendComparison) -> List[str]:
    return [
        f"With Trend: {comparison.with_trend.win_rate}% WR ({comparison.with_trend.total} trades)",
        f"Against Trend: {comparison.against_trend.win_rate}% WR ({comparison.against_trend.total} trades)",
        f"Trading {comparison.favoured_by_win_rate.lower()} has a "
        f"{comparison.win_rate_difference}% higher win rate",
        f"Trading {comparison.favoured_by_profit.lower()} generated "
        f"${comparison.profit_difference:.2f} more profit",
    ]
