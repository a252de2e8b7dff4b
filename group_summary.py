import math
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

from trade import Trade

GroupKey = Union[str, int]


def round_half_up(value: float) -> int:
    """Rounds .5 away from zero for positive values, matching percentage display."""
    return int(math.floor(value + 0.5))


def calculate_win_rate(wins: int, total: int, breakeven: int) -> int:
    """Win rate in whole percent, ignoring breakeven trades. 0 if nothing is decisive."""
    decisive = total - breakeven
    if decisive <= 0:
        return 0
    return round_half_up(wins / decisive * 100)


# --- Output statistics for one group of trades ---
@dataclass
class GroupSummary:
    """Represents the aggregated performance of one group of trades."""
    group_key: GroupKey
    total: int = 0
    wins: int = 0
    losses: int = 0
    breakeven: int = 0
    win_rate: int = 0
    profit_loss: float = 0.0
    avg_profit_loss: Optional[float] = None
    # Only populated by the confluence combination grouping
    market_condition: Optional[str] = None
    confluence_values: Dict[str, Dict[str, int]] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "groupKey": self.group_key,
            "total": self.total,
            "wins": self.wins,
            "losses": self.losses,
            "breakeven": self.breakeven,
            "winRate": self.win_rate,
            "profitLoss": self.profit_loss,
        }
        if self.avg_profit_loss is not None:
            payload["avgProfitLoss"] = self.avg_profit_loss
        if self.market_condition is not None:
            payload["marketCondition"] = self.market_condition
        if self.confluence_values:
            payload["confluenceValues"] = self.confluence_values
        return payload


class GroupAccumulator:
    """Collects trades for a single group and produces its GroupSummary."""

    def __init__(self, group_key: GroupKey):
        self.group_key = group_key
        self.total = 0
        self.wins = 0
        self.losses = 0
        self.breakeven = 0
        self.profit_loss = 0.0
        self.market_condition: Optional[str] = None
        self.confluence_values: Dict[str, Dict[str, int]] = defaultdict(lambda: defaultdict(int))

    def add(self, trade: Trade) -> None:
        self.total += 1
        self.profit_loss += trade.profit_loss
        if trade.is_win:
            self.wins += 1
        elif trade.is_loss:
            self.losses += 1
        else:
            self.breakeven += 1

    def track_values(self, active: List[Tuple[str, str]]) -> None:
        for tag, value in active:
            self.confluence_values[tag][value] += 1

    def build(self, with_average: bool = False) -> GroupSummary:
        avg_profit_loss = None
        if with_average:
            avg_profit_loss = (self.profit_loss / self.total) if self.total > 0 else 0.0
        return GroupSummary(
            group_key=self.group_key,
            total=self.total,
            wins=self.wins,
            losses=self.losses,
            breakeven=self.breakeven,
            win_rate=calculate_win_rate(self.wins, self.total, self.breakeven),
            profit_loss=self.profit_loss,
            avg_profit_loss=avg_profit_loss,
            market_condition=self.market_condition,
            confluence_values={tag: dict(values) for tag, values in self.confluence_values.items()},
        )
