import datetime
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Trade:
    """
    A single journal entry as supplied by the trade loader.

    Only `profit_loss` is guaranteed to be set; every other field may be None
    or an empty string and is treated as absent by the analytics.
    """
    profit_loss: float
    date: Optional[datetime.date] = None
    day: Optional[str] = None
    market_condition: Optional[str] = None
    action: Optional[str] = None        # "Buy" | "Sell"
    direction: Optional[str] = None     # "Bullish" | "Bearish"

    # Confluences
    pivots: Optional[str] = None
    banking_level: Optional[str] = None
    ma: Optional[str] = None
    fib: Optional[str] = None
    top_bob_fv: Optional[str] = None

    id: Optional[str] = None
    pair: Optional[str] = None
    entry_time: Optional[str] = None
    lots: Optional[float] = None
    true_reward: Optional[str] = None
    true_tp_sl: Optional[str] = None

    @property
    def is_win(self) -> bool:
        return self.profit_loss > 0

    @property
    def is_loss(self) -> bool:
        return self.profit_loss < 0

    @property
    def is_breakeven(self) -> bool:
        return self.profit_loss == 0
