import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from confluence import is_present
from trade import Trade

LOGGER = logging.getLogger(__name__)


class RuleType(str, Enum):
    """The kinds of personal trading rules a journal can enforce."""
    PAIR = "pair"
    DAY = "day"
    LOT = "lot"
    ACTION_DIRECTION = "action_direction"


@dataclass(frozen=True)
class TradingRule:
    rule_type: RuleType
    allowed_values: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "TradingRule":
        return cls(
            rule_type=RuleType(payload["rule_type"]),
            allowed_values=[str(v) for v in payload.get("allowed_values", [])],
        )


@dataclass(frozen=True)
class RuleViolation:
    rule_type: RuleType
    violated_value: str
    allowed_values: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ruleType": self.rule_type.value,
            "violatedValue": self.violated_value,
            "allowedValues": list(self.allowed_values),
        }


@dataclass
class RuleCheckResult:
    trade: Trade
    violations: List[RuleViolation] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.violations


def _parse_range(text: str):
    low, sep, high = text.partition("-")
    if not sep:
        raise ValueError(f"lot range '{text}' is not in 'min-max' form")
    return float(low), float(high)


def _lots_allowed(lots: float, allowed_ranges: Sequence[str]) -> bool:
    for allowed in allowed_ranges:
        try:
            low, high = _parse_range(allowed)
        except ValueError as exc:
            LOGGER.warning("Ignoring malformed lot range: %s", exc)
            continue
        if low <= lots <= high:
            return True
    return False


def _violated_value(trade: Trade, rule: TradingRule) -> Optional[str]:
    if rule.rule_type == RuleType.PAIR:
        if is_present(trade.pair) and trade.pair not in rule.allowed_values:
            return trade.pair
    elif rule.rule_type == RuleType.DAY:
        if is_present(trade.day) and trade.day not in rule.allowed_values:
            return trade.day
    elif rule.rule_type == RuleType.LOT:
        if trade.lots is not None and not _lots_allowed(trade.lots, rule.allowed_values):
            return f"{trade.lots:g}"
    elif rule.rule_type == RuleType.ACTION_DIRECTION:
        # "No" means counter-trend entries are not allowed
        if "No" in rule.allowed_values and is_present(trade.action) and is_present(trade.direction):
            action = trade.action.strip().capitalize()
            direction = trade.direction.strip().capitalize()
            counter_trend = (action == "Buy" and direction == "Bearish") or (
                action == "Sell" and direction == "Bullish"
            )
            if counter_trend:
                return f"{action} when {direction}"
    return None


def check_trade_against_rules(trade: Trade, rules: Sequence[TradingRule]) -> RuleCheckResult:
    """
    Checks a single trade against the user's rules.

    Args:
        trade (Trade): The trade to check.
        rules (Sequence[TradingRule]): Rules from the active profile.

    Returns:
        RuleCheckResult: Holds one RuleViolation per broken rule.
    """
    result = RuleCheckResult(trade=trade)
    for rule in rules:
        violated = _violated_value(trade, rule)
        if violated is not None:
            result.violations.append(
                RuleViolation(rule.rule_type, violated, list(rule.allowed_values))
            )
    return result


def check_trades(trades: Sequence[Trade], rules: Sequence[TradingRule]) -> List[RuleCheckResult]:
    """Returns check results for the trades that broke at least one rule."""
    results = [check_trade_against_rules(trade, rules) for trade in trades]
    return [result for result in results if not result.is_valid]
