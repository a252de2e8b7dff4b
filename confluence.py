"""
Helpers for reading the confluence fields recorded on a trade.
"""

from typing import List, Optional, Tuple

from trade import Trade

# Fixed tag order: Pivot, Banking, MA, Fib, Top/Bottom of Balance & Fair Value.
CONFLUENCE_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("P", "pivots"),
    ("B", "banking_level"),
    ("M", "ma"),
    ("F", "fib"),
    ("T", "top_bob_fv"),
)

CONFLUENCE_LABELS = {
    "P": "Pivot",
    "B": "Banking",
    "M": "MA",
    "F": "Fib",
    "T": "Balance",
}

MISSING_SENTINELS = ("None", "none")
DEFAULT_SEPARATOR = " + "


def is_present(value: Optional[str]) -> bool:
    """Returns True if a free-text field holds a real value."""
    if value is None:
        return False
    text = str(value).strip()
    return bool(text) and text not in MISSING_SENTINELS


def active_confluences(trade: Trade) -> List[Tuple[str, str]]:
    """
    Lists the confluences present on a trade.

    Args:
        trade (Trade): The trade to inspect.

    Returns:
        List[Tuple[str, str]]: (tag, value) pairs in the fixed tag order.
    """
    active = []
    for tag, field_name in CONFLUENCE_FIELDS:
        value = getattr(trade, field_name, None)
        if is_present(value):
            active.append((tag, str(value).strip()))
    return active


def count_confluences(trade: Trade) -> int:
    return len(active_confluences(trade))


def combination_key(
    trade: Trade, by_type_only: bool = False, separator: str = DEFAULT_SEPARATOR
) -> Optional[str]:
    """
    Builds the combination signature for a trade, e.g. "P:R1 + F:61.8".

    Returns None when the trade has no active confluence.
    """
    active = active_confluences(trade)
    if not active:
        return None
    return format_combination_key(active, by_type_only, separator)


def format_combination_key(
    active: List[Tuple[str, str]], by_type_only: bool = False, separator: str = DEFAULT_SEPARATOR
) -> str:
    if by_type_only:
        return separator.join(tag for tag, _ in active)
    return separator.join(f"{tag}:{value}" for tag, value in active)
