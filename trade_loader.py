"""
Helpers for loading trade journal exports (JSON, JSONL or CSV) into Trade records.
"""

import csv
import datetime
import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple

import jsonschema

import file_utils
from trade import Trade

LOGGER = logging.getLogger(__name__)

DEFAULT_SCHEMA_PATH = file_utils.data_path("schemas", "trade_record.schema.json")

# Trade field -> accepted column names (database snake_case first, then client camelCase).
FIELD_ALIASES: Dict[str, Tuple[str, ...]] = {
    "id": ("id",),
    "date": ("date",),
    "profit_loss": ("profit_loss", "profitLoss"),
    "day": ("day",),
    "market_condition": ("market_condition", "marketCondition"),
    "action": ("action",),
    "direction": ("direction",),
    "pivots": ("pivots",),
    "banking_level": ("banking_level", "bankingLevel"),
    "ma": ("ma",),
    "fib": ("fib",),
    "top_bob_fv": ("top_bob_fv", "topBobFv"),
    "pair": ("pair",),
    "entry_time": ("entry_time", "entryTime"),
    "lots": ("lots",),
    "true_reward": ("true_reward", "trueReward"),
    "true_tp_sl": ("true_tp_sl", "trueTpSl"),
}

_NUMBER_PATTERN = re.compile(r"-?\d+(?:\.\d+)?")
_CURRENCY_TOKENS = ("USD", "CAD", "$")
_DATE_FORMATS = ("%Y-%m-%d", "%Y-%m-%dT%H:%M:%S", "%Y-%m-%d %H:%M:%S", "%m/%d/%Y")


class MalformedRecord(ValueError):
    """A row in an export that could not be decoded at all."""


def parse_number(value: Any) -> Optional[float]:
    """
    Parse a numeric cell leniently: "$1,250.50", "-$30", "(30)", "30-",
    "-12.5 USD" and unicode minus signs are all accepted. Returns None if no
    number is found.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    text = str(value).strip()
    if not text:
        return None
    negative = text.startswith("(") and text.endswith(")")
    text = text.strip("()").replace("−", "-").replace("–", "-").replace(",", "")
    for token in _CURRENCY_TOKENS:
        text = text.replace(token, "")
    text = text.strip()
    if text.endswith("-"):
        negative = True
        text = text[:-1].strip()
    if text.startswith("-"):
        negative = True
        text = text[1:].strip()
    match = _NUMBER_PATTERN.search(text)
    if not match:
        return None
    number = abs(float(match.group(0)))
    return -number if negative else number


def parse_date(value: Any) -> Optional[datetime.date]:
    if value is None:
        return None
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    text = str(value).strip()
    if not text:
        return None
    # Timestamps such as "2024-03-05T10:00:00+00:00" only need their date part
    if re.match(r"^\d{4}-\d{2}-\d{2}[T ]", text):
        text = text[:10]
    for fmt in _DATE_FORMATS:
        try:
            return datetime.datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    LOGGER.debug("Unrecognised trade date %r", value)
    return None


def _pick(record: Dict[str, Any], field_name: str) -> Any:
    for key in FIELD_ALIASES[field_name]:
        if key in record:
            return record[key]
    return None


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def trade_from_record(record: Dict[str, Any]) -> Trade:
    """
    Convert one exported row into a Trade.

    Raises:
        ValueError: If the row has no usable profit/loss value.
    """
    profit_loss = parse_number(_pick(record, "profit_loss"))
    if profit_loss is None:
        raise ValueError(f"Trade record {record.get('id')!r} has no numeric profit/loss")

    return Trade(
        profit_loss=profit_loss,
        date=parse_date(_pick(record, "date")),
        day=_text(_pick(record, "day")),
        market_condition=_text(_pick(record, "market_condition")),
        action=_text(_pick(record, "action")),
        direction=_text(_pick(record, "direction")),
        pivots=_text(_pick(record, "pivots")),
        banking_level=_text(_pick(record, "banking_level")),
        ma=_text(_pick(record, "ma")),
        fib=_text(_pick(record, "fib")),
        top_bob_fv=_text(_pick(record, "top_bob_fv")),
        id=_text(_pick(record, "id")),
        pair=_text(_pick(record, "pair")),
        entry_time=_text(_pick(record, "entry_time")),
        lots=parse_number(_pick(record, "lots")),
        true_reward=_text(_pick(record, "true_reward")),
        true_tp_sl=_text(_pick(record, "true_tp_sl")),
    )


def load_schema(schema_path: Optional[Path] = None) -> Dict[str, Any]:
    path = Path(schema_path) if schema_path else DEFAULT_SCHEMA_PATH
    try:
        with open(path, "r", encoding="utf-8") as schema_file:
            return json.load(schema_file)
    except FileNotFoundError:
        LOGGER.warning("Trade record schema not found at %s", path)
        return {}


def iter_records(file_path: str) -> Iterator[Dict[str, Any]]:
    """
    Yield raw row dicts from a JSON array, JSONL or CSV export.

    Undecodable JSONL lines come through as MalformedRecord instances.
    """
    path = Path(file_path)
    suffix = path.suffix.lower()
    if suffix == ".csv":
        with open(path, "r", encoding="utf-8-sig", newline="") as file:
            for row in csv.DictReader(file):
                yield {key.strip(): value for key, value in row.items() if key}
    elif suffix == ".jsonl":
        with open(path, "r", encoding="utf-8") as file:
            for line in file:
                if not line.strip():
                    continue
                try:
                    record = json.loads(line)
                except ValueError as exc:
                    # yielded, not raised, so one bad line only costs that row
                    record = MalformedRecord(f"line is not valid JSON: {exc}")
                yield record
    else:
        with open(path, "r", encoding="utf-8") as file:
            payload = json.load(file)
        if isinstance(payload, dict):
            # Supabase style responses wrap rows in "data"
            payload = payload.get("data", [])
        if not isinstance(payload, list):
            raise ValueError(f"{file_path} does not contain a list of trade records")
        yield from payload


def load_trades(file_path: str, strict: bool = False, schema_path: Optional[Path] = None) -> List[Trade]:
    """
    Load and validate trades from a single export file.

    Rows failing schema validation or lacking a profit/loss are skipped with a
    warning, or raise ValueError when strict is True.
    """
    schema = load_schema(schema_path)
    trades: List[Trade] = []
    for index, record in enumerate(iter_records(file_path)):
        try:
            if isinstance(record, MalformedRecord):
                raise record
            if not isinstance(record, dict):
                raise ValueError(f"expected an object, got {type(record).__name__}")
            if schema:
                jsonschema.validate(instance=record, schema=schema)
            trades.append(trade_from_record(record))
        except (jsonschema.ValidationError, ValueError) as exc:
            message = getattr(exc, "message", str(exc))
            if strict:
                raise ValueError(f"Invalid trade record #{index} in {file_path}: {message}") from exc
            LOGGER.warning("Skipping trade record #%d in %s: %s", index, file_path, message)
    LOGGER.info("Loaded %d trades from %s", len(trades), file_path)
    return trades


def load_trades_from_dir(
    directory: str, pattern: str, latest_only: bool = True, strict: bool = False
) -> List[Trade]:
    """
    Load trades from the exports in a directory.

    With latest_only, only the newest matching export is read. Otherwise all
    matching exports are merged; trades sharing an id are kept once, the
    newest export winning.
    """
    exports = file_utils.list_exports(directory, pattern)
    if not exports:
        raise FileNotFoundError(f"No trade export matching '{pattern}' in {directory}")
    if latest_only:
        return load_trades(str(exports[0]), strict=strict)

    unique_trades: Dict[str, Trade] = {}
    anonymous: List[Trade] = []
    for export in reversed(exports):
        for trade in load_trades(str(export), strict=strict):
            if trade.id is None:
                anonymous.append(trade)
            else:
                unique_trades[trade.id] = trade
    return list(unique_trades.values()) + anonymous
