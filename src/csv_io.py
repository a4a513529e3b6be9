import csv
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterable, Iterator, Optional, TextIO

from errors import InputFormatError
from models import AccountSnapshot, DisputeAction, DisputeActionType, Transaction, TransactionType
from registry import Event

OUTPUT_FIELDS = ("client", "available", "held", "total", "locked")

MAX_CLIENT_ID = 2**16 - 1
MAX_TRANSACTION_ID = 2**32 - 1
MAX_AMOUNT_SCALE = 28
MAX_AMOUNT_INTEGER_DIGITS = 28


def read_events(stream: TextIO) -> Iterator[Event]:
    """
    Yield typed events from a CSV stream with a `type, client, tx, amount` header.
    Surrounding whitespace in headers and values is ignored.
    Raises InputFormatError on the first malformed row.
    """
    reader = csv.DictReader(stream)
    for row in reader:
        yield parse_row(row, reader.line_num)


def parse_row(row: Dict[Optional[str], Optional[str]], line_number: Optional[int] = None) -> Event:
    """Parse one CSV row into a Transaction or DisputeAction."""
    # Extra trailing columns land under the None key.
    normalized = {k.strip(): (v or "").strip() for k, v in row.items() if k is not None}

    for field in ("type", "client", "tx"):
        if not normalized.get(field):
            raise InputFormatError(f"missing '{field}' in {row}", line_number)

    type_str = normalized["type"].lower()
    client_id = _parse_id(normalized["client"], "client", MAX_CLIENT_ID, line_number)
    transaction_id = _parse_id(normalized["tx"], "tx", MAX_TRANSACTION_ID, line_number)

    if type_str in {t.value for t in TransactionType}:
        return Transaction(
            transaction_type=TransactionType(type_str),
            client_id=client_id,
            transaction_id=transaction_id,
            amount=_parse_amount(normalized.get("amount", ""), line_number),
        )
    if type_str in {t.value for t in DisputeActionType}:
        return DisputeAction(
            action_type=DisputeActionType(type_str),
            client_id=client_id,
            transaction_id=transaction_id,
        )
    raise InputFormatError(f"unknown transaction type '{normalized['type']}'", line_number)


def _parse_id(value: str, field: str, maximum: int, line_number: Optional[int]) -> int:
    try:
        parsed = int(value)
    except ValueError:
        raise InputFormatError(f"'{field}' is not an integer: '{value}'", line_number) from None
    if not 0 <= parsed <= maximum:
        raise InputFormatError(f"'{field}' out of range: {parsed}", line_number)
    return parsed


def _parse_amount(value: str, line_number: Optional[int]) -> Decimal:
    if not value:
        raise InputFormatError("missing 'amount'", line_number)
    try:
        amount = Decimal(value)
    except InvalidOperation:
        raise InputFormatError(f"'amount' is not a decimal: '{value}'", line_number) from None
    if not amount.is_finite():
        raise InputFormatError(f"'amount' is not finite: '{value}'", line_number)
    if amount < 0:
        raise InputFormatError(f"'amount' is negative: '{value}'", line_number)
    # Keeps every reachable balance exactly representable in MONEY_CONTEXT.
    if amount.as_tuple().exponent < -MAX_AMOUNT_SCALE or amount.adjusted() >= MAX_AMOUNT_INTEGER_DIGITS:
        raise InputFormatError(f"'amount' out of range: '{value}'", line_number)
    return amount


def format_decimal(value: Decimal) -> str:
    """Plain notation keeping the scale of non-zero values (1.0 -> '1.0'); zero is always '0'."""
    if value == 0:
        return "0"
    return f"{value:f}"


def write_snapshots(snapshots: Iterable[AccountSnapshot], stream: TextIO) -> None:
    """Write one `client,available,held,total,locked` row per account, ordered by client id."""
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(OUTPUT_FIELDS)
    for snapshot in sorted(snapshots, key=lambda s: s.client_id):
        writer.writerow([
            snapshot.client_id,
            format_decimal(snapshot.available),
            format_decimal(snapshot.held),
            format_decimal(snapshot.total),
            str(snapshot.locked).lower(),
        ])
