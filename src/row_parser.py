import logging
from decimal import Decimal, InvalidOperation
from typing import Dict, Optional, Union

from models import (
    MAX_BALANCE,
    MAX_CLIENT_ID,
    MAX_TRANSACTION_ID,
    DisputeAction,
    DisputeActionKind,
    Transaction,
    TransactionKind,
    quantize_amount,
)

logger = logging.getLogger(__name__)

TRANSACTION_KINDS = {kind.value: kind for kind in TransactionKind}
DISPUTE_ACTION_KINDS = {kind.value: kind for kind in DisputeActionKind}


def _reject_digit_separators(value: str, field: str) -> None:
    # int() and Decimal() both accept PEP 515 underscores.
    if "_" in value:
        raise ValueError(f"{field} {value!r} contains digit separators")


def _parse_bounded_int(value: str, field: str, maximum: int) -> int:
    _reject_digit_separators(value, field)
    number = int(value)
    if not 0 <= number <= maximum:
        raise ValueError(f"{field} {number} out of range 0..{maximum}")
    return number


def _parse_amount(value: str) -> Decimal:
    if not value:
        raise ValueError("missing amount")
    _reject_digit_separators(value, "amount")
    amount = Decimal(value)
    if not amount.is_finite():
        raise ValueError(f"amount {value} is not a finite number")
    if amount < 0:
        raise ValueError(f"negative amount {value}")
    # Drops the sign of a negative zero.
    amount = quantize_amount(amount.copy_abs())
    if amount > MAX_BALANCE:
        raise ValueError(f"amount {value} exceeds {MAX_BALANCE}")
    return amount


def parse_csv_row(row: Dict[Optional[str], object]) -> Optional[Union[Transaction, DisputeAction]]:
    """
    Parse a csv.DictReader row into a Transaction or DisputeAction.
    Returns None for rows that match neither shape.
    """
    try:
        # Extra cells land under the None key, missing ones have None values.
        normalized = {
            k.strip(): (v or "").strip()
            for k, v in row.items()
            if isinstance(k, str) and not isinstance(v, list)
        }

        type_str = normalized["type"].lower()
        client_id = _parse_bounded_int(normalized["client"], "client", MAX_CLIENT_ID)
        transaction_id = _parse_bounded_int(normalized["tx"], "tx", MAX_TRANSACTION_ID)

        if type_str in TRANSACTION_KINDS:
            return Transaction(
                kind=TRANSACTION_KINDS[type_str],
                client_id=client_id,
                transaction_id=transaction_id,
                amount=_parse_amount(normalized.get("amount", "")),
            )
        if type_str in DISPUTE_ACTION_KINDS:
            return DisputeAction(
                kind=DISPUTE_ACTION_KINDS[type_str],
                client_id=client_id,
                transaction_id=transaction_id,
            )
        raise ValueError(f"unknown transaction type {type_str!r}")
    except (KeyError, ValueError, InvalidOperation) as e:
        logger.warning(f"Failed to parse row {row}: {e}")
        return None
