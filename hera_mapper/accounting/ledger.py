"""Balanced-entry precondition for journal-style postings."""
import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Dict, Iterable

from hera_mapper.errors import UnbalancedEntryError

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


def to_amount(value: Any) -> Decimal:
    """Convert a line amount to Decimal rounded to cents; None counts as zero."""
    if value is None or value == "":
        return Decimal("0.00")
    try:
        # str() keeps floats like 0.1 from carrying binary noise
        amount = Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"Invalid amount: {value!r}")
    if not amount.is_finite():
        raise ValueError(f"Invalid amount: {value!r}")
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def validate_journal_entry(lines: Iterable[Dict[str, Any]]) -> Dict[str, Decimal]:
    """
    Check that a journal entry's debits and credits balance.

    Args:
        lines: Entry lines, each with optional "debit" and "credit" amounts

    Returns:
        {"debits": total, "credits": total}

    Raises:
        UnbalancedEntryError: If the totals differ
        ValueError: If an amount is not a number or is negative
    """
    debits = Decimal("0.00")
    credits = Decimal("0.00")
    count = 0

    for line in lines:
        debit = to_amount(line.get("debit"))
        credit = to_amount(line.get("credit"))
        if debit < 0 or credit < 0:
            raise ValueError(f"Negative amount on line {count + 1}")
        debits += debit
        credits += credit
        count += 1

    if debits != credits:
        logger.warning(f"Rejected unbalanced entry with {count} lines")
        raise UnbalancedEntryError(debits, credits)

    return {"debits": debits, "credits": credits}
