"""
Unit tests for journal entry balancing
"""

from decimal import Decimal

import pytest

from hera_mapper.accounting.ledger import to_amount, validate_journal_entry
from hera_mapper.errors import UnbalancedEntryError


class TestToAmount:
    """Test amount parsing"""

    def test_rounding(self):
        """Amounts are rounded half up to cents"""
        assert to_amount("10.005") == Decimal("10.01")
        assert to_amount(0.1) == Decimal("0.10")
        assert to_amount(7) == Decimal("7.00")

    def test_missing_is_zero(self):
        """None and empty strings count as zero"""
        assert to_amount(None) == Decimal("0.00")
        assert to_amount("") == Decimal("0.00")

    def test_invalid(self):
        """Non-numeric and non-finite amounts are rejected"""
        with pytest.raises(ValueError):
            to_amount("ten")
        with pytest.raises(ValueError):
            to_amount("Infinity")


class TestValidateJournalEntry:
    """Test the balanced-entry rule"""

    def test_balanced(self):
        """Matching totals are returned"""
        totals = validate_journal_entry([
            {"account": "1100", "debit": "150.00"},
            {"account": "4000", "credit": 100},
            {"account": "2200", "credit": "50"},
        ])

        assert totals == {"debits": Decimal("150.00"), "credits": Decimal("150.00")}

    def test_unbalanced(self):
        """Mismatched totals raise with both sums"""
        with pytest.raises(UnbalancedEntryError) as exc_info:
            validate_journal_entry([
                {"account": "1100", "debit": 100},
                {"account": "4000", "credit": 99.99},
            ])

        assert exc_info.value.debits == Decimal("100.00")
        assert exc_info.value.credits == Decimal("99.99")

    def test_float_noise_does_not_unbalance(self):
        """0.1 + 0.2 balances against 0.3"""
        totals = validate_journal_entry([
            {"debit": 0.1},
            {"debit": 0.2},
            {"credit": 0.3},
        ])

        assert totals["debits"] == Decimal("0.30")

    def test_negative_amount(self):
        """Negative amounts are rejected"""
        with pytest.raises(ValueError):
            validate_journal_entry([{"debit": -5}, {"credit": -5}])

    def test_empty_entry(self):
        """An entry without lines balances at zero"""
        assert validate_journal_entry([]) == {"debits": Decimal("0.00"), "credits": Decimal("0.00")}
