"""Tests for domain models and fixed-point helpers."""

from decimal import Decimal

import pytest

from uniagent.models import FeeQuote, format_units, parse_units


class TestFormatUnits:
    """Tests for fixed-point to decimal string conversion."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (0, "0.0"),
            (10**18, "1.0"),
            (15 * 10**17, "1.5"),
            (1, "0.000000000000000001"),
            (123456 * 10**14, "12.3456"),
            (-25 * 10**16, "-0.25"),
        ],
    )
    def test_format(self, value, expected):
        """Test formatting with 18 decimals."""
        assert format_units(value) == expected

    def test_custom_decimals(self):
        """Test formatting with 6 decimals."""
        assert format_units(2_500_000, decimals=6) == "2.5"

    def test_parse_units(self):
        """Test decimal to fixed-point conversion."""
        assert parse_units(Decimal("1.5")) == 15 * 10**17
        assert parse_units(Decimal("0")) == 0


class TestFeeQuote:
    """Tests for fee quote rendering."""

    def test_usd_properties(self):
        """Test that every fee component renders as a decimal string."""
        quote = FeeQuote(
            total=parse_units(Decimal("1.25")),
            gas=parse_units(Decimal("0.75")),
            service=parse_units(Decimal("0.4")),
            lp=parse_units(Decimal("0.1")),
        )

        assert quote.total_usd == "1.25"
        assert quote.gas_usd == "0.75"
        assert quote.service_usd == "0.4"
        assert quote.lp_usd == "0.1"

    def test_defaults_are_zero(self):
        """Test an empty quote."""
        assert FeeQuote().total_usd == "0.0"
