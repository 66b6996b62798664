"""Tests for length unit conversion."""

from __future__ import annotations

import logging

import pytest

from famai.units import from_canonical, is_length_unit, normalize_unit, to_canonical


class TestToCanonical:
    def test_millimeters(self) -> None:
        assert to_canonical(304.8, "mm") == pytest.approx(1.0)

    def test_centimeters(self) -> None:
        assert to_canonical(30.48, "cm") == pytest.approx(1.0)

    def test_inches(self) -> None:
        assert to_canonical(36, "in") == pytest.approx(3.0)

    def test_feet_idempotent(self) -> None:
        assert to_canonical(7.25, "ft") == 7.25
        assert to_canonical(to_canonical(7.25, "ft"), "ft") == 7.25

    @pytest.mark.parametrize("unit", ["millimeter", "millimetres", "MM", "mm."])
    def test_aliases(self, unit: str) -> None:
        assert to_canonical(609.6, unit) == pytest.approx(2.0)

    def test_symbol_aliases(self) -> None:
        assert to_canonical(6, "'") == 6
        assert to_canonical(6, '"') == pytest.approx(0.5)


class TestRoundTrip:
    @pytest.mark.parametrize("value", [1.0, 900.0, 1234.5, 0.01])
    def test_mm_round_trip(self, value: float) -> None:
        assert from_canonical(to_canonical(value, "mm"), "mm") == pytest.approx(value)

    def test_inch_round_trip(self) -> None:
        assert from_canonical(to_canonical(42.0, "inches"), "in") == pytest.approx(42.0)


class TestUnknownUnits:
    def test_passes_through_unconverted(self) -> None:
        assert to_canonical(5.0, "furlong") == 5.0

    def test_reports_to_warning_channel(self) -> None:
        warnings: list[str] = []
        to_canonical(5.0, "furlong", warnings)
        assert len(warnings) == 1
        assert "furlong" in warnings[0]

    def test_logs_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="famai.units"):
            from_canonical(1.0, "cubit")
        assert "cubit" in caplog.text


class TestUnitRecognition:
    def test_normalize(self) -> None:
        assert normalize_unit("Feet") == "ft"
        assert normalize_unit("centimetre") == "cm"
        assert normalize_unit("parsec") is None

    def test_is_length_unit(self) -> None:
        assert is_length_unit("inch")
        assert not is_length_unit("wide")
