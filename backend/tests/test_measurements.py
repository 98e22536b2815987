# backend/tests/test_measurements.py

"""
Unit tests for measurements and ratio units

Tests cover:
- Simple measurement conversion and zero handling
- Ratio unit labels (bracket wrapping)
- Two-step ratio conversion (numerator, then denominator)
- Ratio unit construction from compound unit strings
"""

import pytest
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from conversion_errors import IncompatibleUnitsError, InvalidCompoundUnitError
from measurements import (
    MassAreaRatioMeasurement,
    MassAreaRatioUnit,
    Measurement,
    RatioUnit,
    VolumeAreaRatioMeasurement,
    VolumeAreaRatioUnit,
)
from unit_registry import (
    ACRE,
    CUBIC_METRE,
    GALLON,
    HECTARE,
    KILOGRAM,
    LITRE,
    POUND,
    SQUARE_KILOMETRE,
    SQUARE_METRE,
    SQUARE_MILE,
    TON,
    TONNE,
)


class TestMeasurement:
    """Test simple measurement conversion"""

    def test_area(self):
        m = Measurement(value=10000, unit=SQUARE_METRE).to(HECTARE)
        assert m.value == pytest.approx(1)
        assert m.unit == HECTARE

    def test_mass(self):
        m = Measurement(value=1, unit=KILOGRAM).to(POUND)
        assert m.value == pytest.approx(2.20462, rel=1e-5)

    def test_zero_stays_zero(self):
        m = Measurement(value=0, unit=ACRE).to(HECTARE)
        assert m.value == 0

    def test_category_mismatch(self):
        with pytest.raises(IncompatibleUnitsError):
            Measurement(value=1, unit=KILOGRAM).to(LITRE)

    def test_immutable(self):
        m = Measurement(value=1, unit=KILOGRAM)
        with pytest.raises(Exception):
            m.value = 2


class TestRatioUnitLabel:
    """Test exponent-form labels of ratio units"""

    @pytest.mark.parametrize("numerator,denominator,expected", [
        (KILOGRAM, HECTARE, "kg1ha-1"),
        (LITRE, SQUARE_METRE, "l1[m2]-1"),
        (CUBIC_METRE, SQUARE_METRE, "[m3]1[m2]-1"),
        (TON, SQUARE_MILE, "ton1[mi2]-1"),
        (TONNE, SQUARE_KILOMETRE, "t1[km2]-1"),
    ])
    def test_str(self, numerator, denominator, expected):
        assert str(RatioUnit(numerator=numerator, denominator=denominator)) == expected

    def test_mass_area_ratio_unit_rejects_volume_numerator(self):
        with pytest.raises(ValueError):
            MassAreaRatioUnit(numerator=LITRE, denominator=HECTARE)

    def test_volume_area_ratio_unit_rejects_mass_denominator(self):
        with pytest.raises(ValueError):
            VolumeAreaRatioUnit(numerator=LITRE, denominator=KILOGRAM)


class TestRatioUnitFromLabel:
    """Test building ratio units from compound unit strings"""

    def test_mass_area(self):
        unit = MassAreaRatioUnit.from_label("kg/ha")
        assert unit.numerator == KILOGRAM
        assert unit.denominator == HECTARE

    def test_volume_area(self):
        unit = VolumeAreaRatioUnit.from_label("US gal 1 acre -1")
        assert unit.numerator == GALLON
        assert unit.denominator == ACRE

    def test_wrong_numerator_kind(self):
        with pytest.raises(InvalidCompoundUnitError) as exc_info:
            MassAreaRatioUnit.from_label("l1ha-1")

        assert exc_info.value.field == "numerator"


class TestRatioMeasurement:
    """Test two-step ratio conversion"""

    def test_kg_per_ha_to_lb_per_ac(self):
        rate = MassAreaRatioMeasurement.of(100, KILOGRAM, HECTARE)
        converted = rate.to(POUND, ACRE)
        assert converted.value == pytest.approx(89.2179, rel=1e-4)
        assert converted.label() == "lb1ac-1"

    def test_only_denominator_changes(self):
        rate = MassAreaRatioMeasurement.of(1, KILOGRAM, HECTARE)
        assert rate.to(KILOGRAM, ACRE).value == pytest.approx(0.404686, rel=1e-5)

    def test_gal_per_ac_to_l_per_ha(self):
        rate = VolumeAreaRatioMeasurement.from_unit_string(1, "gal1ac-1")
        assert rate.to(LITRE, HECTARE).value == pytest.approx(9.35396, rel=1e-5)

    def test_round_trip(self):
        rate = MassAreaRatioMeasurement.of(123.4, TONNE, HECTARE)
        back = rate.to(TON, ACRE).to(TONNE, HECTARE)
        assert back.value == pytest.approx(123.4)

    def test_zero(self):
        rate = VolumeAreaRatioMeasurement.of(0, LITRE, HECTARE)
        assert rate.to(GALLON, ACRE).value == 0

    def test_numerator_and_area_unit(self):
        rate = MassAreaRatioMeasurement.of(5, KILOGRAM, HECTARE)
        assert rate.numerator == Measurement(value=5, unit=KILOGRAM)
        assert rate.area_unit == HECTARE
