# backend/tests/test_dilution.py

"""
Unit tests for diluted product application rates
"""

import pytest
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from conversion_errors import InvalidDilutionError
from dilution import DilutedProductApplication
from unit_registry import GRAM, HECTARE


def make_application(**overrides):
    values = {
        "product_amount": 1,
        "product_unit_label": "g",
        "carrier_solvent_amount": 10,
        "carrier_solvent_unit_label": "l",
        "carrier_application_amount": 100,
        "carrier_application_unit_label": "l",
        "area_unit_label": "ha",
    }
    values.update(overrides)
    return DilutedProductApplication(**values)


class TestApplicationRate:
    """Test product rate over area"""

    def test_grams_per_ten_litres(self):
        value, unit = make_application().application_rate()
        assert value == pytest.approx(10)
        assert unit == "g1ha-1"

    def test_grams_per_litre(self):
        value, unit = make_application(
            product_amount=15,
            carrier_solvent_amount=1,
            carrier_application_amount=150,
        ).application_rate()
        assert value == pytest.approx(2250)
        assert unit == "g1ha-1"

    def test_volume_product(self):
        value, unit = make_application(
            product_amount=15,
            product_unit_label="ml",
            carrier_solvent_amount=1,
            carrier_application_amount=150,
        ).application_rate()
        assert value == pytest.approx(2250)
        assert unit == "ml1ha-1"

    def test_mass_carrier_with_unit_conversion(self):
        value, unit = make_application(
            product_amount=250,
            carrier_solvent_amount=10,
            carrier_solvent_unit_label="kg",
            carrier_application_amount=1.5,
            carrier_application_unit_label="t",
        ).application_rate()
        assert value == pytest.approx(37500)
        assert unit == "g1ha-1"

    def test_label_wraps_area_with_exponent(self):
        _, unit = make_application(area_unit_label="square metres").application_rate()
        assert unit == "g1[m2]-1"

    def test_all_zero(self):
        value, unit = make_application(
            product_amount=0,
            carrier_solvent_amount=0,
            carrier_application_amount=0,
        ).application_rate()
        assert value == 0
        assert unit == "g1ha-1"


class TestUnitCheck:
    """Test that units are validated before calculating"""

    def test_returns_units(self):
        product_unit, area_unit = make_application().unit_check()
        assert product_unit == GRAM
        assert area_unit == HECTARE

    def test_carrier_kinds_must_match(self):
        with pytest.raises(InvalidDilutionError) as exc_info:
            make_application(carrier_application_unit_label="kg").application_rate()

        assert exc_info.value.error_code == "INVALID_DILUTION"
        assert exc_info.value.field == "carrier_application_unit_label"

    def test_invalid_area(self):
        with pytest.raises(InvalidDilutionError) as exc_info:
            make_application(area_unit_label="kg").unit_check()

        assert exc_info.value.field == "area_unit_label"

    def test_product_must_be_mass_or_volume(self):
        with pytest.raises(InvalidDilutionError) as exc_info:
            make_application(product_unit_label="ha").unit_check()

        assert exc_info.value.field == "product_unit_label"

    def test_unknown_product_unit(self):
        with pytest.raises(InvalidDilutionError) as exc_info:
            make_application(product_unit_label="scoops").unit_check()

        assert exc_info.value.field == "product_unit_label"

    def test_unknown_solvent_unit(self):
        with pytest.raises(InvalidDilutionError) as exc_info:
            make_application(carrier_solvent_unit_label="buckets").unit_check()

        assert exc_info.value.field == "carrier_solvent_unit_label"

    def test_zero_solvent_amount(self):
        with pytest.raises(InvalidDilutionError) as exc_info:
            make_application(carrier_solvent_amount=0).unit_check()

        assert exc_info.value.field == "carrier_solvent_amount"
