# backend/tests/test_compound_unit.py

"""
Unit tests for the compound unit grammar

Tests cover:
- Exponent form (kg1ha-1, pt1[ft2]-1, spaced forms)
- Slash form (kg/ha, spaced, mixed case)
- Malformed syntax → CompoundUnitSyntaxError
- Wrong numerator / denominator category → InvalidCompoundUnitError
- Joining into exponent form with bracket wrapping
"""

import pytest
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from compound_unit import join_compound_unit, looks_compound, split_compound_unit
from conversion_errors import CompoundUnitSyntaxError, InvalidCompoundUnitError


class TestSplitCompoundUnit:
    """Test splitting compound units into numerator and denominator"""

    @pytest.mark.parametrize("unit,expected", [
        ("kg1ha-1", ("kg", "ha")),
        ("kg 1 ha -1", ("kg", "ha")),
        ("pt1[ft2]-1", ("pt", "ft2")),
        ("floz1[ft2]-1", ("floz", "ft2")),
        ("ozm1ac-1", ("ozm", "ac")),
        ("m3 1 ha-1", ("m3", "ha")),
        ("lb1ft2-1", ("lb", "ft2")),
        ("[m3]1[m2]-1", ("m3", "m2")),
    ])
    def test_exponent_form(self, unit, expected):
        assert split_compound_unit(unit) == expected

    @pytest.mark.parametrize("unit,expected", [
        ("kg/ha", ("kg", "ha")),
        ("kg  /  ha", ("kg", "ha")),
        ("Kg/Ha", ("kg", "ha")),
        ("l / m2", ("l", "m2")),
        ("kilograms/hectare", ("kilograms", "hectare")),
    ])
    def test_slash_form(self, unit, expected):
        assert split_compound_unit(unit) == expected

    def test_megalitre_keeps_capital(self):
        assert split_compound_unit("Ml/ha") == ("Ml", "ha")
        assert split_compound_unit("ml/ha") == ("ml", "ha")

    def test_empty_is_syntax_error(self):
        with pytest.raises(CompoundUnitSyntaxError) as exc_info:
            split_compound_unit("")

        assert exc_info.value.error_code == "MALFORMED_COMPOUND_UNIT"

    def test_simple_unit_is_syntax_error(self):
        with pytest.raises(CompoundUnitSyntaxError):
            split_compound_unit("kg")

    @pytest.mark.parametrize("unit", ["aa//bb", "lb//ac", "kg/ha/yr"])
    def test_wrong_segment_count(self, unit):
        with pytest.raises(CompoundUnitSyntaxError) as exc_info:
            split_compound_unit(unit)

        assert "should be 2" in exc_info.value.message

    def test_unknown_numerator(self):
        with pytest.raises(InvalidCompoundUnitError) as exc_info:
            split_compound_unit("xx1yy-1")

        assert exc_info.value.error_code == "INVALID_COMPOUND_UNIT"
        assert exc_info.value.field == "numerator"
        assert exc_info.value.segment == "xx"

    def test_slash_form_unknown_units(self):
        with pytest.raises(InvalidCompoundUnitError):
            split_compound_unit("aa/bb")

    def test_area_numerator_rejected(self):
        with pytest.raises(InvalidCompoundUnitError) as exc_info:
            split_compound_unit("[kg2]1ha-1")

        assert exc_info.value.field == "numerator"

    def test_volume_denominator_rejected(self):
        with pytest.raises(InvalidCompoundUnitError) as exc_info:
            split_compound_unit("kg1[ha3]-1")

        assert exc_info.value.field == "denominator"
        assert exc_info.value.segment == "ha3"

    def test_length_denominator_rejected(self):
        with pytest.raises(InvalidCompoundUnitError) as exc_info:
            split_compound_unit("kg/m")

        assert exc_info.value.field == "denominator"


class TestJoinCompoundUnit:
    """Test joining numerator and denominator into exponent form"""

    @pytest.mark.parametrize("numerator,denominator,expected", [
        ("kg", "ha", "kg1ha-1"),
        ("pt", "ft2", "pt1[ft2]-1"),
        ("m3", "m2", "[m3]1[m2]-1"),
        ("fl oz", "ac", "[fl oz]1ac-1"),
    ])
    def test_join(self, numerator, denominator, expected):
        assert join_compound_unit(numerator, denominator) == expected

    @pytest.mark.parametrize("numerator,denominator", [
        ("[m3]", "ha"),
        ("lb", "[ft2]"),
        ("kg2", "ha"),
        ("", ""),
    ])
    def test_join_rejects_invalid(self, numerator, denominator):
        with pytest.raises(InvalidCompoundUnitError):
            join_compound_unit(numerator, denominator)

    def test_join_then_split(self):
        joined = join_compound_unit("gal", "ac")
        assert split_compound_unit(joined) == ("gal", "ac")


class TestLooksCompound:
    def test_markers(self):
        assert looks_compound("kg1ha-1")
        assert looks_compound("kg/ha")
        assert not looks_compound("kg")
        assert not looks_compound("ac-ft")
