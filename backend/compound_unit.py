# backend/compound_unit.py

"""
Compound unit grammar.

A compound (ratio) unit is written in one of two forms:
- Exponent form: <NUM>1<DEN>-1, eg kg1ha-1, [m3]1[m2]-1, kg 1 ha -1
- Slash form: <NUM>/<DEN>, eg kg/ha, l / m2

Splitting always validates that the numerator is a mass or volume unit and
the denominator is an area unit.
"""

from typing import Tuple

from conversion_errors import CompoundUnitSyntaxError, InvalidCompoundUnitError
from unit_registry import MEGALITRE_SYMBOL, is_area_unit, is_mass_unit, is_volume_unit

EXPONENT_MARKER = "-1"
SLASH_MARKER = "/"

NUMERATOR_EXPECTATION = "a mass or volume unit"
DENOMINATOR_EXPECTATION = "an area unit"


def looks_compound(unit: str) -> bool:
    """Hint that unit is a compound unit. Does not validate."""
    return EXPONENT_MARKER in unit or SLASH_MARKER in unit


def split_compound_unit(unit: str) -> Tuple[str, str]:
    """
    Split a compound unit into (numerator, denominator) unit strings.

    For example: "l1ha-1" OR "l/ha" -> ("l", "ha")

    Raises:
        CompoundUnitSyntaxError: Neither form, or wrong number of segments
        InvalidCompoundUnitError: Numerator not mass/volume, or denominator not area
    """
    if EXPONENT_MARKER in unit:
        numerator, denominator = _split_exponent_form(unit)
    elif SLASH_MARKER in unit:
        numerator, denominator = _split_slash_form(unit)
    else:
        raise CompoundUnitSyntaxError(unit)

    _validate_sides(unit, numerator, denominator)
    return numerator, denominator


def join_compound_unit(numerator: str, denominator: str) -> str:
    """
    Join numerator and denominator unit strings into exponent form.

    Units with an exponent (m2, ft3) or a space (fl oz) are wrapped in square
    brackets, eg ("m3", "m2") -> "[m3]1[m2]-1".

    Raises:
        InvalidCompoundUnitError: Numerator not mass/volume, or denominator not area
    """
    _validate_sides(f"{numerator}{SLASH_MARKER}{denominator}", numerator, denominator)
    return f"{wrap_segment(numerator)}1{wrap_segment(denominator)}{EXPONENT_MARKER}"


def wrap_segment(segment: str) -> str:
    if segment[-1:] in ("2", "3") or " " in segment:
        return f"[{segment}]"
    return segment


def _split_exponent_form(unit: str) -> Tuple[str, str]:
    # Strip the trailing exponent; the remaining "1" separates the two sides
    stripped = unit.strip().rstrip(EXPONENT_MARKER)
    parts = stripped.split("1")
    if len(parts) != 2:
        raise CompoundUnitSyntaxError(
            unit,
            f"Compound unit '{unit}' split into {len(parts)} parts, should be 2"
        )
    return _normalize_segment(parts[0]), _normalize_segment(parts[1])


def _split_slash_form(unit: str) -> Tuple[str, str]:
    parts = unit.split(SLASH_MARKER)
    if len(parts) != 2:
        raise CompoundUnitSyntaxError(
            unit,
            f"Compound unit '{unit}' split into {len(parts)} parts, should be 2"
        )
    return _normalize_segment(parts[0]), _normalize_segment(parts[1])


def _normalize_segment(segment: str) -> str:
    """Trim whitespace and brackets, then lower-case (megalitre keeps its capital M)."""
    s = segment.strip().lstrip("[").rstrip("]").strip()
    if s == MEGALITRE_SYMBOL:
        return s
    return s.lower()


def _validate_sides(unit: str, numerator: str, denominator: str) -> None:
    if not is_mass_unit(numerator) and not is_volume_unit(numerator):
        raise InvalidCompoundUnitError(unit, "numerator", numerator, NUMERATOR_EXPECTATION)
    if not is_area_unit(denominator):
        raise InvalidCompoundUnitError(unit, "denominator", denominator, DENOMINATOR_EXPECTATION)
