# backend/unit_conversion_engine.py

"""
Unit Conversion Engine

This engine is responsible for:
- Classifying unit strings into conversion families
- Simple conversions (length, area, mass, volume)
- Ratio conversions (mass per area, volume per area)
- Resolving any accepted label to its canonical unit
- Recording a conversion audit trail when asked to

This engine MUST NOT:
- Bridge mass and volume rates (crop_rate.py does that, with a crop)
- Guess units
- Default anything silently

INVARIANTS (ENFORCED):
1) Identical unit strings short-circuit: the value is returned unchanged
2) A unit belongs to a family if and only if it resolves in that family
3) The first family both units belong to wins
4) Zero converts to exactly zero
5) Every failure names the argument (from_unit / to_unit) and sub-unit
   (numerator / denominator) at fault

The engine is stateless; every call is independent and safe to run
concurrently.
"""

from enum import Enum
from typing import Dict, List, Optional, Tuple
from decimal import Decimal, ROUND_HALF_UP
from pydantic import BaseModel
import logging

from compound_unit import looks_compound, split_compound_unit
from conversion_errors import (
    ConversionError,
    IncompatibleUnitsError,
    NumeratorMismatchError,
    UnknownUnitError,
)
from measurements import (
    AnyUnit,
    MassAreaRatioMeasurement,
    MassAreaRatioUnit,
    Measurement,
    VolumeAreaRatioMeasurement,
    VolumeAreaRatioUnit,
)
from unit_registry import UnitCategory, classify, is_mass_unit, resolve

logger = logging.getLogger(__name__)

# ==================== ENUMS ====================

class UnitFamily(str, Enum):
    """Conversion families, in classification order"""
    AREA = "AREA"
    LENGTH = "LENGTH"
    MASS = "MASS"
    VOLUME = "VOLUME"
    MASS_AREA_RATIO = "MASS_AREA_RATIO"
    VOLUME_AREA_RATIO = "VOLUME_AREA_RATIO"


class FactorSource(str, Enum):
    """Where a conversion step's factor came from"""
    IDENTITY = "IDENTITY"
    UNIT_SCALE = "UNIT_SCALE"
    RATIO_SCALE = "RATIO_SCALE"
    CROP_FACTOR = "CROP_FACTOR"


FAMILY_ORDER: Tuple[UnitFamily, ...] = tuple(UnitFamily)

SIMPLE_FAMILY_CATEGORIES: Dict[UnitFamily, UnitCategory] = {
    UnitFamily.AREA: UnitCategory.AREA,
    UnitFamily.LENGTH: UnitCategory.LENGTH,
    UnitFamily.MASS: UnitCategory.MASS,
    UnitFamily.VOLUME: UnitCategory.VOLUME,
}

# Ratio family → (numerator category, measurement type)
RATIO_FAMILIES = {
    UnitFamily.MASS_AREA_RATIO: (UnitCategory.MASS, MassAreaRatioMeasurement),
    UnitFamily.VOLUME_AREA_RATIO: (UnitCategory.VOLUME, VolumeAreaRatioMeasurement),
}

# unit_from_label() resolution order for simple units
LABEL_CATEGORY_ORDER: Tuple[UnitCategory, ...] = (
    UnitCategory.AREA,
    UnitCategory.LENGTH,
    UnitCategory.MASS,
    UnitCategory.TIME,
    UnitCategory.VOLUME,
)

ENGINE_VERSION = "1.0.0"

# ==================== DATA MODELS ====================

class ConversionStep(BaseModel):
    """Single conversion step in audit trail"""
    step_number: int
    from_unit: str
    from_value: float
    to_unit: str
    to_value: float
    factor: float
    factor_source: FactorSource
    calculation_formula: str


def record_step(
    steps: Optional[List[ConversionStep]],
    from_unit: str,
    from_value: float,
    to_unit: str,
    to_value: float,
    factor: float,
    factor_source: FactorSource
) -> None:
    """Append a step to the audit trail, if one is being kept."""
    if steps is None:
        return
    steps.append(ConversionStep(
        step_number=len(steps) + 1,
        from_unit=from_unit,
        from_value=from_value,
        to_unit=to_unit,
        to_value=to_value,
        factor=factor,
        factor_source=factor_source,
        calculation_formula=f"{from_value} {from_unit} × {factor} = {to_value} {to_unit}"
    ))


# ==================== CLASSIFICATION ====================

def is_mass_area_ratio_unit(unit: str) -> bool:
    """True if unit is a compound unit with a mass numerator and area denominator."""
    return UnitFamily.MASS_AREA_RATIO in _ratio_families(unit)


def is_volume_area_ratio_unit(unit: str) -> bool:
    """True if unit is a compound unit with a volume numerator and area denominator."""
    return UnitFamily.VOLUME_AREA_RATIO in _ratio_families(unit)


def _ratio_families(unit: str) -> Tuple[UnitFamily, ...]:
    if not looks_compound(unit):
        return ()
    try:
        numerator, _ = split_compound_unit(unit)
    except ConversionError:
        return ()
    if is_mass_unit(numerator):
        return (UnitFamily.MASS_AREA_RATIO,)
    return (UnitFamily.VOLUME_AREA_RATIO,)


def unit_families(unit: str) -> Tuple[UnitFamily, ...]:
    """
    Classify a unit string into every family it resolves in.

    Returns:
        Families in classification order (empty if the unit resolves nowhere)
    """
    families = [
        family for family, category in SIMPLE_FAMILY_CATEGORIES.items()
        if classify(category, unit)
    ]
    families.extend(_ratio_families(unit))
    return tuple(families)


def conversion_family(from_unit: str, to_unit: str) -> UnitFamily:
    """
    Choose the conversion family for a pair of unit strings.

    Raises:
        UnknownUnitError / CompoundUnitSyntaxError / InvalidCompoundUnitError:
            A side resolves in no family
        NumeratorMismatchError: One side is mass per area, the other volume per area
        IncompatibleUnitsError: Both resolve, but to different families
    """
    from_families = unit_families(from_unit)
    to_families = unit_families(to_unit)

    for family in FAMILY_ORDER:
        if family in from_families and family in to_families:
            return family

    if not from_families:
        _raise_unresolved(from_unit, "from_unit")
    if not to_families:
        _raise_unresolved(to_unit, "to_unit")

    if UnitFamily.MASS_AREA_RATIO in from_families and UnitFamily.VOLUME_AREA_RATIO in to_families:
        raise NumeratorMismatchError(from_unit, to_unit, "mass", "volume")
    if UnitFamily.VOLUME_AREA_RATIO in from_families and UnitFamily.MASS_AREA_RATIO in to_families:
        raise NumeratorMismatchError(from_unit, to_unit, "volume", "mass")

    raise IncompatibleUnitsError(from_unit, to_unit)


def _raise_unresolved(unit: str, side: str) -> None:
    if looks_compound(unit):
        try:
            split_compound_unit(unit)
        except ConversionError as e:
            raise e.on_side(side)
    raise UnknownUnitError(unit, field=side)


def _split_side(unit: str, side: str) -> Tuple[str, str]:
    try:
        return split_compound_unit(unit)
    except ConversionError as e:
        raise e.on_side(side)


# ==================== CONVERSION ====================

def value_from_to(
    value: float,
    from_unit: str,
    to_unit: str,
    steps: Optional[List[ConversionStep]] = None
) -> float:
    """
    Convert a value from one unit to another.

    Units can be simple (lb, kg, ha) or compound (kg/ha, lb1ac-1).

    Args:
        value: Value to convert
        from_unit: Source unit label
        to_unit: Target unit label
        steps: Optional audit trail to append conversion steps to

    Returns:
        Converted value

    Raises:
        ConversionError subclasses (see conversion_family)
    """
    if from_unit == to_unit:
        record_step(steps, from_unit, value, to_unit, value, 1.0, FactorSource.IDENTITY)
        return value

    family = conversion_family(from_unit, to_unit)

    if family in RATIO_FAMILIES:
        result = convert_area_ratio(family, value, from_unit, to_unit, steps)
    else:
        result = convert_simple(family, value, from_unit, to_unit, steps)

    logger.debug(f"Converted {value} {from_unit} → {result} {to_unit} ({family.value})")
    return result


def convert_simple(
    family: UnitFamily,
    value: float,
    from_unit: str,
    to_unit: str,
    steps: Optional[List[ConversionStep]] = None
) -> float:
    """Convert between two simple units of the family's category."""
    category = SIMPLE_FAMILY_CATEGORIES[family]
    source = resolve(category, from_unit, field="from_unit")
    target = resolve(category, to_unit, field="to_unit")

    result = Measurement(value=value, unit=source).to(target).value
    record_step(steps, source.symbol, value, target.symbol, result,
                source.factor / target.factor, FactorSource.UNIT_SCALE)
    return result


def convert_area_ratio(
    family: UnitFamily,
    value: float,
    from_unit: str,
    to_unit: str,
    steps: Optional[List[ConversionStep]] = None
) -> float:
    """
    Convert a mass per area or volume per area value between units.

    Both sides are split and validated independently; a mass numerator on one
    side and a volume numerator on the other is rejected, because only a crop
    factor can bridge the two.
    """
    from_numerator, from_denominator = _split_side(from_unit, "from_unit")
    to_numerator, to_denominator = _split_side(to_unit, "to_unit")

    from_kind = "mass" if is_mass_unit(from_numerator) else "volume"
    to_kind = "mass" if is_mass_unit(to_numerator) else "volume"
    if from_kind != to_kind:
        raise NumeratorMismatchError(from_unit, to_unit, from_kind, to_kind)

    numerator_category, measurement_type = RATIO_FAMILIES[family]
    if from_kind != numerator_category.value:
        raise IncompatibleUnitsError(
            from_unit,
            to_unit,
            message=f"Incorrect units for {numerator_category.value} / area conversion: {from_unit} and {to_unit}"
        )

    source = measurement_type.of(
        value,
        resolve(numerator_category, from_numerator, field="from_unit.numerator"),
        resolve(UnitCategory.AREA, from_denominator, field="from_unit.denominator"),
    )
    target = source.to(
        resolve(numerator_category, to_numerator, field="to_unit.numerator"),
        resolve(UnitCategory.AREA, to_denominator, field="to_unit.denominator"),
    )

    record_step(steps, source.label(), value, target.label(), target.value,
                target.value / value if value else 0.0, FactorSource.RATIO_SCALE)
    return target.value


def convert_time_measurement(value: float, from_unit: str, to_unit: str) -> float:
    """Convert between time units. Time is not a value_from_to family."""
    if from_unit == to_unit:
        return value
    source = resolve(UnitCategory.TIME, from_unit, field="from_unit")
    target = resolve(UnitCategory.TIME, to_unit, field="to_unit")
    return Measurement(value=value, unit=source).to(target).value


# ==================== LABELS ====================

def unit_from_label(label: str) -> AnyUnit:
    """
    Resolve any accepted label, simple or compound, to its canonical unit.

    Resolution order: area, length, mass, time, volume, then mass per area and
    volume per area.

    Raises:
        UnknownUnitError: Label is not a simple unit and not a compound unit
        CompoundUnitSyntaxError / InvalidCompoundUnitError: Compound label is bad
    """
    for category in LABEL_CATEGORY_ORDER:
        if classify(category, label):
            return resolve(category, label, field="label")

    if label and looks_compound(label):
        numerator, _ = split_compound_unit(label)
        if is_mass_unit(numerator):
            return MassAreaRatioUnit.from_label(label)
        return VolumeAreaRatioUnit.from_label(label)

    raise UnknownUnitError(label or "", field="label")


def standard_label(label: str) -> str:
    """Return the standard label for a unit label, eg "kilograms / hectare" → "kg1ha-1"."""
    if label == "":
        return ""
    return str(unit_from_label(label))


def unit_category_name(unit: AnyUnit) -> str:
    """Category name for a resolved unit, eg "area" or "mass_area_ratio"."""
    if isinstance(unit, MassAreaRatioUnit):
        return UnitFamily.MASS_AREA_RATIO.value.lower()
    if isinstance(unit, VolumeAreaRatioUnit):
        return UnitFamily.VOLUME_AREA_RATIO.value.lower()
    return unit.category.value


# ==================== PRECISION ====================

def round_value(value: float, decimal_places: int) -> float:
    """Round half away from zero to the given number of decimal places."""
    decimal_value = Decimal(str(value))
    rounded = decimal_value.quantize(Decimal(10) ** -decimal_places, rounding=ROUND_HALF_UP)
    return float(rounded)
