# backend/crop_rate.py

"""
Crop Rate Bridge

Converts between mass per area rates (eg t/ha) and volume per area rates
(eg bu/ac) for a named crop, using fixed per-crop factors:
- Bushel crops: grams per bushel
- Bale crops: grams per bale

The area unit is carried through unchanged across the mass ↔ volume leg and
only converted in the final ratio conversion.
"""

from enum import Enum
from typing import Dict, List, Optional
import logging

from compound_unit import split_compound_unit
from conversion_errors import ConversionError, UnknownCropError
from measurements import MassAreaRatioMeasurement, VolumeAreaRatioMeasurement
from unit_conversion_engine import (
    ConversionStep,
    FactorSource,
    is_mass_area_ratio_unit,
    is_volume_area_ratio_unit,
    record_step,
    value_from_to,
)
from unit_registry import BALE, BUSHEL, GRAM, UnitCategory, UnitDescriptor, resolve

logger = logging.getLogger(__name__)

# ==================== CROPS ====================

class Crop(str, Enum):
    """Crops whose harvest can be recorded by mass or by bushel / bale"""
    ALFALFA = "alfalfa"
    BARLEY = "barley"
    CORN = "corn"
    COTTON = "cotton"
    FLAX = "flax"
    LUCERNE = "lucerne"
    MAIZE = "maize"
    MILLET = "millet"
    OATS = "oats"
    RYE = "rye"
    SORGHUM = "sorghum"
    SOYBEAN = "soybean"
    SOYBEANS = "soybeans"
    SPELT = "spelt"
    WHEAT = "wheat"


# Grams in one bushel of the crop
CROP_BUSHELS_TO_GRAMS: Dict[Crop, float] = {
    Crop.ALFALFA: 27215.5,
    Crop.BARLEY: 21772,
    Crop.CORN: 25400,
    Crop.FLAX: 25401.2,
    Crop.LUCERNE: 27215.5,
    Crop.MAIZE: 25400,
    Crop.MILLET: 22679.6,
    Crop.OATS: 14515,  # US 32 lb bushel
    Crop.RYE: 25401.2,
    Crop.SORGHUM: 25400,
    Crop.SOYBEAN: 27215.5,
    Crop.SOYBEANS: 27215.5,
    Crop.SPELT: 18143.7,
    Crop.WHEAT: 27215.5,
}

# Grams in one bale of the crop
CROP_BALES_TO_GRAMS: Dict[Crop, float] = {
    Crop.COTTON: 226800,  # 500 lb
}

BUSHEL_CROPS: List[Crop] = list(CROP_BUSHELS_TO_GRAMS)
BALE_CROPS: List[Crop] = list(CROP_BALES_TO_GRAMS)


def resolve_crop(crop: Optional[str]) -> Crop:
    """
    Resolve a crop name (case-insensitive) to a Crop.

    Raises:
        UnknownCropError: Crop is empty or in neither factor table
    """
    if crop:
        name = crop.strip().lower()
        for known in Crop:
            if known.value == name:
                return known
    raise UnknownCropError(
        crop,
        [c.value for c in BUSHEL_CROPS],
        [c.value for c in BALE_CROPS]
    )


def is_bushel_crop(crop: str) -> bool:
    return any(c.value == crop.strip().lower() for c in BUSHEL_CROPS)


def is_bale_crop(crop: str) -> bool:
    return any(c.value == crop.strip().lower() for c in BALE_CROPS)


def _crop_volume(crop: Crop):
    """(volume unit, grams per unit) for a crop"""
    if crop in CROP_BUSHELS_TO_GRAMS:
        return BUSHEL, CROP_BUSHELS_TO_GRAMS[crop]
    return BALE, CROP_BALES_TO_GRAMS[crop]


def bushels_to_grams(crop: str, bushels: float) -> float:
    """Mass in grams of a number of bushels of a bushel crop."""
    c = resolve_crop(crop)
    if c not in CROP_BUSHELS_TO_GRAMS:
        raise UnknownCropError(crop, [b.value for b in BUSHEL_CROPS], [])
    return bushels * CROP_BUSHELS_TO_GRAMS[c]


def grams_to_bushels(crop: str, grams: float) -> float:
    """Number of bushels of a bushel crop in a mass in grams."""
    c = resolve_crop(crop)
    if c not in CROP_BUSHELS_TO_GRAMS:
        raise UnknownCropError(crop, [b.value for b in BUSHEL_CROPS], [])
    return grams / CROP_BUSHELS_TO_GRAMS[c]


def bales_to_grams(crop: str, bales: float) -> float:
    """Mass in grams of a number of bales of a bale crop."""
    c = resolve_crop(crop)
    if c not in CROP_BALES_TO_GRAMS:
        raise UnknownCropError(crop, [], [b.value for b in BALE_CROPS])
    return bales * CROP_BALES_TO_GRAMS[c]


def grams_to_bales(crop: str, grams: float) -> float:
    """Number of bales of a bale crop in a mass in grams."""
    c = resolve_crop(crop)
    if c not in CROP_BALES_TO_GRAMS:
        raise UnknownCropError(crop, [], [b.value for b in BALE_CROPS])
    return grams / CROP_BALES_TO_GRAMS[c]


# ==================== CROP RATE ====================

def crop_rate(
    crop: Optional[str],
    value: float,
    from_unit: str,
    to_unit: str,
    steps: Optional[List[ConversionStep]] = None
) -> float:
    """
    Crop-aware rate conversion.

    Mass per area ↔ volume per area needs a crop; anything else (kg/ha → lb/ac,
    l/ha → gal/ac, or plain units) converts as value_from_to does and the crop
    is ignored.

    Args:
        crop: Crop name, eg "wheat" or "Cotton"
        value: Rate value
        from_unit: Source compound unit, eg t1ha-1
        to_unit: Target compound unit, eg bu1ac-1
        steps: Optional audit trail to append conversion steps to

    Returns:
        Converted rate value

    Raises:
        UnknownCropError: Units need a crop bridge and the crop is empty or unknown
        ConversionError subclasses: Units are bad (see value_from_to)
    """
    if from_unit == to_unit:
        record_step(steps, from_unit, value, to_unit, value, 1.0, FactorSource.IDENTITY)
        return value

    mass_to_volume = is_mass_area_ratio_unit(from_unit) and is_volume_area_ratio_unit(to_unit)
    volume_to_mass = is_volume_area_ratio_unit(from_unit) and is_mass_area_ratio_unit(to_unit)
    if not mass_to_volume and not volume_to_mass:
        return value_from_to(value, from_unit, to_unit, steps)

    resolved = resolve_crop(crop)
    volume_unit, grams_per_unit = _crop_volume(resolved)

    if mass_to_volume:
        result = _mass_rate_to_volume_rate(value, from_unit, to_unit, volume_unit, grams_per_unit, steps)
    else:
        result = _volume_rate_to_mass_rate(value, from_unit, to_unit, volume_unit, grams_per_unit, steps)

    logger.debug(f"Crop rate ({resolved.value}): {value} {from_unit} → {result} {to_unit}")
    return result


def _target_units(to_unit: str, numerator_category: UnitCategory):
    try:
        numerator, denominator = split_compound_unit(to_unit)
    except ConversionError as e:
        raise e.on_side("to_unit")
    return (
        resolve(numerator_category, numerator, field="to_unit.numerator"),
        resolve(UnitCategory.AREA, denominator, field="to_unit.denominator"),
    )


def _mass_rate_to_volume_rate(
    value: float,
    from_unit: str,
    to_unit: str,
    volume_unit: UnitDescriptor,
    grams_per_unit: float,
    steps: Optional[List[ConversionStep]]
) -> float:
    mass_rate = MassAreaRatioMeasurement.from_unit_string(value, from_unit)
    to_numerator, to_denominator = _target_units(to_unit, UnitCategory.VOLUME)

    grams = mass_rate.numerator.to(GRAM).value
    record_step(steps, mass_rate.unit.numerator.symbol, value, GRAM.symbol, grams,
                mass_rate.unit.numerator.factor, FactorSource.UNIT_SCALE)

    count = grams / grams_per_unit
    record_step(steps, GRAM.symbol, grams, volume_unit.symbol, count,
                1 / grams_per_unit, FactorSource.CROP_FACTOR)

    # Same area unit as the source
    volume_rate = VolumeAreaRatioMeasurement.of(count, volume_unit, mass_rate.area_unit)
    result = volume_rate.to(to_numerator, to_denominator)
    record_step(steps, volume_rate.label(), count, result.label(), result.value,
                result.value / count if count else 0.0, FactorSource.RATIO_SCALE)
    return result.value


def _volume_rate_to_mass_rate(
    value: float,
    from_unit: str,
    to_unit: str,
    volume_unit: UnitDescriptor,
    grams_per_unit: float,
    steps: Optional[List[ConversionStep]]
) -> float:
    volume_rate = VolumeAreaRatioMeasurement.from_unit_string(value, from_unit)
    to_numerator, to_denominator = _target_units(to_unit, UnitCategory.MASS)
    source_volume = volume_rate.unit.numerator

    # Bushel / bale count per source area unit
    count = volume_rate.numerator.to(volume_unit).value
    record_step(steps, source_volume.symbol, value, volume_unit.symbol, count,
                source_volume.factor / volume_unit.factor, FactorSource.UNIT_SCALE)

    grams = count * grams_per_unit
    record_step(steps, volume_unit.symbol, count, GRAM.symbol, grams,
                grams_per_unit, FactorSource.CROP_FACTOR)

    mass_rate = MassAreaRatioMeasurement.of(grams, GRAM, volume_rate.area_unit)
    result = mass_rate.to(to_numerator, to_denominator)
    record_step(steps, mass_rate.label(), grams, result.label(), result.value,
                result.value / grams if grams else 0.0, FactorSource.RATIO_SCALE)
    return result.value

