# backend/measurements.py

"""
Measurements and ratio units.

- Measurement: a value in one simple unit, convertible within its category
- RatioUnit: any numerator unit over any denominator unit, used for labels
- MassAreaRatioUnit / VolumeAreaRatioUnit: the two conversion-bearing ratio units
- MassAreaRatioMeasurement / VolumeAreaRatioMeasurement: rates such as kg/ha, l/ac

Ratio conversion is two steps, in this order:
1) Convert the numerator value directly
2) Divide by how many target-denominator units equal one source-denominator unit
"""

from typing import ClassVar, Union
from pydantic import BaseModel, ConfigDict, field_validator

from compound_unit import split_compound_unit, wrap_segment
from conversion_errors import IncompatibleUnitsError, InvalidCompoundUnitError, UnknownUnitError
from unit_registry import UnitCategory, UnitDescriptor, resolve


class Measurement(BaseModel):
    """A value expressed in a simple unit"""
    model_config = ConfigDict(frozen=True)

    value: float
    unit: UnitDescriptor

    def to(self, unit: UnitDescriptor) -> "Measurement":
        """Convert to another unit of the same category. Zero stays exactly zero."""
        if unit.category != self.unit.category:
            raise IncompatibleUnitsError(self.unit.symbol, unit.symbol)
        value = self.value
        if value != 0:
            value = (value * self.unit.factor) / unit.factor
        return Measurement(value=value, unit=unit)


class RatioUnit(BaseModel):
    """A numerator unit per denominator unit"""
    model_config = ConfigDict(frozen=True)

    numerator: UnitDescriptor
    denominator: UnitDescriptor

    def __str__(self) -> str:
        return f"{wrap_segment(str(self.numerator))}1{wrap_segment(str(self.denominator))}-1"


class _AreaRatioUnit(RatioUnit):
    numerator_category: ClassVar[UnitCategory]

    @field_validator("numerator")
    @classmethod
    def check_numerator(cls, v: UnitDescriptor) -> UnitDescriptor:
        if v.category != cls.numerator_category:
            raise ValueError(f"numerator {v.symbol} is not a {cls.numerator_category.value} unit")
        return v

    @field_validator("denominator")
    @classmethod
    def check_denominator(cls, v: UnitDescriptor) -> UnitDescriptor:
        if v.category != UnitCategory.AREA:
            raise ValueError(f"denominator {v.symbol} is not an area unit")
        return v

    @classmethod
    def from_label(cls, unit: str) -> "_AreaRatioUnit":
        """
        Resolve a compound unit string into a ratio unit of this kind.

        Raises:
            CompoundUnitSyntaxError: Unit is not a compound unit
            InvalidCompoundUnitError: Numerator or denominator has the wrong category
        """
        numerator, denominator = split_compound_unit(unit)
        try:
            n = resolve(cls.numerator_category, numerator, field="numerator")
        except UnknownUnitError:
            raise InvalidCompoundUnitError(unit, "numerator", numerator, f"a {cls.numerator_category.value} unit")
        d = resolve(UnitCategory.AREA, denominator, field="denominator")
        return cls(numerator=n, denominator=d)


class MassAreaRatioUnit(_AreaRatioUnit):
    """Mass per area, eg kg1ha-1"""
    numerator_category: ClassVar[UnitCategory] = UnitCategory.MASS


class VolumeAreaRatioUnit(_AreaRatioUnit):
    """Volume per area, eg l1ha-1"""
    numerator_category: ClassVar[UnitCategory] = UnitCategory.VOLUME


class _AreaRatioMeasurement(BaseModel):
    model_config = ConfigDict(frozen=True)

    unit_type: ClassVar[type]

    value: float
    unit: _AreaRatioUnit

    @classmethod
    def of(cls, value: float, numerator: UnitDescriptor, denominator: UnitDescriptor):
        return cls(value=value, unit=cls.unit_type(numerator=numerator, denominator=denominator))

    @classmethod
    def from_unit_string(cls, value: float, compound_unit: str):
        """Build a rate from a value and a compound unit string such as kg1ha-1 or l/ac."""
        return cls(value=value, unit=cls.unit_type.from_label(compound_unit))

    @property
    def numerator(self) -> Measurement:
        """The numerator quantity in one denominator unit"""
        return Measurement(value=self.value, unit=self.unit.numerator)

    @property
    def area_unit(self) -> UnitDescriptor:
        return self.unit.denominator

    def to(self, numerator: UnitDescriptor, denominator: UnitDescriptor):
        """Convert to new numerator and denominator units."""
        value = self.numerator.to(numerator).value
        area_ratio = Measurement(value=1, unit=self.unit.denominator).to(denominator).value
        return self.of(value / area_ratio, numerator, denominator)

    def label(self) -> str:
        return str(self.unit)


class MassAreaRatioMeasurement(_AreaRatioMeasurement):
    """A mass per area rate, eg 100 kg/ha"""
    unit_type: ClassVar[type] = MassAreaRatioUnit

    unit: MassAreaRatioUnit


class VolumeAreaRatioMeasurement(_AreaRatioMeasurement):
    """A volume per area rate, eg 10 l/ha"""
    unit_type: ClassVar[type] = VolumeAreaRatioUnit

    unit: VolumeAreaRatioUnit


AnyUnit = Union[UnitDescriptor, MassAreaRatioUnit, VolumeAreaRatioUnit]
