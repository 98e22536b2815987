# backend/conversion_errors.py

"""
Conversion error taxonomy.

Every fallible step of unit resolution and conversion raises one of these.
Each error carries:
- error_code: stable machine-readable code
- message: human-readable description naming the offending input
- field: which argument / sub-unit was invalid (from_unit, to_unit,
  numerator, denominator, crop, ...)
- severity: always HARD_ERROR (nothing is silently defaulted)
"""

from typing import Optional, List


class ConversionError(Exception):
    """Base conversion error"""
    def __init__(self, error_code: str, message: str, field: Optional[str] = None, severity: str = "HARD_ERROR"):
        self.error_code = error_code
        self.message = message
        self.field = field
        self.severity = severity
        super().__init__(self.message)

    def on_side(self, side: str) -> "ConversionError":
        """Qualify the field with the conversion side (from_unit / to_unit) it occurred on."""
        if self.field and not self.field.startswith(side):
            self.field = f"{side}.{self.field}"
        elif not self.field:
            self.field = side
        return self

    def to_dict(self) -> dict:
        return {
            "error_code": self.error_code,
            "message": self.message,
            "field": self.field,
            "severity": self.severity
        }


class UnknownUnitError(ConversionError):
    """Unit not recognized"""
    def __init__(self, unit: str, category: Optional[str] = None, field: Optional[str] = None):
        if category:
            message = f"Unit '{unit}' is not a recognized {category} unit"
        else:
            message = f"Unit '{unit}' is not recognized in any unit category"
        super().__init__(
            "UNKNOWN_UNIT",
            message,
            field=field,
            severity="HARD_ERROR"
        )
        self.unit = unit
        self.category = category


class CompoundUnitSyntaxError(ConversionError):
    """Compound unit text is not in exponent or slash form"""
    def __init__(self, unit: str, detail: Optional[str] = None):
        message = detail or (
            f"Unrecognized compound unit syntax '{unit}'. "
            f"Expected exponent form (eg kg1ha-1) or slash form (eg kg/ha)"
        )
        super().__init__(
            "MALFORMED_COMPOUND_UNIT",
            message,
            field="compound_unit",
            severity="HARD_ERROR"
        )
        self.unit = unit


class InvalidCompoundUnitError(ConversionError):
    """Numerator or denominator of a compound unit has the wrong category"""
    def __init__(self, unit: str, side: str, segment: str, expected: str):
        super().__init__(
            "INVALID_COMPOUND_UNIT",
            f"Compound unit '{unit}' has {side} '{segment}', expecting {expected}",
            field=side,
            severity="HARD_ERROR"
        )
        self.unit = unit
        self.side = side
        self.segment = segment


class IncompatibleUnitsError(ConversionError):
    """Conversion not supported"""
    def __init__(self, from_unit: str, to_unit: str, message: Optional[str] = None, error_code: str = "INCOMPATIBLE_UNITS"):
        super().__init__(
            error_code,
            message or f"Cannot convert from '{from_unit}' to '{to_unit}'. Units belong to different physical categories.",
            field="to_unit",
            severity="HARD_ERROR"
        )
        self.from_unit = from_unit
        self.to_unit = to_unit


class NumeratorMismatchError(IncompatibleUnitsError):
    """Ratio conversion between a mass numerator and a volume numerator"""
    def __init__(self, from_unit: str, to_unit: str, from_kind: str, to_kind: str):
        super().__init__(
            from_unit,
            to_unit,
            message=(
                f"Cannot convert {from_kind} ({from_unit}) to {to_kind} ({to_unit}). "
                f"A crop is required to bridge mass and volume rates."
            ),
            error_code="NUMERATOR_MISMATCH"
        )
        self.field = "numerator"


class UnknownCropError(ConversionError):
    """Crop not present in the bushel or bale factor tables"""
    def __init__(self, crop: Optional[str], bushel_crops: List[str], bale_crops: List[str]):
        if not crop:
            message = "Crop is required for conversion between mass and volume rates"
        else:
            message = (
                f"Unknown crop '{crop}'. Crop must be one of the bushel crops "
                f"({', '.join(bushel_crops)}) or a bale crop ({', '.join(bale_crops)})"
            )
        super().__init__(
            "UNKNOWN_CROP",
            message,
            field="crop",
            severity="HARD_ERROR"
        )
        self.crop = crop


class InvalidDilutionError(ConversionError):
    """Diluted product application units or amounts do not make sense"""
    def __init__(self, field: str, message: str):
        super().__init__(
            "INVALID_DILUTION",
            message,
            field=field,
            severity="HARD_ERROR"
        )
