# backend/conversion_service.py

"""
Conversion request / result contract.

Wraps value_from_to and crop_rate so callers get a ConversionResult with
status, errors and an audit trail instead of an exception. ConversionError
never escapes convert(); it is reported in result.errors.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field
import logging

from conversion_errors import ConversionError
from crop_rate import crop_rate
from unit_conversion_engine import (
    ENGINE_VERSION,
    ConversionStep,
    UnitFamily,
    conversion_family,
    round_value,
    value_from_to,
)

logger = logging.getLogger(__name__)

# ==================== ENUMS ====================

class ConversionStatus(str, Enum):
    """Conversion result status"""
    SUCCESS = "SUCCESS"
    ERROR = "ERROR"


# ==================== DATA MODELS ====================

class ConversionRequest(BaseModel):
    """Service input contract"""
    value: float
    from_unit: str
    to_unit: str
    crop: Optional[str] = None
    decimal_places: Optional[int] = Field(None, ge=0, le=12)
    requested_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ConversionResult(BaseModel):
    """Service output contract"""
    value: Optional[float] = None
    unit: str
    family: Optional[UnitFamily] = None
    crop: Optional[str] = None

    # Status
    status: ConversionStatus
    errors: List[Dict[str, Any]] = []

    # Audit trail
    steps: List[ConversionStep] = []

    # Metadata
    calculated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    calculation_version: str = ENGINE_VERSION


# ==================== SERVICE ====================

class ConversionService:
    """
    Stateless conversion service.

    - Crop supplied → crop_rate (bridges mass and volume rates when needed)
    - No crop → value_from_to
    - Every scale operation is recorded as a ConversionStep
    """

    def __init__(self):
        self.version = ENGINE_VERSION

    def family_for(self, request: ConversionRequest) -> Optional[UnitFamily]:
        """Family both units share, or None when they need a crop bridge."""
        if request.from_unit == request.to_unit:
            return None
        try:
            return conversion_family(request.from_unit, request.to_unit)
        except ConversionError:
            return None

    async def convert(self, request: ConversionRequest) -> ConversionResult:
        """
        Main conversion method.

        Args:
            request: ConversionRequest

        Returns:
            ConversionResult (status ERROR with errors filled in on failure)
        """
        steps: List[ConversionStep] = []

        try:
            if request.crop:
                value = crop_rate(request.crop, request.value, request.from_unit, request.to_unit, steps)
            else:
                value = value_from_to(request.value, request.from_unit, request.to_unit, steps)

            if request.decimal_places is not None:
                value = round_value(value, request.decimal_places)

            logger.info(
                f"Converted {request.value} {request.from_unit} → {value} {request.to_unit}"
                + (f" (crop={request.crop})" if request.crop else "")
            )

            return ConversionResult(
                value=value,
                unit=request.to_unit,
                family=self.family_for(request),
                crop=request.crop,
                status=ConversionStatus.SUCCESS,
                steps=steps,
                calculated_at=datetime.now(timezone.utc),
                calculation_version=self.version
            )

        except ConversionError as e:
            logger.info(f"Rejected conversion {request.from_unit} → {request.to_unit}: {e.error_code} {e.message}")
            return ConversionResult(
                unit=request.to_unit,
                crop=request.crop,
                status=ConversionStatus.ERROR,
                errors=[e.to_dict()],
                steps=steps,
                calculated_at=datetime.now(timezone.utc),
                calculation_version=self.version
            )

        except Exception as e:
            # Unexpected error
            logger.error(f"Unexpected error in unit conversion: {e}", exc_info=True)
            return ConversionResult(
                unit=request.to_unit,
                crop=request.crop,
                status=ConversionStatus.ERROR,
                errors=[{
                    "error_code": "UNEXPECTED_ERROR",
                    "message": f"Unexpected error: {str(e)}",
                    "field": None,
                    "severity": "HARD_ERROR"
                }],
                steps=[],
                calculated_at=datetime.now(timezone.utc),
                calculation_version=self.version
            )
