# backend/dilution.py

"""
Diluted Product Application

A product (solute) is dissolved in a carrier (solvent) and the mix is then
applied over an area. For example, 10 g of product per litre of water,
applied at 100 l/ha, puts 1000 g of product on each hectare.

Solvent and application amounts must both be mass or both be volume:
10 g/kg spread at 50 kg/ha makes sense, 10 g/l spread at 10 kg/ha needs a
density and is rejected.
"""

from typing import Tuple
from pydantic import BaseModel, Field
import logging

from conversion_errors import ConversionError, InvalidDilutionError
from measurements import RatioUnit
from unit_conversion_engine import value_from_to, unit_from_label
from unit_registry import UnitCategory, UnitDescriptor, is_mass_unit, resolve

logger = logging.getLogger(__name__)

MASS_OR_VOLUME = (UnitCategory.MASS, UnitCategory.VOLUME)


class DilutedProductApplication(BaseModel):
    """Product diluted in a carrier and applied over an area"""
    product_amount: float = Field(..., description="eg 10")
    product_unit_label: str = Field(..., description="eg g")
    carrier_solvent_amount: float = Field(1, description="Carrier amount the product is dissolved in, eg 1")
    carrier_solvent_unit_label: str = Field(..., description="eg l")
    carrier_application_amount: float = Field(..., description="Carrier applied per area unit, eg 100")
    carrier_application_unit_label: str = Field(..., description="eg l")
    area_unit_label: str = Field(..., description="eg ha")

    def unit_check(self) -> Tuple[UnitDescriptor, UnitDescriptor]:
        """
        Check that the units make sense together.

        Returns:
            (product unit, area unit)

        Raises:
            InvalidDilutionError: Naming the offending field
        """
        try:
            area_unit = resolve(UnitCategory.AREA, self.area_unit_label)
        except ConversionError:
            raise InvalidDilutionError("area_unit_label", f"Invalid area unit: '{self.area_unit_label}'")

        product_unit = self._mass_or_volume("product_unit_label", "product", self.product_unit_label)
        self._mass_or_volume("carrier_solvent_unit_label", "carrier (solvent)", self.carrier_solvent_unit_label)
        self._mass_or_volume("carrier_application_unit_label", "carrier (application)", self.carrier_application_unit_label)

        solvent_is_mass = is_mass_unit(self.carrier_solvent_unit_label)
        application_is_mass = is_mass_unit(self.carrier_application_unit_label)
        if solvent_is_mass != application_is_mass:
            raise InvalidDilutionError(
                "carrier_application_unit_label",
                f"Carrier (solvent) unit '{self.carrier_solvent_unit_label}' and carrier (application) unit "
                f"'{self.carrier_application_unit_label}' need to both be mass or both be volume"
            )

        if self.carrier_solvent_amount == 0 and not self.is_all_zero():
            raise InvalidDilutionError(
                "carrier_solvent_amount",
                "Carrier (solvent) amount cannot be zero"
            )

        return product_unit, area_unit

    def _mass_or_volume(self, field: str, name: str, label: str) -> UnitDescriptor:
        try:
            unit = unit_from_label(label)
        except ConversionError:
            raise InvalidDilutionError(field, f"Invalid {name} unit: '{label}'")
        if not isinstance(unit, UnitDescriptor) or unit.category not in MASS_OR_VOLUME:
            raise InvalidDilutionError(field, f"The {name} unit '{label}' is not a mass or volume unit")
        return unit

    def is_all_zero(self) -> bool:
        return (
            self.product_amount == 0
            and self.carrier_solvent_amount == 0
            and self.carrier_application_amount == 0
        )

    def application_rate(self) -> Tuple[float, str]:
        """
        Rate the product is applied over the area.

        Returns:
            (value, label), eg (1000.0, "g1ha-1")
        """
        product_unit, area_unit = self.unit_check()
        label = str(RatioUnit(numerator=product_unit, denominator=area_unit))

        if self.is_all_zero():
            return 0.0, label

        # Carrier applied, expressed in the solvent unit
        applied = value_from_to(
            self.carrier_application_amount,
            self.carrier_application_unit_label,
            self.carrier_solvent_unit_label
        )
        rate = self.product_amount / self.carrier_solvent_amount * applied

        logger.debug(f"Dilution rate: {rate} {label}")
        return rate, label
