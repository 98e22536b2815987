# backend/unit_registry.py

"""
Unit Category Registries

Five independent, immutable tables of named units:
- Length (base: metre)
- Area (base: square metre)
- Mass (base: gram)
- Volume (base: litre)
- Time (base: second)

Each unit has a canonical symbol, a full word form, a "fancy" display form,
a set of case-insensitive aliases and a multiplicative factor to the base
unit of its category.

RESOLUTION RULES:
1) Units are scanned in declaration order, first match wins
2) Symbol, fancy form, full word and aliases are all compared case-insensitively
3) ONE exception: "Ml" (megalitre) never matches millilitre
4) Unknown names → UnknownUnitError (no guessing)

The tables are built once at import and never mutated, so they are safe for
concurrent reads without locking.
"""

from enum import Enum
from typing import Dict, List, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field
import logging

from conversion_errors import UnknownUnitError

logger = logging.getLogger(__name__)

# ==================== ENUMS ====================

class UnitCategory(str, Enum):
    """Physical quantity categories"""
    LENGTH = "length"
    AREA = "area"
    MASS = "mass"
    VOLUME = "volume"
    TIME = "time"


# ==================== DATA MODELS ====================

class UnitDescriptor(BaseModel):
    """Immutable description of a single unit of measurement"""
    model_config = ConfigDict(frozen=True)

    category: UnitCategory
    symbol: str
    full: str
    fancy: str
    aliases: Tuple[str, ...] = ()
    factor: float = Field(gt=0)

    def __str__(self) -> str:
        return self.symbol

    def names(self) -> List[str]:
        """All strings this unit answers to, in matching order"""
        return [self.symbol, self.fancy, self.full, *self.aliases]

    def matches(self, name: str) -> bool:
        """
        Return True if name refers to this unit.

        Case-insensitive, except that "Ml" is megalitre and must never
        resolve to millilitre.
        """
        if self.category == UnitCategory.VOLUME and self.symbol == MILLILITRE_SYMBOL and name == MEGALITRE_SYMBOL:
            return False
        folded = name.casefold()
        return any(folded == candidate.casefold() for candidate in self.names())


MILLILITRE_SYMBOL = "ml"
MEGALITRE_SYMBOL = "Ml"


def _unit(category: UnitCategory, symbol: str, full: str, factor: float,
          aliases: Tuple[str, ...] = (), fancy: Optional[str] = None) -> UnitDescriptor:
    return UnitDescriptor(
        category=category,
        symbol=symbol,
        full=full,
        fancy=fancy or symbol,
        aliases=aliases,
        factor=factor
    )


# ==================== LENGTH ====================

MILLIMETRE = _unit(UnitCategory.LENGTH, "mm", "millimetre", 0.001,
                   ("millimeter", "millimeters", "millimetres"))
CENTIMETRE = _unit(UnitCategory.LENGTH, "cm", "centimetre", 0.01,
                   ("centimeter", "centimeters", "centimetres"))
METRE = _unit(UnitCategory.LENGTH, "m", "metre", 1,
              ("meter", "meters", "metres"))
KILOMETRE = _unit(UnitCategory.LENGTH, "km", "kilometre", 1000,
                  ("kilometer", "kilometers", "kilometres"))
INCH = _unit(UnitCategory.LENGTH, "in", "inch", 0.0254, ("inches",))
FOOT = _unit(UnitCategory.LENGTH, "ft", "foot", 0.3048, ("feet",))
YARD = _unit(UnitCategory.LENGTH, "yd", "yard", 0.9144, ("yards",))
MILE = _unit(UnitCategory.LENGTH, "mi", "mile", 1609.34, ("miles",))

LENGTH_UNITS: Tuple[UnitDescriptor, ...] = (
    MILLIMETRE, CENTIMETRE, METRE, KILOMETRE, INCH, FOOT, YARD, MILE,
)

# ==================== AREA ====================

SQUARE_CENTIMETRE = _unit(UnitCategory.AREA, "cm2", "square centimetre", 0.0001, (
    "cm^2", "centimetre squared", "centimetres squared", "centimeter squared",
    "square centimetres", "square centimeter", "square centimeters",
), fancy="cm²")
SQUARE_METRE = _unit(UnitCategory.AREA, "m2", "square metre", 1, (
    "m^2", "metre squared", "metres squared", "meter squared",
    "square metres", "square meter", "square meters", "squared meters",
), fancy="m²")
SQUARE_KILOMETRE = _unit(UnitCategory.AREA, "km2", "square kilometre", 1_000_000, (
    "km^2", "kilometre squared", "kilometres squared", "kilometer squared",
    "square kilometres", "square kilometer", "square kilometers",
), fancy="km²")
HECTARE = _unit(UnitCategory.AREA, "ha", "hectare", 10_000, ("hectares",))
SQUARE_INCH = _unit(UnitCategory.AREA, "in2", "square inch", 0.00064516, (
    "in^2", "inch squared", "inches squared", "square inches",
), fancy="in²")
SQUARE_FOOT = _unit(UnitCategory.AREA, "ft2", "square foot", 0.092903, (
    "ft^2", "foot squared", "feet squared", "square feet", "sq ft", "sqft",
), fancy="ft²")
SQUARE_YARD = _unit(UnitCategory.AREA, "yd2", "square yard", 0.836127, (
    "yd^2", "yard squared", "yards squared", "square yards",
), fancy="yd²")
SQUARE_MILE = _unit(UnitCategory.AREA, "mi2", "square mile", 2_589_988.11, (
    "mi^2", "mile squared", "miles squared", "square miles",
), fancy="mi²")
ACRE = _unit(UnitCategory.AREA, "ac", "acre", 4046.86, ("acres",))

AREA_UNITS: Tuple[UnitDescriptor, ...] = (
    SQUARE_CENTIMETRE, SQUARE_METRE, SQUARE_KILOMETRE, HECTARE,
    SQUARE_INCH, SQUARE_FOOT, SQUARE_YARD, SQUARE_MILE, ACRE,
)

# ==================== MASS ====================

MILLIGRAM = _unit(UnitCategory.MASS, "mg", "milligram", 0.001, ("milligrams", "mil", "mils"))
DECIGRAM = _unit(UnitCategory.MASS, "dg", "decigram", 0.1, ("decigrams",))
GRAM = _unit(UnitCategory.MASS, "g", "gram", 1, ("grams",))
KILOGRAM = _unit(UnitCategory.MASS, "kg", "kilogram", 1000, ("kilograms", "kilo", "kilos", "kgs"))
TONNE = _unit(UnitCategory.MASS, "t", "tonne", 1_000_000, (
    "tonnes", "metric ton", "metric tons", "metric tonne", "metric tonnes",
))
POUND = _unit(UnitCategory.MASS, "lb", "pound", 453.592, ("pounds", "lbs"))
OUNCE_MASS = _unit(UnitCategory.MASS, "ozm", "ounce mass", 28.3495, ("ounce", "ounces", "oz"))
STONE = _unit(UnitCategory.MASS, "st", "stone", 6350.29, ("stones",))
TON = _unit(UnitCategory.MASS, "ton", "ton", 907_185, ("tons", "short ton", "short tons"))

MASS_UNITS: Tuple[UnitDescriptor, ...] = (
    MILLIGRAM, DECIGRAM, GRAM, KILOGRAM, TONNE, POUND, OUNCE_MASS, STONE, TON,
)

# ==================== VOLUME ====================

MICROLITRE = _unit(UnitCategory.VOLUME, "ul", "microlitre", 0.000001,
                   ("microlitres", "microliter", "microliters", "µl", "mcL"))
MILLILITRE = _unit(UnitCategory.VOLUME, MILLILITRE_SYMBOL, "millilitre", 0.001,
                   ("millilitres", "milliliter", "milliliters"))
CENTILITRE = _unit(UnitCategory.VOLUME, "cl", "centilitre", 0.01,
                   ("centilitres", "centiliter", "centiliters"))
DECILITRE = _unit(UnitCategory.VOLUME, "dl", "decilitre", 0.1,
                  ("decilitres", "deciliter", "deciliters"))
LITRE = _unit(UnitCategory.VOLUME, "l", "litre", 1,
              ("litres", "liter", "liters"))
KILOLITRE = _unit(UnitCategory.VOLUME, "kl", "kilolitre", 1000,
                  ("kilolitres", "kiloliter", "kiloliters"))
DECALITRE = _unit(UnitCategory.VOLUME, "dal", "decalitre", 10,
                  ("decalitres", "decaliter", "decaliters"))
HECTOLITRE = _unit(UnitCategory.VOLUME, "hl", "hectolitre", 100, (
    "hectolitres", "hectoliter", "hectoliters",
    "100l", "100 litres", "100 liters", "100 litre", "100 liter",
))
MEGALITRE = _unit(UnitCategory.VOLUME, MEGALITRE_SYMBOL, "megalitre", 1_000_000,
                  ("megalitres", "megaliter", "megaliters"))
CUBIC_CENTIMETRE = _unit(UnitCategory.VOLUME, "cm3", "cubic centimetre", 0.001, (
    "cm^3", "cubic centimetres", "cubic centimeter", "cubic centimeters", "cc",
), fancy="cm³")
CUBIC_METRE = _unit(UnitCategory.VOLUME, "m3", "cubic metre", 1000, (
    "m^3", "cubic metres", "cubic meter", "cubic meters",
), fancy="m³")
GALLON = _unit(UnitCategory.VOLUME, "gal", "gallon", 3.78541, (
    "us gal", "us-gal", "us gallon", "us gallons", "gallons",
))
FLUID_OUNCE = _unit(UnitCategory.VOLUME, "floz", "fluid ounce", 0.0295735, (
    "fl oz", "us fl oz", "us-fluid-ounce", "us fluid ounce", "us fluid ounces", "fluid ounces",
))
QUART = _unit(UnitCategory.VOLUME, "qt", "quart", 0.946353, ("us qt", "us-quart", "us quarts", "quarts"))
PINT = _unit(UnitCategory.VOLUME, "pt", "pint", 0.473176, ("us pt", "us-pint", "us pints", "pints"))
CUBIC_INCH = _unit(UnitCategory.VOLUME, "in3", "cubic inch", 0.0163871,
                   ("in^3", "cubic inches"), fancy="in³")
CUBIC_FOOT = _unit(UnitCategory.VOLUME, "ft3", "cubic foot", 28.3168,
                   ("ft^3", "cubic feet"), fancy="ft³")
CUBIC_YARD = _unit(UnitCategory.VOLUME, "yd3", "cubic yard", 764.555,
                   ("yd^3", "cubic yards"), fancy="yd³")
ACRE_FOOT = _unit(UnitCategory.VOLUME, "ac-ft", "acre foot", 1_233_480, ("acre feet", "ac ft"))
ACRE_INCH = _unit(UnitCategory.VOLUME, "ac-in", "acre inch", 102_790.15312896, ("acre inches", "ac in"))
# Crop yield units, only convertible to mass through a crop factor
BUSHEL = _unit(UnitCategory.VOLUME, "bu", "bushel", 35.2391, ("bushels",))
BALE = _unit(UnitCategory.VOLUME, "bale", "bale", 480, ("bales",))

VOLUME_UNITS: Tuple[UnitDescriptor, ...] = (
    MICROLITRE, MILLILITRE, CENTILITRE, DECILITRE, LITRE, KILOLITRE, DECALITRE,
    HECTOLITRE, MEGALITRE, CUBIC_CENTIMETRE, CUBIC_METRE, GALLON, FLUID_OUNCE,
    QUART, PINT, CUBIC_INCH, CUBIC_FOOT, CUBIC_YARD, ACRE_FOOT, ACRE_INCH,
    BUSHEL, BALE,
)

# ==================== TIME ====================

SECOND = _unit(UnitCategory.TIME, "s", "second", 1, ("seconds", "sec", "secs"))
MINUTE = _unit(UnitCategory.TIME, "min", "minute", 60, ("minutes", "mins", "m"))
HOUR = _unit(UnitCategory.TIME, "h", "hour", 3600, ("hours", "hr", "hrs"))
DAY = _unit(UnitCategory.TIME, "d", "day", 86_400, ("days",))
WEEK = _unit(UnitCategory.TIME, "wk", "week", 604_800, ("weeks", "wks"))
MONTH = _unit(UnitCategory.TIME, "mo", "month", 2_628_000, ("months",))
YEAR = _unit(UnitCategory.TIME, "yr", "year", 31_536_000, ("years", "y", "yrs"))

TIME_UNITS: Tuple[UnitDescriptor, ...] = (
    SECOND, MINUTE, HOUR, DAY, WEEK, MONTH, YEAR,
)

# ==================== REGISTRY ====================

UNIT_REGISTRY: Dict[UnitCategory, Tuple[UnitDescriptor, ...]] = {
    UnitCategory.LENGTH: LENGTH_UNITS,
    UnitCategory.AREA: AREA_UNITS,
    UnitCategory.MASS: MASS_UNITS,
    UnitCategory.VOLUME: VOLUME_UNITS,
    UnitCategory.TIME: TIME_UNITS,
}


def resolve(category: UnitCategory, name: str, field: Optional[str] = None) -> UnitDescriptor:
    """
    Resolve a unit name within one category.

    Args:
        category: Category to search
        name: Symbol, fancy form, full word or alias
        field: Which argument the name came from, for error reporting

    Returns:
        The first UnitDescriptor (in declaration order) that matches

    Raises:
        UnknownUnitError: If nothing in the category matches
    """
    if name:
        for unit in UNIT_REGISTRY[category]:
            if unit.matches(name):
                return unit
    raise UnknownUnitError(name or "", category.value, field=field)


def classify(category: UnitCategory, name: str) -> bool:
    """Return True if name resolves in the given category."""
    if not name:
        return False
    return any(unit.matches(name) for unit in UNIT_REGISTRY[category])


def is_length_unit(name: str) -> bool:
    return classify(UnitCategory.LENGTH, name)


def is_area_unit(name: str) -> bool:
    return classify(UnitCategory.AREA, name)


def is_mass_unit(name: str) -> bool:
    return classify(UnitCategory.MASS, name)


def is_volume_unit(name: str) -> bool:
    return classify(UnitCategory.VOLUME, name)


def is_time_unit(name: str) -> bool:
    return classify(UnitCategory.TIME, name)


def alias_collisions(category: UnitCategory) -> List[Tuple[str, str, str]]:
    """
    Find names shared (case-insensitively) by two distinct units of a category.

    Returns:
        List of (name, first_symbol, second_symbol) tuples. Only the
        millilitre / megalitre pair is expected here.
    """
    seen: Dict[str, str] = {}
    collisions: List[Tuple[str, str, str]] = []
    for unit in UNIT_REGISTRY[category]:
        for name in {n.casefold() for n in unit.names()}:
            owner = seen.get(name)
            if owner is not None and owner != unit.symbol:
                collisions.append((name, owner, unit.symbol))
            else:
                seen[name] = unit.symbol
    return collisions


for _category in UnitCategory:
    for _collision in alias_collisions(_category):
        if {_collision[1], _collision[2]} != {MILLILITRE_SYMBOL, MEGALITRE_SYMBOL}:
            logger.warning(f"Ambiguous {_category.value} unit name '{_collision[0]}': "
                           f"{_collision[1]} and {_collision[2]}")
