"""
Fixed vocabularies used to classify queries, customers and news.

Each vocabulary is an Enum plus an alias table. Matching is a
case-insensitive substring test of every alias against the text, and the
members come back in declaration order so results are stable.
"""
from __future__ import annotations

from enum import Enum
from typing import Dict, Iterable, List, Mapping, Tuple, TypeVar


class Sector(str, Enum):
    RUBBER_GLOVES = "Rubber gloves"
    OLEOCHEMICAL = "Oleochemical"
    CONSUMER_PRODUCTS = "Consumer Products"
    MANUFACTURING = "Manufacturing"
    FOOD_BEVERAGE = "Food & Beverage"
    PHARMACEUTICALS = "Pharmaceuticals"


class Area(str, Enum):
    PRK = "PRK"
    PKP = "PKP"
    SWP = "SWP"
    JHR = "JHR"
    MNS = "MNS"
    PTK = "PTK"


class Country(str, Enum):
    US = "us"
    MALAYSIA = "malaysia"
    CHINA = "china"
    INDIA = "india"
    THAILAND = "thailand"
    INDONESIA = "indonesia"


class Segment(str, Enum):
    ELITE = "Elite"
    PREMIUM = "Premium"
    PREFERRED = "Preferred"


SECTOR_ALIASES: Dict[Sector, Tuple[str, ...]] = {
    Sector.RUBBER_GLOVES: ("rubber gloves", "rubber"),
    Sector.OLEOCHEMICAL: ("oleochemical",),
    Sector.CONSUMER_PRODUCTS: ("consumer products", "consumer"),
    Sector.MANUFACTURING: ("manufacturing",),
    Sector.FOOD_BEVERAGE: ("food & beverage",),
    Sector.PHARMACEUTICALS: ("pharmaceuticals",),
}

AREA_ALIASES: Dict[Area, Tuple[str, ...]] = {
    Area.PRK: ("perak", "prk"),
    Area.PKP: ("penang", "pkp"),
    Area.SWP: ("selangor", "swp"),
    Area.JHR: ("johor", "jhr"),
    Area.MNS: ("melaka", "mns"),
    Area.PTK: ("pahang", "ptk"),
}

COUNTRY_ALIASES: Dict[Country, Tuple[str, ...]] = {
    Country.US: ("us", "usa", "united states", "america", "american"),
    Country.MALAYSIA: ("malaysia", "malaysian"),
    Country.CHINA: ("china", "chinese"),
    Country.INDIA: ("india", "indian"),
    Country.THAILAND: ("thailand", "thai"),
    Country.INDONESIA: ("indonesia", "indonesian"),
}

POLICY_TERMS: Tuple[str, ...] = (
    "tariff",
    "tariffs",
    "policy",
    "policies",
    "regulation",
    "regulations",
    "tax",
    "taxes",
    "sanction",
    "sanctions",
    "subsidy",
    "subsidies",
)

SECTORS: List[str] = [s.value for s in Sector]
AREAS: List[str] = [a.value for a in Area]
SEGMENTS: List[str] = [s.value for s in Segment]

E = TypeVar("E", bound=Enum)


def match_aliases(text: str, table: Mapping[E, Iterable[str]]) -> List[E]:
    lowered = (text or "").lower()
    return [member for member, aliases in table.items() if any(alias in lowered for alias in aliases)]


def match_terms(text: str, terms: Iterable[str]) -> List[str]:
    lowered = (text or "").lower()
    return [term for term in terms if term in lowered]

