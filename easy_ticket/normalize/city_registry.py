"""Configured cities: lookup by name/code and comparison-safe normalization."""

import re
from typing import Iterable, Optional, Tuple

from easy_ticket.errors import ConfigurationError
from easy_ticket.models import CityEntry, RouteKey

# Hyphen, en dash and em dash, with any spacing around them
DASH_SEPARATOR = re.compile(r'\s*[-–—]\s*')
_WHITESPACE = re.compile(r'\s+')

UNKNOWN_CODE = "???"


def normalize_city(text: str) -> str:
    """Fold dash/spacing variants and case so names compare equal.

    "Teresina-PI", "TERESINA  –  PI" and "teresina - pi" all become
    "TERESINA - PI". Only used for comparison, never for display.
    """
    folded = DASH_SEPARATOR.sub(" - ", text)
    folded = _WHITESPACE.sub(" ", folded)
    return folded.strip().upper()


def route_key(origin: str, destination: str) -> RouteKey:
    return RouteKey(normalize_city(origin), normalize_city(destination))


def locality(name: str) -> str:
    """City part of a "CITY - ST" name ("TERESINA - PI" -> "TERESINA")."""
    return DASH_SEPARATOR.split(name.strip(), maxsplit=1)[0].strip()


def parse_city_table(raw: str) -> Tuple[CityEntry, ...]:
    """Parse "THE=TERESINA - PI;PHB=PARNAIBA - PI" into CityEntry records."""
    entries = []
    for chunk in raw.split(";"):
        chunk = chunk.strip()
        if not chunk:
            continue
        code, sep, name = chunk.partition("=")
        if not sep or not code.strip() or not name.strip():
            raise ConfigurationError(f"Invalid city entry {chunk!r}; expected CODE=NAME")
        entries.append(CityEntry(code=code.strip(), name=name.strip()))
    return tuple(entries)


class CityRegistry:
    def __init__(self, cities: Iterable[CityEntry]):
        self.cities: Tuple[CityEntry, ...] = tuple(cities)
        self._validate()

    def _validate(self):
        if not self.cities:
            raise ConfigurationError("City table is empty")
        seen_names = set()
        seen_codes = set()
        for city in self.cities:
            parts = DASH_SEPARATOR.split(city.name.strip())
            if len(parts) < 2 or not all(p.strip() for p in parts):
                raise ConfigurationError(
                    f"City name {city.name!r} must be 'LOCALITY - REGION'"
                )
            key = normalize_city(city.name)
            if key in seen_names:
                raise ConfigurationError(f"Duplicate city name {city.name!r}")
            if city.code in seen_codes:
                raise ConfigurationError(f"Duplicate city code {city.code!r}")
            seen_names.add(key)
            seen_codes.add(city.code)

    def __iter__(self):
        return iter(self.cities)

    def __len__(self):
        return len(self.cities)

    def find(self, name: str) -> Optional[CityEntry]:
        """First configured city whose name occurs in ``name``."""
        target = normalize_city(name)
        for city in self.cities:
            if normalize_city(city.name) in target:
                return city
        return None

    def code_for(self, name: str) -> str:
        city = self.find(name)
        return city.code if city else UNKNOWN_CODE

    def pairs(self):
        """Every ordered (origin, destination) pair, identity pairs excluded."""
        for origin in self.cities:
            for destination in self.cities:
                if origin is destination:
                    continue
                yield origin, destination
