"""Regex builders for city names, body routes and attachment filenames."""

import re
from typing import Callable, Dict, Pattern

from easy_ticket.normalize.city_registry import DASH_SEPARATOR

_SEPARATOR = r'\s*[-–—]\s*'


def city_name_pattern(name: str) -> str:
    """Pattern for one city name tolerant of dash and spacing variants.

    "TERESINA - PI" matches "TERESINA-PI", "Teresina  –  PI", etc.
    """
    parts = DASH_SEPARATOR.split(name.strip())
    escaped = [r'\s+'.join(re.escape(w) for w in part.split()) for part in parts]
    return _SEPARATOR.join(escaped)


def city_alternation(registry) -> str:
    """Capturing alternation of every configured city name."""
    # Longest first so a name that prefixes another cannot shadow it
    names = sorted((c.name for c in registry), key=len, reverse=True)
    return "(" + "|".join(city_name_pattern(n) for n in names) + ")"


def _span_route(cities: str) -> str:
    return rf'{cities}[\s\S]*?{cities}'


def _leg_header_route(cities: str) -> str:
    return rf'Viagem\s+de\s+(?:Ida|Volta)[\s\S]*?{cities}[\s\S]*?{cities}'


# Observed confirmation layouts: plain/markup-separated city pairs, or pairs
# introduced by "Viagem de Ida" / "Viagem de Volta" headers.
ROUTE_STYLES: Dict[str, Callable[[str], str]] = {
    "span": _span_route,
    "leg_header": _leg_header_route,
}


def route_pattern(registry, style: str = "span") -> Pattern:
    """Compiled pattern whose groups 1 and 2 are origin and destination.

    Compiled patterns keep no scan position; every ``finditer`` call starts
    a fresh scan from the beginning of the text.
    """
    try:
        build = ROUTE_STYLES[style]
    except KeyError:
        raise ValueError(f"Unknown route style {style!r}")
    return re.compile(build(city_alternation(registry)), re.I)


def filename_route_pattern(origin: str, destination: str) -> Pattern:
    """Pattern for "ORIGIN - DESTINATION" inside an attachment filename."""
    return re.compile(
        city_name_pattern(origin) + _SEPARATOR + city_name_pattern(destination),
        re.I,
    )
