"""Map ticket attachments to routes by filename, and resolve a leg's ticket."""

import logging
from typing import Any, Dict, Iterable, Optional, Tuple

from easy_ticket.diagnostics import get_logger, log_event
from easy_ticket.models import CityEntry, Resolution, RouteKey
from easy_ticket.normalize.city_registry import CityRegistry, route_key
from easy_ticket.normalize.patterns import filename_route_pattern

logger = get_logger(__name__)

RouteMap = Dict[RouteKey, Any]


class AttachmentRouter:
    """Filename patterns for every ordered city pair, compiled once."""

    def __init__(self, registry: CityRegistry):
        self._pairs = [
            (origin, destination, filename_route_pattern(origin.name, destination.name))
            for origin, destination in registry.pairs()
        ]

    def route_from_filename(self, name: str) -> Optional[Tuple[CityEntry, CityEntry]]:
        for origin, destination, pattern in self._pairs:
            if pattern.search(name or ""):
                return origin, destination
        return None

    def build_route_map(self, attachments: Iterable[Any]) -> RouteMap:
        """Index attachments by the route their filename names.

        A later attachment naming the same route replaces an earlier one.
        """
        route_map: RouteMap = {}
        for i, attachment in enumerate(attachments):
            name = attachment.name()
            found = self.route_from_filename(name)
            if not found:
                log_event(logger, "attachment.unmatched", level=logging.DEBUG, attachment=i, name=name)
                continue
            origin, destination = found
            key = route_key(origin.name, destination.name)
            route_map[key] = attachment
            log_event(logger, "attachment.mapped", level=logging.DEBUG, attachment=i, name=name, key=str(key))
        return route_map


def resolve_attachment(route_map: RouteMap, origin: str, destination: str) -> Resolution:
    """Attachment for a leg, trusting the filename over the body on direction.

    Forward key first; if only the reverse key exists, return that ticket
    with origin and destination swapped. No match keeps the body's order.
    """
    key = route_key(origin, destination)
    attachment = route_map.get(key)
    if attachment is not None:
        return Resolution(attachment, origin, destination, was_swapped=False)

    attachment = route_map.get(key.swapped())
    if attachment is not None:
        return Resolution(attachment, destination, origin, was_swapped=True)

    return Resolution(None, origin, destination, was_swapped=False)
