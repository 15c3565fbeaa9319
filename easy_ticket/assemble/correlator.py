"""Zip date mentions with routes into trip legs."""

import logging
from datetime import datetime, timedelta, tzinfo
from typing import List, Optional, Sequence

from easy_ticket.assemble.attachments import RouteMap, resolve_attachment
from easy_ticket.diagnostics import get_logger, log_event
from easy_ticket.models import Route, TripLeg
from easy_ticket.normalize.date_parser import parse_date

logger = get_logger(__name__)


def correlate(
    dates: Sequence[str],
    routes: Sequence[Route],
    route_map: RouteMap,
    duration_hours: float,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> List[TripLeg]:
    """Pair the i-th date with the i-th route, up to the shorter sequence.

    Unparseable dates skip their index only. Extra dates or routes are
    dropped.
    """
    legs: List[TripLeg] = []
    duration = timedelta(hours=duration_hours)

    for i in range(min(len(dates), len(routes))):
        start = parse_date(dates[i], now=now, tz=tz)
        if start is None:
            log_event(logger, "date.unparsed", level=logging.WARNING, leg=i, raw=dates[i])
            continue

        route = routes[i]
        resolved = resolve_attachment(route_map, route.origin, route.destination)
        if resolved.was_swapped:
            log_event(
                logger, "leg.swapped", level=logging.WARNING, leg=i,
                body_route=f"{route.origin} > {route.destination}",
                used_route=f"{resolved.origin} > {resolved.destination}",
            )

        legs.append(TripLeg(
            start=start,
            end=start + duration,
            origin=resolved.origin,
            destination=resolved.destination,
            attachment=resolved.attachment,
            was_swapped=resolved.was_swapped,
            index=i,
        ))

    return legs
