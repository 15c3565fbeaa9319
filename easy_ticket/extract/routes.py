"""Find (origin, destination) pairs in message text."""

from typing import Iterator, List, Pattern

from easy_ticket.models import Route


def iter_routes(text: str, pattern: Pattern) -> Iterator[Route]:
    """Non-overlapping routes in document order.

    With cities A, B, C in sequence this yields (A, B) and resumes after B;
    C alone never forms a pair with A.
    """
    for m in pattern.finditer(text or ""):
        yield Route(origin=m.group(1).strip(), destination=m.group(2).strip(), position=m.start())


def extract_routes(text: str, pattern: Pattern) -> List[Route]:
    # Repeated routes are kept; they line up with repeated date mentions
    return list(iter_routes(text, pattern))
