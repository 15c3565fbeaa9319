"""Find date/time mentions in message text, in document order."""

import re
from typing import Iterator, List

from easy_ticket.models import DateMention
from easy_ticket.normalize.date_parser import LONG_FORM, SHORT_FORM

# Long form first: at a given offset it wins over the short form
_MENTION = re.compile(f'(?:{LONG_FORM})|(?:{SHORT_FORM})', re.I)


def iter_date_mentions(text: str) -> Iterator[DateMention]:
    for m in _MENTION.finditer(text or ""):
        yield DateMention(raw=m.group(0), position=m.start())


def extract_dates(text: str) -> List[str]:
    """Raw date strings in document order; parse them with ``parse_date``."""
    return [d.raw for d in iter_date_mentions(text)]
