from datetime import datetime, timedelta, timezone

from dateutil import tz

from easy_ticket.models import EventAttachment, TripLeg
from easy_ticket.output import build_event, event_title, ticket_name


def test_event_title_uses_localities():
    assert event_title("TERESINA - PI", "Parnaiba-PI") == "Viagem TERESINA : Parnaiba"


def test_ticket_name_in_configured_zone():
    start = datetime(2025, 1, 16, 16, 11, tzinfo=timezone.utc)
    name = ticket_name("Bilhete Guanabara", "THE", "PHB", start, tz.gettz("America/Fortaleza"))
    assert name == "Bilhete Guanabara THE>PHB-16/01/2025 13:11.pdf"


def test_ticket_name_naive_start():
    name = ticket_name("Bilhete", "???", "PIR", datetime(2025, 7, 29, 10, 1))
    assert name == "Bilhete ???>PIR-29/07/2025 10:01.pdf"


def test_build_event():
    start = datetime(2025, 1, 16, 13, 11)
    leg = TripLeg(start=start, end=start + timedelta(hours=3),
                  origin="TERESINA - PI", destination="PARNAIBA - PI")
    attachment = EventAttachment("f1", "https://files.example/f1", "Bilhete.pdf")

    event = build_event(leg, [30, 60], attachment)

    assert event.title == "Viagem TERESINA : PARNAIBA"
    assert (event.start, event.end) == (leg.start, leg.end)
    assert event.reminders == [30, 60]
    assert event.attachments == [attachment]
    assert build_event(leg, []).attachments == []
