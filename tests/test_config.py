import pytest

from easy_ticket.config import Settings, load_settings
from easy_ticket.errors import ConfigurationError
from easy_ticket.models import CityEntry


def test_defaults(settings):
    assert [c.code for c in settings.cities] == ["THE", "PHB", "PIR"]
    assert settings.trip_duration_hours == 3
    assert settings.reminder_minutes == [30, 60, 90]
    assert settings.route_pattern == "span"
    assert settings.tzinfo is not None
    assert settings.query == (
        'subject:"Expresso Guanabara - Compra confirmada com sucesso" newer_than:1m'
    )


def test_settings_are_immutable(settings):
    with pytest.raises(AttributeError):
        settings.trip_duration_hours = 5


def test_overrides():
    settings = load_settings({
        "CITIES": "FOR=FORTALEZA - CE;SOB=SOBRAL - CE",
        "TRIP_DURATION_HOURS": "4.5",
        "REMINDERS": "15m, 2h, 0m",
        "SEARCH_SUBJECT": "Compra confirmada",
        "SEARCH_WINDOW": "7d",
        "ROUTE_PATTERN": "leg_header",
        "TIMEZONE": "UTC",
    })
    assert settings.cities == (CityEntry("FOR", "FORTALEZA - CE"), CityEntry("SOB", "SOBRAL - CE"))
    assert settings.trip_duration_hours == 4.5
    assert settings.reminder_minutes == [15, 120]
    assert settings.query == 'subject:"Compra confirmada" newer_than:7d'
    assert settings.route_pattern == "leg_header"


def test_blank_values_fall_back_to_defaults():
    settings = load_settings({"TRIP_DURATION_HOURS": "  ", "LABEL_NAME": ""})
    assert settings.trip_duration_hours == 3
    assert settings.label_name == "Passagem Guanabara agendada"


@pytest.mark.parametrize("env", [
    {"CITIES": ";"},
    {"CITIES": "THE=TERESINA"},
    {"CITIES": "THE=TERESINA - PI;PHB=TERESINA-PI"},
    {"CITIES": "TERESINA - PI"},
    {"CITIES": "THE=TERESINA -;PHB=PARNAIBA - PI"},
    {"CITIES": "THE=- PI;PHB=PARNAIBA - PI"},
    {"TRIP_DURATION_HOURS": "three"},
    {"TRIP_DURATION_HOURS": "0"},
    {"TRIP_DURATION_HOURS": "nan"},
    {"TRIP_DURATION_HOURS": "inf"},
    {"TRIP_DURATION_HOURS": "-inf"},
    {"REMINDERS": "30m,soon"},
    {"SEARCH_WINDOW": "1 month"},
    {"ROUTE_PATTERN": "adjacent"},
    {"TIMEZONE": "Mars/Olympus_Mons"},
])
def test_invalid_settings_raise(env):
    with pytest.raises(ConfigurationError):
        load_settings(env)


def test_registry_from_settings():
    settings = Settings(cities=(CityEntry("THE", "TERESINA - PI"),))
    assert settings.registry().code_for("TERESINA-PI") == "THE"
