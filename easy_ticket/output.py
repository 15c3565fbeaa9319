"""Calendar event payloads, ticket naming, and the local calendar/document stores."""

import json
import re
import uuid
from datetime import datetime, tzinfo
from pathlib import Path
from typing import Any, Dict, List, Optional

from easy_ticket.models import Blob, CalendarEvent, EventAttachment, TripLeg
from easy_ticket.normalize.city_registry import locality

_UNSAFE = re.compile(r'[^\w.-]+')


def event_title(origin: str, destination: str) -> str:
    """Event summary, e.g. "Viagem TERESINA : PARNAIBA"."""
    return f"Viagem {locality(origin)} : {locality(destination)}"


def ticket_name(prefix: str, origin_code: str, destination_code: str,
                start: datetime, tz: Optional[tzinfo] = None) -> str:
    """E.g. "Bilhete Guanabara THE>PHB-16/01/2025 13:11.pdf", start shown in ``tz``."""
    local = start.astimezone(tz) if tz is not None and start.tzinfo else start
    return f"{prefix} {origin_code}>{destination_code}-{local:%d/%m/%Y %H:%M}.pdf"


def build_event(leg: TripLeg, reminders: List[int],
                attachment: Optional[EventAttachment] = None) -> CalendarEvent:
    return CalendarEvent(
        title=event_title(leg.origin, leg.destination),
        start=leg.start,
        end=leg.end,
        reminders=list(reminders),
        attachments=[attachment] if attachment else [],
    )


def _read_json(path: Path, default: Dict[str, Any]) -> Dict[str, Any]:
    if path.exists():
        return json.loads(path.read_text(encoding="utf-8"))
    return default


def _write_json(path: Path, data: Dict[str, Any]):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(data, indent=2, ensure_ascii=False, default=str),
        encoding="utf-8",
    )


# ---------------------------------------------------------------------------
# Document store: one directory per folder, index.json holds names/sharing
# ---------------------------------------------------------------------------

class LocalFile:
    def __init__(self, store: "LocalDocumentStore", file_id: str, name: str, path: Path):
        self._store = store
        self.id = file_id
        self.name = name
        self.path = path

    def set_public_readable(self) -> str:
        self._store._mark_shared(self.id)
        return self.path.resolve().as_uri()


class LocalFolder:
    def __init__(self, store: "LocalDocumentStore", name: str, path: Path):
        self._store = store
        self.name = name
        self.path = path

    def store(self, blob: Blob) -> LocalFile:
        file_id = uuid.uuid4().hex
        # Ticket names contain "/" and ">"; keep them in the index only
        disk_name = f"{file_id}-{_UNSAFE.sub('_', blob.name)}"
        path = self.path / disk_name
        self.path.mkdir(parents=True, exist_ok=True)
        path.write_bytes(blob.data)
        self._store._record(file_id, self.name, blob, path)
        return LocalFile(self._store, file_id, blob.name, path)


class LocalDocumentStore:
    def __init__(self, root: Path):
        self.root = Path(root)
        self.index_path = self.root / "index.json"
        self._index = _read_json(self.index_path, {"folders": {}, "files": {}})

    def get_or_create_folder(self, name: str) -> LocalFolder:
        folders = self._index["folders"]
        if name not in folders:
            folders[name] = _UNSAFE.sub("_", name).strip("_") or uuid.uuid4().hex
            _write_json(self.index_path, self._index)
        path = self.root / folders[name]
        path.mkdir(parents=True, exist_ok=True)
        return LocalFolder(self, name, path)

    def _record(self, file_id: str, folder: str, blob: Blob, path: Path):
        self._index["files"][file_id] = {
            "name": blob.name,
            "folder": folder,
            "content_type": blob.content_type,
            "path": str(path),
            "public": False,
        }
        _write_json(self.index_path, self._index)

    def _mark_shared(self, file_id: str):
        self._index["files"][file_id]["public"] = True
        _write_json(self.index_path, self._index)

    def files(self) -> Dict[str, Dict[str, Any]]:
        return dict(self._index["files"])


# ---------------------------------------------------------------------------
# Calendar store: calendars and their inserted events in one JSON file
# ---------------------------------------------------------------------------

class LocalCalendarStore:
    def __init__(self, path: Path):
        self.path = Path(path)
        self._data = _read_json(self.path, {"calendars": {}, "events": {}})

    def get_or_create_calendar(self, name: str) -> str:
        for calendar_id, summary in self._data["calendars"].items():
            if summary == name:
                return calendar_id
        calendar_id = uuid.uuid4().hex
        self._data["calendars"][calendar_id] = name
        self._data["events"][calendar_id] = []
        _write_json(self.path, self._data)
        return calendar_id

    def insert_event(self, calendar_id: str, event: CalendarEvent) -> str:
        if calendar_id not in self._data["calendars"]:
            raise KeyError(f"Unknown calendar {calendar_id!r}")
        payload = event.to_payload()
        payload["id"] = uuid.uuid4().hex
        self._data["events"][calendar_id].append(payload)
        _write_json(self.path, self._data)
        return payload["id"]

    def events(self, calendar_id: str) -> List[Dict[str, Any]]:
        return list(self._data["events"].get(calendar_id, []))
