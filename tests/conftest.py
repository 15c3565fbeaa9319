from __future__ import annotations

import pytest

from easy_ticket.config import load_settings
from easy_ticket.models import Blob, Label
from easy_ticket.pipeline import TicketScheduler


class FakeAttachment:
    def __init__(self, name: str, data: bytes = b"%PDF-1.4 ticket"):
        self._name = name
        self.data = data

    def name(self) -> str:
        return self._name

    def duplicate(self) -> Blob:
        return Blob(name=self._name, data=self.data, content_type="application/pdf")


class FakeMessage:
    def __init__(self, body: str, attachments=(), broken: bool = False):
        self._body = body
        self._attachments = list(attachments)
        self.broken = broken

    def body(self) -> str:
        if self.broken:
            raise RuntimeError("body unavailable")
        return self._body

    def attachments(self):
        return list(self._attachments)


class FakeThread:
    def __init__(self, thread_id: str, messages, fail_add_label: bool = False):
        self.id = thread_id
        self._messages = list(messages)
        self._labels: list[Label] = []
        self.fail_add_label = fail_add_label

    def labels(self):
        return list(self._labels)

    def messages(self):
        return list(self._messages)

    def add_label(self, label: Label) -> None:
        if self.fail_add_label:
            raise RuntimeError("label service down")
        self._labels.append(label)


class FakeSource:
    def __init__(self):
        self.threads: list[FakeThread] = []
        self.queries: list[str] = []

    def search(self, query: str):
        self.queries.append(query)
        return list(self.threads)


class FakeLabelStore:
    def __init__(self, broken: bool = False):
        self.broken = broken

    def get_or_create_label(self, name: str) -> Label:
        if self.broken:
            raise RuntimeError("label service down")
        return Label(name)


class FakeFile:
    def __init__(self, file_id: str, name: str):
        self.id = file_id
        self.name = name
        self.public = False

    def set_public_readable(self) -> str:
        self.public = True
        return f"https://files.example/{self.id}"


class FakeFolder:
    def __init__(self):
        self.files: list[FakeFile] = []
        self.blobs: list[Blob] = []
        self.failures_left = 0

    def store(self, blob: Blob) -> FakeFile:
        if self.failures_left:
            self.failures_left -= 1
            raise OSError("upload failed")
        self.blobs.append(blob)
        stored = FakeFile(f"file-{len(self.files) + 1}", blob.name)
        self.files.append(stored)
        return stored


class FakeDocumentStore:
    def __init__(self):
        self.folder = FakeFolder()
        self.requested: list[str] = []

    def get_or_create_folder(self, name: str) -> FakeFolder:
        self.requested.append(name)
        return self.folder


class FakeCalendar:
    def __init__(self):
        self.events = []

    def get_or_create_calendar(self, name: str) -> str:
        return f"cal:{name}"

    def insert_event(self, calendar_id: str, event) -> str:
        self.events.append((calendar_id, event))
        return f"event-{len(self.events)}"


class World:
    """In-memory collaborators wired to a TicketScheduler."""

    def __init__(self, settings):
        self.settings = settings
        self.source = FakeSource()
        self.labels = FakeLabelStore()
        self.documents = FakeDocumentStore()
        self.calendar = FakeCalendar()

    @staticmethod
    def message(body: str, *attachment_names: str, broken: bool = False) -> FakeMessage:
        return FakeMessage(body, [FakeAttachment(n) for n in attachment_names], broken=broken)

    def add_thread(self, *messages: FakeMessage, thread_id: str | None = None, **kwargs) -> FakeThread:
        thread = FakeThread(thread_id or f"thread-{len(self.source.threads) + 1}", messages, **kwargs)
        self.source.threads.append(thread)
        return thread

    def scheduler(self) -> TicketScheduler:
        return TicketScheduler(
            self.settings,
            source=self.source,
            labels=self.labels,
            documents=self.documents,
            calendar=self.calendar,
        )


@pytest.fixture
def settings():
    return load_settings({})


@pytest.fixture
def registry(settings):
    return settings.registry()


@pytest.fixture
def world(settings):
    return World(settings)


@pytest.fixture
def attachment():
    return FakeAttachment
