"""Narrow interfaces the scheduler consumes from mail, label, storage and calendar."""

from typing import List, Protocol, Sequence

from easy_ticket.models import Blob, CalendarEvent, Label


class Attachment(Protocol):
    def name(self) -> str: ...

    def duplicate(self) -> Blob: ...


class Message(Protocol):
    def body(self) -> str: ...

    def attachments(self) -> Sequence[Attachment]: ...


class MessageThread(Protocol):
    id: str

    def labels(self) -> List[Label]: ...

    def messages(self) -> Sequence[Message]: ...

    def add_label(self, label: Label) -> None: ...


class MessageSource(Protocol):
    def search(self, query: str) -> Sequence[MessageThread]: ...


class LabelStore(Protocol):
    def get_or_create_label(self, name: str) -> Label: ...


class StoredFile(Protocol):
    id: str
    name: str

    def set_public_readable(self) -> str:
        """Share the file read-only and return its URL."""
        ...


class Folder(Protocol):
    def store(self, blob: Blob) -> StoredFile: ...


class DocumentStore(Protocol):
    def get_or_create_folder(self, name: str) -> Folder: ...


class CalendarStore(Protocol):
    def get_or_create_calendar(self, name: str) -> str: ...

    def insert_event(self, calendar_id: str, event: CalendarEvent) -> str: ...
