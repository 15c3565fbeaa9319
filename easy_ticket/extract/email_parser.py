"""Mailbox message source: threads, bodies and attachments from an mbox file."""

import hashlib
import logging
import mailbox
import re
from datetime import datetime, timezone
from email.header import decode_header
from typing import Dict, List, Optional, Sequence

from bs4 import BeautifulSoup
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

from easy_ticket.diagnostics import get_logger, log_event
from easy_ticket.models import Blob, Label

logger = get_logger(__name__)

_SUBJECT_TERM = re.compile(r'subject:"([^"]*)"', re.I)
_NEWER_THAN_TERM = re.compile(r'newer_than:(\d+)([dmy])', re.I)
_MESSAGE_ID = re.compile(r'<[^>]+>')


def decode_str(s: str) -> str:
    if not s:
        return ""
    decoded = decode_header(s)
    parts = []
    for part, encoding in decoded:
        if isinstance(part, bytes):
            try:
                parts.append(part.decode(encoding or "utf-8", errors="ignore"))
            except LookupError:
                parts.append(part.decode("utf-8", errors="ignore"))
        else:
            parts.append(str(part))
    return "".join(parts)


def html_to_text(html: str) -> str:
    """Flatten an HTML body to text with entities decoded.

    Plain-text bodies pass through unchanged.
    """
    if not html or "<" not in html:
        return html or ""
    soup = BeautifulSoup(html, "html.parser")
    for s in soup(["script", "style"]):
        s.decompose()
    return soup.get_text(separator=" ", strip=True)


def email_hash(subject: str, date: str, sender: str) -> str:
    """Stable hash for an email based on subject + date + from."""
    key = f"{subject}|{date}|{sender}"
    return hashlib.md5(key.encode("utf-8")).hexdigest()


def thread_id_for(msg: mailbox.Message) -> str:
    """Gmail thread id, else the root of References/In-Reply-To, else Message-ID."""
    gm_thread = (msg.get("X-GM-THRID") or "").strip()
    if gm_thread:
        return gm_thread
    for header in ("References", "In-Reply-To"):
        ids = _MESSAGE_ID.findall(msg.get(header, "") or "")
        if ids:
            return ids[0]
    message_id = (msg.get("Message-ID") or "").strip()
    if message_id:
        return message_id
    return email_hash(
        decode_str(msg.get("subject", "")),
        msg.get("date", "") or "",
        decode_str(msg.get("from", "")),
    )


class MailAttachment:
    def __init__(self, part):
        self._part = part

    def name(self) -> str:
        return decode_str(self._part.get_filename() or "")

    def duplicate(self) -> Blob:
        return Blob(
            name=self.name(),
            data=self._part.get_payload(decode=True) or b"",
            content_type=self._part.get_content_type(),
        )


class MailMessage:
    def __init__(self, msg: mailbox.Message):
        self._msg = msg
        self.subject = decode_str(msg.get("subject", ""))
        self.date = self._parse_date(msg.get("date", ""))

    @staticmethod
    def _parse_date(header: str) -> Optional[datetime]:
        if not header:
            return None
        try:
            parsed = date_parser.parse(header)
        except (ValueError, OverflowError):
            return None
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed

    def body(self) -> str:
        """HTML part if there is one, else plain text."""
        body_text = ""
        html_content = ""
        for part in self._msg.walk():
            if part.is_multipart() or part.get_filename():
                continue
            ct = part.get_content_type()
            p = part.get_payload(decode=True)
            if not p:
                continue
            charset = part.get_content_charset() or "utf-8"
            try:
                text = p.decode(charset, errors="ignore")
            except LookupError:
                text = p.decode("utf-8", errors="ignore")
            if ct == "text/html":
                html_content += text
            elif ct == "text/plain":
                body_text += text
        return html_content or body_text

    def attachments(self) -> List[MailAttachment]:
        return [
            MailAttachment(part)
            for part in self._msg.walk()
            if not part.is_multipart() and part.get_filename()
        ]


class MailThread:
    def __init__(self, thread_id: str, label_store):
        self.id = thread_id
        self._messages: List[MailMessage] = []
        self._label_store = label_store

    def labels(self) -> List[Label]:
        return self._label_store.labels_for(self.id)

    def messages(self) -> List[MailMessage]:
        return list(self._messages)

    def add_label(self, label: Label) -> None:
        self._label_store.add_label(self.id, label)


class MboxMessageSource:
    """Threads from an mbox file, searchable with a small Gmail-like query."""

    def __init__(self, path: str, label_store, now: Optional[datetime] = None):
        self.path = path
        self.label_store = label_store
        self.now = now

    def _threads(self) -> List[MailThread]:
        threads: Dict[str, MailThread] = {}
        mb = mailbox.mbox(self.path, create=False)
        try:
            for msg in mb:
                tid = thread_id_for(msg)
                thread = threads.get(tid)
                if thread is None:
                    thread = threads[tid] = MailThread(tid, self.label_store)
                thread._messages.append(MailMessage(msg))
        finally:
            mb.close()
        return list(threads.values())

    def search(self, query: str) -> Sequence[MailThread]:
        """Threads with at least one message matching every supported term.

        Supports ``subject:"phrase"`` (case-insensitive containment) and
        ``newer_than:<n>d|m|y``; other terms are ignored.
        """
        subject = None
        m = _SUBJECT_TERM.search(query)
        if m:
            subject = m.group(1).lower()
        cutoff = None
        m = _NEWER_THAN_TERM.search(query)
        if m:
            cutoff = self._cutoff(int(m.group(1)), m.group(2).lower())

        leftover = _NEWER_THAN_TERM.sub("", _SUBJECT_TERM.sub("", query)).strip()
        if leftover:
            log_event(logger, "search.ignored_terms", level=logging.WARNING, terms=leftover)

        def matches(message: MailMessage) -> bool:
            if subject is not None and subject not in message.subject.lower():
                return False
            if cutoff is not None and (message.date is None or message.date < cutoff):
                return False
            return True

        return [t for t in self._threads() if any(matches(msg) for msg in t._messages)]

    def _cutoff(self, amount: int, unit: str) -> datetime:
        now = self.now or datetime.now(timezone.utc)
        if unit == "d":
            return now - relativedelta(days=amount)
        if unit == "m":
            return now - relativedelta(months=amount)
        return now - relativedelta(years=amount)
