"""Orchestrates a scheduling run: search → extract → correlate → create events → mark."""

from datetime import datetime
from typing import List, Optional

from easy_ticket.assemble.attachments import AttachmentRouter
from easy_ticket.assemble.correlator import correlate
from easy_ticket.config import Settings
from easy_ticket.diagnostics import get_logger, log_event, log_exception
from easy_ticket.errors import ExternalCallError
from easy_ticket.extract.dates import extract_dates
from easy_ticket.extract.email_parser import html_to_text
from easy_ticket.extract.routes import extract_routes
from easy_ticket.interfaces import CalendarStore, DocumentStore, LabelStore, MessageSource
from easy_ticket.models import EventAttachment, Failure, Label, RunSummary, TripLeg
from easy_ticket.normalize.patterns import route_pattern
from easy_ticket.output import build_event, ticket_name

logger = get_logger(__name__)


class TicketScheduler:
    """One scheduled pass over the candidate confirmation threads.

    A thread is marked only after at least one of its legs became an event;
    unmarked threads are rescanned from scratch on the next run. Legs
    inserted before a crash are not remembered, so a rerun can duplicate them.
    """

    def __init__(
        self,
        settings: Settings,
        source: MessageSource,
        labels: LabelStore,
        documents: DocumentStore,
        calendar: CalendarStore,
    ):
        self.settings = settings
        self.source = source
        self.labels = labels
        self.documents = documents
        self.calendar = calendar

        self.registry = settings.registry()
        self.router = AttachmentRouter(self.registry)
        self.route_re = route_pattern(self.registry, settings.route_pattern)
        self.tz = settings.tzinfo

    def _startup(self):
        """Get or create the marker label, calendar and ticket folder."""
        steps = [
            ("label.get_or_create", self.labels.get_or_create_label, self.settings.label_name),
            ("calendar.get_or_create", self.calendar.get_or_create_calendar, self.settings.calendar_name),
            ("folder.get_or_create", self.documents.get_or_create_folder, self.settings.folder_name),
        ]
        resolved = []
        for operation, call, name in steps:
            try:
                resolved.append(call(name))
            except Exception as e:
                raise ExternalCallError(operation, e, name=name) from e
        return resolved

    def run(self, now: Optional[datetime] = None) -> RunSummary:
        """Process every candidate thread in order.

        Raises ExternalCallError only when the label, calendar, folder or
        search call fails; per-thread problems go to ``summary.failures``.
        """
        label, calendar_id, folder = self._startup()
        now = now or datetime.now(self.tz)
        summary = RunSummary()

        query = self.settings.query
        try:
            threads = self.source.search(query)
        except Exception as e:
            raise ExternalCallError("mail.search", e, query=query) from e

        summary.threads_found = len(threads)
        log_event(logger, "run.start", threads=len(threads), query=query)

        for ti, thread in enumerate(threads):
            self._process_thread(ti, thread, label, calendar_id, folder, now, summary)

        log_event(
            logger, "run.finished",
            threads=summary.threads_found,
            skipped=summary.threads_skipped,
            marked=summary.threads_marked,
            events=summary.events_created,
            swapped=summary.swapped_legs,
            failures=len(summary.failures),
        )
        return summary

    def _process_thread(self, ti, thread, label: Label, calendar_id, folder, now, summary: RunSummary):
        thread_id = getattr(thread, "id", str(ti))

        try:
            if any(lb.name == label.name for lb in thread.labels()):
                summary.threads_skipped += 1
                log_event(logger, "thread.skipped", thread=thread_id)
                return
            messages = thread.messages()
        except Exception as e:
            self._fail(summary, thread_id, "thread.read", e)
            return

        created = False
        for mi, message in enumerate(messages):
            try:
                legs = self.legs_for_message(message, now, thread_id=thread_id, message_index=mi)
            except Exception as e:
                self._fail(summary, thread_id, "message.scan", e, message_index=mi)
                continue

            log_event(logger, "message.legs", thread=thread_id, message_index=mi, legs=len(legs))
            for leg in legs:
                if leg.was_swapped:
                    summary.swapped_legs += 1
                try:
                    event_id = self.create_event(leg, calendar_id, folder)
                except Exception as e:
                    self._fail(summary, thread_id, "leg.create", e, message_index=mi, leg_index=leg.index)
                    continue
                created = True
                summary.events_created += 1
                log_event(
                    logger, "leg.created", thread=thread_id, message_index=mi, leg=leg.index,
                    route=f"{leg.origin} > {leg.destination}", event_id=event_id,
                    ticket=leg.attachment is not None,
                )

        if not created:
            return
        try:
            thread.add_label(label)
        except Exception as e:
            self._fail(summary, thread_id, "thread.mark", e)
            return
        summary.threads_marked += 1
        log_event(logger, "thread.marked", thread=thread_id, label=label.name)

    def legs_for_message(self, message, now: Optional[datetime] = None,
                         thread_id: Optional[str] = None,
                         message_index: Optional[int] = None) -> List[TripLeg]:
        """Dates, routes and attachment routes of one message, correlated into legs."""
        text = html_to_text(message.body())
        dates = extract_dates(text)
        routes = extract_routes(text, self.route_re)
        route_map = self.router.build_route_map(message.attachments())
        log_event(
            logger, "message.scanned", thread=thread_id, message_index=message_index,
            dates=len(dates), routes=len(routes), attachments=len(route_map),
        )
        return correlate(
            dates, routes, route_map,
            self.settings.trip_duration_hours, now=now, tz=self.tz,
        )

    def create_event(self, leg: TripLeg, calendar_id: str, folder) -> str:
        """Upload the leg's ticket (if any) and insert its calendar event."""
        attachment = None
        if leg.attachment is not None:
            attachment = self.upload_ticket(leg, folder)
        event = build_event(leg, self.settings.reminder_minutes, attachment)
        return self.calendar.insert_event(calendar_id, event)

    def upload_ticket(self, leg: TripLeg, folder) -> EventAttachment:
        name = ticket_name(
            self.settings.ticket_prefix,
            self.registry.code_for(leg.origin),
            self.registry.code_for(leg.destination),
            leg.start,
            self.tz,
        )
        stored = folder.store(leg.attachment.duplicate().renamed(name))
        url = stored.set_public_readable()
        return EventAttachment(file_id=stored.id, file_url=url, title=stored.name)

    def _fail(self, summary: RunSummary, thread_id: str, operation: str, error: Exception,
              message_index: Optional[int] = None, leg_index: Optional[int] = None):
        log_exception(
            logger, f"{operation}.failed",
            thread=thread_id, message_index=message_index, leg=leg_index, error=str(error),
        )
        summary.failures.append(Failure(
            thread_id=thread_id,
            operation=operation,
            error=str(error),
            message_index=message_index,
            leg_index=leg_index,
        ))
