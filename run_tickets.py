#!/usr/bin/env python3
"""Scheduled entry point: turn new ticket confirmations into calendar events.

Usage:
    python run_tickets.py

Reads its settings from the environment / .env (see easy_ticket/config.py)
and writes calendar events and ticket files under OUTPUT_DIR.
"""

import sys

from easy_ticket.config import LABELS_PATH, MBOX_PATH, OUTPUT_DIR, load_settings
from easy_ticket.diagnostics import get_logger, log_exception
from easy_ticket.errors import ConfigurationError, ExternalCallError
from easy_ticket.extract.email_parser import MboxMessageSource
from easy_ticket.labels import LocalLabelStore
from easy_ticket.output import LocalCalendarStore, LocalDocumentStore
from easy_ticket.pipeline import TicketScheduler

logger = get_logger("easy_ticket.run")


def main() -> int:
    try:
        settings = load_settings()
        labels = LocalLabelStore(LABELS_PATH)
        scheduler = TicketScheduler(
            settings,
            source=MboxMessageSource(MBOX_PATH, labels),
            labels=labels,
            documents=LocalDocumentStore(OUTPUT_DIR / "tickets"),
            calendar=LocalCalendarStore(OUTPUT_DIR / "calendar.json"),
        )
        summary = scheduler.run()
    except (ConfigurationError, ExternalCallError) as e:
        log_exception(logger, "run.aborted", error=str(e), **e.log_fields())
        print(f"Aborted: {e}", file=sys.stderr)
        return 1

    print(
        f"{summary.threads_found} threads, {summary.threads_skipped} already scheduled, "
        f"{summary.events_created} events created, {summary.threads_marked} threads marked, "
        f"{summary.swapped_legs} swapped routes, {len(summary.failures)} failures."
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
