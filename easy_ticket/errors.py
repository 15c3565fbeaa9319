"""Error taxonomy shared by the scheduler and its collaborators."""

from typing import Any, Dict, Optional


class EasyTicketError(Exception):
    def log_fields(self) -> Dict[str, Any]:
        """Structured context for the diagnostic trace."""
        return {}


class ConfigurationError(EasyTicketError):
    """Settings that make a run meaningless (empty city table, bad values)."""


class ExternalCallError(EasyTicketError):
    """A mailbox, label, folder, calendar or storage call failed."""

    def __init__(self, operation: str, cause: Optional[BaseException] = None, **context: Any):
        self.operation = operation
        self.cause = cause
        self.context: Dict[str, Any] = {k: v for k, v in context.items() if v is not None}
        detail = f": {cause}" if cause else ""
        super().__init__(f"{operation} failed{detail}")

    def log_fields(self) -> Dict[str, Any]:
        fields = dict(self.context)
        fields["operation"] = self.operation
        if self.cause is not None:
            fields["cause"] = type(self.cause).__name__
        return fields
