"""Kiosk core exceptions."""


class KioskError(Exception):
    """Base kiosk error."""


class CommandError(KioskError):
    """A command request to the check-in API failed (transport or rejection)."""


class CommandRejected(CommandError):
    """The check-in API answered a command with a non-2xx status."""

    def __init__(self, status_code: int, code: str | None = None, message: str | None = None) -> None:
        # message is for logs only, never shown to the customer
        super().__init__(message or f"Command rejected with status {status_code}")
        self.status_code = status_code
        self.code = code


class LanguageRequired(CommandRejected):
    """409 LANGUAGE_REQUIRED - the customer has to pick a language first."""


class NegotiationError(KioskError):
    """A selection transition is not valid in the current negotiation state."""


class RentalUnavailable(NegotiationError):
    """The requested rental has no available inventory."""
