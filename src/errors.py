from typing import Optional


class LedgerError(Exception):
    """Base class for errors raised by the ledger engine and its adapters."""


class ClientMismatchError(LedgerError):
    """
    An event was handed to the ledger of a different client.
    The registry always routes by the event's own client id, so this
    signals a programming error rather than bad input.
    """

    def __init__(self, ledger_client_id: int, event):
        self.ledger_client_id = ledger_client_id
        self.event = event
        super().__init__(f"ledger for client {ledger_client_id} cannot apply {event!r}")


class InputFormatError(LedgerError):
    """A row of the input file could not be turned into an event."""

    def __init__(self, message: str, line_number: Optional[int] = None):
        self.line_number = line_number
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)
