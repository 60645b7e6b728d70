"""Error types raised by the turn-handling core and its collaborators."""


class TableBotError(Exception):
    """Base class for all tablebot errors."""


class MalformedTimeExpression(TableBotError, ValueError):
    """A date/time expression could not be turned into a time of day."""

    def __init__(self, expression: str):
        super().__init__(f"Cannot parse time expression: {expression!r}")
        self.expression = expression


class UnknownDialogError(TableBotError, KeyError):
    """A dialog id was requested that is not registered with the stack."""


class StoreUnavailableError(TableBotError):
    """The state storage backend failed to read or write."""


class ServiceUnavailableError(TableBotError):
    """The intent classifier or knowledge service could not be reached."""


class TurnCancelledError(TableBotError):
    """The turn was cancelled before its state was committed."""
