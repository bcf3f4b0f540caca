"""
Typed errors raised by the core services.

API handlers translate these into HTTP responses; the message is shown
to the administrator unchanged.
"""


class CapitalError(Exception):
    """Base class for all domain errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(CapitalError):
    """Input has the wrong shape or range. Nothing was changed."""


class InvalidSplitError(ValidationError):
    """Proportional/exclusive percentages are negative or do not sum to 100."""


class AlreadyProcessedError(CapitalError):
    """The period was already distributed. Nothing was changed."""


class NotFoundError(CapitalError):
    """A period, participant, request or entry does not exist."""


class PartialWriteError(CapitalError):
    """
    A multi-row write failed part way and was rolled back.

    Raised after the rollback, so the store is back in its prior state.
    """


class NoCapitalWarning(UserWarning):
    """Total invested capital is zero; the proportional pool was not allocated."""


class UnallocatedPoolWarning(UserWarning):
    """The exclusive pool is positive but there is no active partner to receive it."""
