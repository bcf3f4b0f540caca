"""Core services: balances, periods, profit configuration and distribution."""

from cvm_capital.services.errors import (
    AlreadyProcessedError,
    CapitalError,
    InvalidSplitError,
    NoCapitalWarning,
    NotFoundError,
    PartialWriteError,
    UnallocatedPoolWarning,
    ValidationError,
)

__all__ = [
    "CapitalError",
    "ValidationError",
    "InvalidSplitError",
    "AlreadyProcessedError",
    "NotFoundError",
    "PartialWriteError",
    "NoCapitalWarning",
    "UnallocatedPoolWarning",
]
