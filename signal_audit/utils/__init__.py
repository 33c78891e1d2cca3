from signal_audit.utils.exceptions import (
    SignalAuditError,
    DataLoadError,
    InsufficientHistoryError,
    UnknownStrategyError,
)
from signal_audit.utils.logging import setup_logging

__all__ = [
    "SignalAuditError",
    "DataLoadError",
    "InsufficientHistoryError",
    "UnknownStrategyError",
    "setup_logging",
]
