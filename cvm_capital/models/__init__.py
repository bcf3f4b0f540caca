"""
Database models for CVM Capital.

All models are exported here for convenient imports:
    from cvm_capital.models import LedgerEntry, AccountingPeriod, etc.
"""

from cvm_capital.models.audit import AuditAction, AuditLog
from cvm_capital.models.base import Base, TimestampMixin
from cvm_capital.models.ledger import EntryKind, LedgerEntry
from cvm_capital.models.notification import Notification, NotificationSeverity
from cvm_capital.models.participant import Investor, Partner, ParticipantKind, PartnerType
from cvm_capital.models.period import AccountingPeriod
from cvm_capital.models.profit_config import ProfitConfiguration
from cvm_capital.models.request import ApprovalRequest, RequestKind, RequestStatus
from cvm_capital.models.user import User, UserRole

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    # Staff
    "User",
    "UserRole",
    # Participants
    "Investor",
    "Partner",
    "ParticipantKind",
    "PartnerType",
    # Ledger
    "LedgerEntry",
    "EntryKind",
    # Periods
    "AccountingPeriod",
    # Configuration
    "ProfitConfiguration",
    # Requests
    "ApprovalRequest",
    "RequestKind",
    "RequestStatus",
    # Notifications
    "Notification",
    "NotificationSeverity",
    # Audit
    "AuditLog",
    "AuditAction",
]
