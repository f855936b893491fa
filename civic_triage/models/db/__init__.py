from .admins import Admin
from .reports import Report, ReportEngagement
from .enums import PriorityLevel, FraudSeverity, AdminRole, RejectionReason

__all__ = [
    "Admin",
    "Report",
    "ReportEngagement",
    "PriorityLevel",
    "FraudSeverity",
    "AdminRole",
    "RejectionReason",
]
