from .base import PaginationMeta
from .triage import EngagementUpdate, FraudAssessmentRead, FraudAssessmentResponse
from .reports import (
    ReportCreate, ReportRead, ReportResolve,
    AdminReportRead, AdminInfo, AdminReportList,
    NearbyReport, NearbyPagination, NearbyReportList,
    UserReportList, UserReportStats, CommunityStats,
)
from .admins import AdminCreate, AdminRead, AdminListMeta, AdminList

__all__ = [
    # Base
    "PaginationMeta",

    # Triage
    "EngagementUpdate",
    "FraudAssessmentRead",
    "FraudAssessmentResponse",

    # Reports
    "ReportCreate",
    "ReportRead",
    "ReportResolve",
    "AdminReportRead",
    "AdminInfo",
    "AdminReportList",
    "NearbyReport",
    "NearbyPagination",
    "NearbyReportList",
    "UserReportList",
    "UserReportStats",
    "CommunityStats",

    # Admins
    "AdminRead",
    "AdminCreate",
    "AdminListMeta",
    "AdminList",
]
