"""
Pydantic schemas for report-related operations.
"""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, ConfigDict, model_validator
from ..db.enums import PriorityLevel
from .base import PaginationMeta
from .triage import FraudAssessmentRead

class ReportCreate(BaseModel):
    user_id: int = Field(gt=0)
    title: str = Field(min_length=1, max_length=500)
    description: str = Field("", max_length=5000)
    category: str = Field("other", min_length=1, max_length=200)
    priority: str = Field("auto", description="'auto' runs the priority classifier; otherwise low|medium|high|critical")
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    address: str = Field("", max_length=500)
    department: Optional[str] = Field(None, max_length=200)

    @model_validator(mode="after")
    def validate_coordinates_and_priority(self):
        if (self.latitude is None) != (self.longitude is None):
            raise ValueError("latitude and longitude must be provided together")
        allowed = {"auto"} | {p.value for p in PriorityLevel}
        if self.priority not in allowed:
            raise ValueError(f"priority must be one of {sorted(allowed)}")
        return self

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "user_id": 7,
            "title": "Burst water main on Elm Street",
            "description": "Water has been flowing onto the road since this morning.",
            "category": "Water Supply & Sewerage",
            "latitude": 12.9716,
            "longitude": 77.5946,
            "department": "Water"
        }
    })

class ReportRead(BaseModel):
    id: int
    user_id: int
    title: str
    description: str
    category: str
    priority: PriorityLevel
    latitude: Optional[float]
    longitude: Optional[float]
    address: str
    department: str
    is_resolved: bool
    created_at: datetime
    resolved_at: Optional[datetime] = None
    resolution_notes: Optional[str] = None
    resolved_by_admin_id: Optional[int] = None
    time_taken_to_resolve: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)

class ReportResolve(BaseModel):
    admin_id: int = Field(gt=0)
    resolution_notes: Optional[str] = Field(None, max_length=5000)

class AdminReportRead(ReportRead):
    """Report row as listed for administrators, with its fraud badge."""
    fraud: FraudAssessmentRead

class AdminInfo(BaseModel):
    role: str
    department: Optional[str]
    can_view_all_departments: bool

class AdminReportList(BaseModel):
    success: bool = True
    message: str
    reports: List[AdminReportRead]
    pagination: PaginationMeta
    admin_info: AdminInfo

class NearbyReport(ReportRead):
    distance_km: float = Field(ge=0, description="Great-circle distance from the query point, 2 decimals")

class NearbyPagination(BaseModel):
    limit: int
    offset: int
    radius_km: float

class NearbyReportList(BaseModel):
    success: bool = True
    reports: List[NearbyReport]
    pagination: NearbyPagination

class UserReportList(BaseModel):
    success: bool = True
    reports: List[ReportRead]
    pagination: PaginationMeta

class UserReportStats(BaseModel):
    total_reports: int
    resolved_reports: int
    pending_reports: int
    critical_reports: int
    high_priority_reports: int
    reports_last_30_days: int
    avg_resolution_time_hours: Optional[float] = None

class CommunityStats(BaseModel):
    total_reports: int
    resolved_reports: int
    resolution_rate: float = Field(description="Percentage of reports resolved, 1 decimal")
    avg_resolution_time_days: Optional[float] = None
