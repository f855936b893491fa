"""
Pydantic schemas for administrator-related operations.
"""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, EmailStr, ConfigDict, model_validator
from ..db.enums import AdminRole

class AdminCreate(BaseModel):
    email: EmailStr
    full_name: str = Field(min_length=1, max_length=200)
    role: AdminRole = AdminRole.VIEWER
    department: Optional[str] = Field(None, max_length=200)

    @model_validator(mode="after")
    def validate_department(self):
        self.department = self.department.strip() if self.department and self.department.strip() else None
        if self.role == AdminRole.VIEWER and self.department is None:
            raise ValueError("department is required for viewer admins")
        return self

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "email": "roads.viewer@city.gov",
            "full_name": "Road Desk Viewer",
            "role": "viewer",
            "department": "Roads"
        }
    })

class AdminRead(BaseModel):
    id: int
    email: str
    full_name: str
    department: Optional[str]
    role: str
    is_active: bool
    last_login: Optional[datetime] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

class AdminListMeta(BaseModel):
    requester_role: str
    requested_roles: Optional[List[str]]
    filtered_roles: List[str]
    allowed_roles: List[str]
    can_filter_by_role: bool
    total_count: int

class AdminList(BaseModel):
    success: bool = True
    message: str
    admins: List[AdminRead]
    meta: AdminListMeta
