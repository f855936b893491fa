"""
Pydantic schemas exposing triage engine inputs and decisions.
"""
from typing import List, Optional
from pydantic import BaseModel, Field, ConfigDict
from ..db.enums import FraudSeverity

class EngagementUpdate(BaseModel):
    """Engagement counters pushed by the social subsystem for a report."""
    view_count: int = Field(0, ge=0)
    upvotes: int = Field(0, ge=0)
    downvotes: int = Field(0, ge=0)
    comment_count: int = Field(0, ge=0)
    share_count: int = Field(0, ge=0)

    model_config = ConfigDict(from_attributes=True, json_schema_extra={
        "example": {
            "view_count": 240,
            "upvotes": 12,
            "downvotes": 3,
            "comment_count": 4,
            "share_count": 1
        }
    })

class FraudAssessmentRead(BaseModel):
    score: int = Field(ge=0)
    severity: Optional[FraudSeverity] = Field(None, description="None when the score is below the lowest band (no badge)")
    is_fraud: bool
    reasons: List[str] = Field(default_factory=list)
    recommendation: str

    model_config = ConfigDict(from_attributes=True)

class FraudAssessmentResponse(BaseModel):
    report_id: int
    engagement: EngagementUpdate
    assessment: FraudAssessmentRead
