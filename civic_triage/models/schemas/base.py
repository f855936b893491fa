"""
Schemas shared by listing endpoints.
"""
from pydantic import BaseModel, Field

class PaginationMeta(BaseModel):
    total: int = Field(ge=0)
    limit: int = Field(ge=1)
    offset: int = Field(ge=0)
    has_more: bool
