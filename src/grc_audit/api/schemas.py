"""Request bodies accepted by the HTTP API.

Field names are camelCase on the wire, matching the JSON the API returns.
"""

from datetime import date
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CategorySelectionRequest(ApiModel):
    selected_categories: List[str] = Field(default_factory=list)
    user_id: Optional[str] = None


class AuditPlanCreateRequest(ApiModel):
    title: str
    template_id: str
    objectives: str
    team_leader: str
    start_date: date
    end_date: date
    scope: List[str] = Field(default_factory=list)
    team_members: List[str] = Field(default_factory=list)
    standard: str = "ISO 27001:2022"
    selected_categories: List[str] = Field(default_factory=list)
    created_by: Optional[str] = None


class SubmitForReviewRequest(ApiModel):
    prepared_by: Optional[str] = None


class FindingCreateRequest(ApiModel):
    audit_id: str
    clause: str
    description: str
    severity: str
    recommendation: str
    clause_title: Optional[str] = None
    workpaper_id: Optional[str] = None
    assigned_to: Optional[str] = None
    due_date: Optional[date] = None
    corrective_action: Optional[str] = None
    created_by: str = "System"


class FindingStatusRequest(ApiModel):
    status: str
    user: str


class WorkpaperUpdateRequest(ApiModel):
    test_result: Optional[str] = None
    test_results: Optional[str] = None
    reviewed_by: Optional[str] = None
    reviewed_date: Optional[date] = None
    user_id: Optional[str] = None


class FindingUpdateRequest(ApiModel):
    user: str
    description: Optional[str] = None
    recommendation: Optional[str] = None
    corrective_action: Optional[str] = None
    assigned_to: Optional[str] = None
    due_date: Optional[date] = None
