"""
Pydantic schema for workflow attempt records.
"""

from pydantic import BaseModel, Field

from backoffice_ledger.models.enums import WorkflowKind, WorkflowStatus


class WorkflowAttempt(BaseModel):
    id: str
    kind: WorkflowKind
    status: WorkflowStatus = WorkflowStatus.IN_PROGRESS
    plan: dict
    completed_steps: list[str] = Field(default_factory=list)
    error: str | None = None
    created_at: int
    updated_at: int

    model_config = {"from_attributes": True}
