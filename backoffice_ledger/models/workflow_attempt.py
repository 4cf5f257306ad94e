"""
Workflow attempt model.

Settlement workflows issue several transfers in sequence with no
transaction spanning them. The attempt row records the validated
plan and which steps have committed, so an interrupted workflow
can be resumed instead of leaving unexplained partial state.
"""

from sqlalchemy import String, BigInteger, JSON, Text, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column

from backoffice_ledger.models.base import Base
from backoffice_ledger.models.enums import WorkflowKind, WorkflowStatus


class WorkflowAttempt(Base):
    __tablename__ = "workflow_attempts"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    kind: Mapped[WorkflowKind] = mapped_column(
        SAEnum(WorkflowKind, name="workflow_kind_enum"),
        nullable=False,
    )
    status: Mapped[WorkflowStatus] = mapped_column(
        SAEnum(WorkflowStatus, name="workflow_status_enum"),
        nullable=False,
        default=WorkflowStatus.IN_PROGRESS,
    )
    plan: Mapped[dict] = mapped_column(JSON, nullable=False)
    completed_steps: Mapped[list] = mapped_column(JSON, nullable=False)
    error: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    updated_at: Mapped[int] = mapped_column(BigInteger, nullable=False)

    def __repr__(self) -> str:
        return f"<WorkflowAttempt {self.id} {self.kind.value} ({self.status.value})>"
