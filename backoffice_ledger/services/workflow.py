"""
Workflow runner — resumable multi-step settlement protocols.

A settlement workflow is a validated plan followed by a list of
named steps, each one a transfer or a record update. Steps are
not atomic as a group, so every run is tracked by a
WorkflowAttempt that records the plan and the steps completed.

Running with the id of an unfinished attempt resumes it: the
stored plan is used as is and completed steps are skipped. Each
step receives the id "<attempt id>:<step>" to use for the
transaction it writes, so a step that committed before it could
be recorded is not posted twice.

Already committed steps are never compensated. A failed attempt
keeps its error and waits to be resumed.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable

from pydantic import BaseModel

from backoffice_ledger.errors import ConflictError, StoreUnavailable
from backoffice_ledger.models.enums import WorkflowKind, WorkflowStatus
from backoffice_ledger.schemas.workflow import WorkflowAttempt
from backoffice_ledger.store.base import LedgerStore
from backoffice_ledger.utils import new_id, now_ms

logger = logging.getLogger(__name__)


@dataclass
class WorkflowStep:
    name: str
    action: Callable[[str], Any]


class WorkflowRunner:

    def __init__(self, store: LedgerStore):
        self.store = store

    def resume(
        self, kind: WorkflowKind, attempt_id: str | None
    ) -> WorkflowAttempt | None:
        """
        Return the unfinished attempt stored under attempt_id.

        None when there is no key or nothing stored under it.
        Raises ConflictError for a completed attempt or one of a
        different kind.
        """
        if attempt_id is None:
            return None
        attempt = self.store.get_workflow_attempt(attempt_id)
        if attempt is None:
            return None
        if attempt.kind != kind:
            raise ConflictError(
                f"Idempotency key '{attempt_id}' is used by a "
                f"{attempt.kind.value} workflow"
            )
        if attempt.status == WorkflowStatus.COMPLETED:
            raise ConflictError(
                f"Workflow attempt '{attempt_id}' has already completed"
            )
        logger.info(
            "Resuming %s attempt %s after %s",
            kind.value, attempt.id, attempt.completed_steps or "no steps",
        )
        return attempt

    def start(
        self,
        kind: WorkflowKind,
        plan: BaseModel,
        attempt_id: str | None = None,
    ) -> WorkflowAttempt:
        now = now_ms()
        attempt = WorkflowAttempt(
            id=attempt_id or new_id("wf_"),
            kind=kind,
            plan=plan.model_dump(mode="json"),
            created_at=now,
            updated_at=now,
        )
        return self.store.save_workflow_attempt(attempt)

    def run(
        self, attempt: WorkflowAttempt, steps: list[WorkflowStep]
    ) -> WorkflowAttempt:
        completed = list(attempt.completed_steps)
        attempt = attempt.model_copy(
            update={"status": WorkflowStatus.IN_PROGRESS, "error": None}
        )

        for step in steps:
            if step.name in completed:
                logger.debug("Attempt %s: skipping %s", attempt.id, step.name)
                continue
            try:
                step.action(f"{attempt.id}:{step.name}")
            except Exception as e:
                logger.warning(
                    "Attempt %s failed at step %s: %s", attempt.id, step.name, e
                )
                self._record_failure(attempt, completed, e)
                raise
            completed.append(step.name)
            attempt = attempt.model_copy(
                update={"completed_steps": list(completed), "updated_at": now_ms()}
            )
            self.store.save_workflow_attempt(attempt)

        attempt = attempt.model_copy(
            update={"status": WorkflowStatus.COMPLETED, "updated_at": now_ms()}
        )
        self.store.save_workflow_attempt(attempt)
        logger.info("%s attempt %s completed", attempt.kind.value, attempt.id)
        return attempt

    def _record_failure(
        self, attempt: WorkflowAttempt, completed: list[str], error: Exception
    ) -> None:
        failed = attempt.model_copy(update={
            "status": WorkflowStatus.FAILED,
            "completed_steps": list(completed),
            "error": str(error),
            "updated_at": now_ms(),
        })
        try:
            self.store.save_workflow_attempt(failed)
        except StoreUnavailable:
            # The step error is what the caller needs to see
            logger.warning("Could not record failure of attempt %s", attempt.id)
