"""Administrator review actions for every publication kind."""

from __future__ import annotations

from typing import Any, Mapping

import pydantic
import structlog

from drims.errors import UnauthorizedError, ValidationError
from drims.models import (
    Actor,
    ApprovalAction,
    ApprovalRequest,
    PublicationKind,
    PublicationView,
    Role,
)
from drims.settings import Settings
from drims.utils import is_blank
from .records import RecordService
from .workflow import apply_transition

logger = structlog.get_logger(__name__)


class ApprovalService:
    """Administrator entry point for every publication kind."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    def transition(
        self,
        kind: PublicationKind | str,
        publication_id: str,
        action: ApprovalAction | str,
        actor: Actor,
        remarks: str | None = None,
    ) -> PublicationView:
        if actor.role is not Role.ADMIN:
            raise UnauthorizedError(f"{actor.identity} is not allowed to review publications")
        action = ApprovalAction.parse(action)
        kind = PublicationKind.parse(kind)
        if action is ApprovalAction.REJECT and is_blank(remarks):
            raise ValidationError("Remarks are required for rejection")

        service = RecordService(self._settings, kind)
        view = service.mutate(
            publication_id,
            lambda record: apply_transition(
                record, action, admin_id=actor.identity, remarks=remarks
            ),
        )
        logger.info(
            "approval.transition",
            kind=kind.value,
            id=publication_id,
            action=action.value,
            status=view.approval_status.value,
            admin=actor.identity,
        )
        return view

    def apply(self, request: ApprovalRequest | Mapping[str, Any], actor: Actor) -> PublicationView:
        if not isinstance(request, ApprovalRequest):
            try:
                request = ApprovalRequest.model_validate(dict(request))
            except pydantic.ValidationError as exc:
                raise ValidationError(str(exc)) from exc
        return self.transition(
            request.publication_type,
            request.publication_id,
            request.action,
            actor,
            remarks=request.remarks,
        )

    def approve(self, kind: PublicationKind | str, publication_id: str, actor: Actor) -> PublicationView:
        return self.transition(kind, publication_id, ApprovalAction.APPROVE, actor)

    def reject(
        self, kind: PublicationKind | str, publication_id: str, actor: Actor, remarks: str | None
    ) -> PublicationView:
        return self.transition(kind, publication_id, ApprovalAction.REJECT, actor, remarks=remarks)

    def send_back(
        self,
        kind: PublicationKind | str,
        publication_id: str,
        actor: Actor,
        remarks: str | None = None,
    ) -> PublicationView:
        return self.transition(kind, publication_id, ApprovalAction.SEND_BACK, actor, remarks=remarks)

    def lock(self, kind: PublicationKind | str, publication_id: str, actor: Actor) -> PublicationView:
        return self.transition(kind, publication_id, ApprovalAction.LOCK, actor)
