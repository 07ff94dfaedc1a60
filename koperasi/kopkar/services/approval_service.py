# -*- coding: utf-8 -*-
"""
Multi-step, role-gated approval workflow shared by every approvable object
(loan, deposit, deposit withdrawal, deposit change, savings withdrawal,
member application, loan repayment).

- Step list per object type: ApprovalFlow rows, else Workflow.default_steps.
- Submission snapshots the steps into Approval rows (one per step, ordered).
- While a step is pending the object is in a review status: SUBMITTED for the
  first step, UNDER_REVIEW_<STEP> afterwards; current_step names the step.
- Only the holder of the step's role may decide; only that step's row is written.
- Side effects of the final approval run through Workflow.on_approved inside
  the same transaction; emails go out after commit.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from functools import partial
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from django.core.exceptions import ObjectDoesNotExist, PermissionDenied, ValidationError
from django.db import transaction
from django.db.models import Model, QuerySet
from django.utils import timezone
from rest_framework.exceptions import APIException

from kopkar.models import Approval, ApprovalDecision, User
from kopkar.repositories import approval_repository as repo
from kopkar.repositories.base import lock, save_fields
from kopkar.services import audit_service, notification_service
from kopkar.utils.exceptions import error_reason
from kopkar.utils.roles import ROLE_STEP, STEP_ROLE, STEP_STATUS_SUFFIX

logger = logging.getLogger(__name__)

DRAFT = "DRAFT"
SUBMITTED = "SUBMITTED"
REJECTED = "REJECTED"
CANCELLED = "CANCELLED"

REVIEW_STATUSES = [SUBMITTED] + [f"UNDER_REVIEW_{suffix}" for suffix in STEP_STATUS_SUFFIX.values()]


@dataclass(frozen=True)
class Workflow:
    object_type: str
    label: str
    model: type
    default_steps: Tuple[str, ...]
    approved_status: str
    number_field: str
    owner_field: str = "user"
    on_approved: Optional[Callable[[Any, User], None]] = None
    on_rejected: Optional[Callable[[Any, User], None]] = None

    def number(self, obj) -> str:
        return getattr(obj, self.number_field, "") or f"#{obj.pk}"

    def owner_id(self, obj) -> int:
        return getattr(obj, f"{self.owner_field}_id")


# ====== Steps ======
def steps_for(flow: Workflow) -> List[str]:
    steps = [ROLE_STEP[r] for r in repo.flow_roles(flow.object_type) if r in ROLE_STEP]
    return steps or list(flow.default_steps)

def snapshot_steps(flow: Workflow, obj) -> List[str]:
    return [r.step for r in repo.rows_for(flow.object_type, obj.pk)]

def review_status(steps: Sequence[str], step: str) -> str:
    if steps and steps[0] == step:
        return SUBMITTED
    return f"UNDER_REVIEW_{STEP_STATUS_SUFFIX[step]}"

def approvals_for(flow: Workflow, obj) -> List[Approval]:
    return list(repo.rows_for(flow.object_type, obj.pk).select_related("decided_by"))

def steps_of_actor(actor: User) -> List[str]:
    return [step for step, role in STEP_ROLE.items() if actor.has_role(role)]

def pending_for(qs: QuerySet, actor: User) -> QuerySet:
    """Objects waiting at a step the actor can sign."""
    return qs.filter(current_step__in=steps_of_actor(actor))


# ====== Notifications (after commit) ======
def _notify_step(flow: Workflow, obj, step: str) -> None:
    role = STEP_ROLE[step]
    owner = getattr(obj, flow.owner_field, None)
    subject = f"[{flow.label}] {flow.number(obj)} menunggu persetujuan"
    text = (
        f"{flow.label} {flow.number(obj)} dari {getattr(owner, 'name', '-')} menunggu persetujuan Anda "
        f"pada tahap {step.replace('_', ' ').title()}."
    )
    try:
        notification_service.notify_role(role, subject=subject, text=text, object_type=flow.object_type, object_id=obj.pk)
    except Exception as ex:
        logger.warning("[approval] notify step %s failed: %s", step, ex)

def _notify_owner(flow: Workflow, obj, headline: str) -> None:
    owner = getattr(obj, flow.owner_field, None)
    subject = f"[{flow.label}] {flow.number(obj)} {headline}"
    text = f"{flow.label} {flow.number(obj)} {headline}.\nStatus: {obj.get_status_display()}"
    if getattr(obj, "rejection_reason", ""):
        text += f"\nCatatan: {obj.rejection_reason}"
    try:
        notification_service.notify_user(owner, subject=subject, text=text, object_type=flow.object_type, object_id=obj.pk)
    except Exception as ex:
        logger.warning("[approval] notify owner failed: %s", ex)


# ====== Transitions ======
def _check_owner(flow: Workflow, obj, actor: User) -> None:
    if flow.owner_id(obj) != actor.id:
        raise PermissionDenied(f"Anda tidak memiliki akses ke {flow.label.lower()} ini")

def start_review(flow: Workflow, obj, actor: User) -> Model:
    """
    Put `obj` on the first step. Caller holds the row lock (or just created it)
    inside a transaction.
    """
    steps = steps_for(flow)
    repo.create_rows(flow.object_type, obj.pk, steps)
    before = {"status": obj.status}
    save_fields(obj, {"status": SUBMITTED, "current_step": steps[0], "submitted_at": timezone.now()})
    audit_service.log_action(
        actor=actor.id, action="SUBMITTED", object_type=flow.object_type, object_id=obj.pk,
        before=before, after={"status": obj.status, "current_step": obj.current_step, "steps": steps},
    )
    transaction.on_commit(partial(_notify_step, flow, obj, steps[0]))
    return obj

def submit(flow: Workflow, obj_id: int, actor: User, validate: Optional[Callable[[Any], None]] = None) -> Model:
    with transaction.atomic():
        obj = lock(flow.model, obj_id)
        _check_owner(flow, obj, actor)
        if obj.status != DRAFT:
            raise ValidationError("Hanya draft yang bisa disubmit")
        if validate:
            validate(obj)
        return start_review(flow, obj, actor)

def decide(flow: Workflow, obj_id: int, actor: User, decision: str, notes: str = "") -> Model:
    if decision not in (ApprovalDecision.APPROVED, ApprovalDecision.REJECTED):
        raise ValidationError("Keputusan harus APPROVED atau REJECTED")

    with transaction.atomic():
        obj = lock(flow.model, obj_id)
        step = obj.current_step
        if not step:
            raise ValidationError(f"{flow.label} tidak sedang dalam proses persetujuan")
        if not actor.has_role(STEP_ROLE[step]):
            raise PermissionDenied(f"Anda tidak memiliki akses untuk menyetujui pada tahap {step}")

        steps = snapshot_steps(flow, obj)
        if step not in steps or obj.status != review_status(steps, step):
            raise ValidationError(f"Status {flow.label.lower()} tidak sesuai untuk tahap {step}")
        row = repo.get_row_for_update(flow.object_type, obj.pk, step)
        if row is None:
            raise ValidationError(f"Data persetujuan tahap {step} tidak ditemukan")
        if not row.is_open:
            raise ValidationError(f"Tahap {step} sudah diproses")

        now = timezone.now()
        before = {"status": obj.status, "current_step": step}
        save_fields(row, {"decision": decision, "decided_by": actor, "decided_at": now, "notes": notes or ""})

        if decision == ApprovalDecision.REJECTED:
            save_fields(obj, {
                "status": REJECTED, "current_step": None, "rejected_at": now, "rejection_reason": notes or "",
            })
            if flow.on_rejected:
                flow.on_rejected(obj, actor)
            transaction.on_commit(partial(_notify_owner, flow, obj, "ditolak"))
        else:
            idx = steps.index(step)
            if idx + 1 < len(steps):
                nxt = steps[idx + 1]
                save_fields(obj, {"status": review_status(steps, nxt), "current_step": nxt})
                transaction.on_commit(partial(_notify_step, flow, obj, nxt))
            else:
                save_fields(obj, {"status": flow.approved_status, "current_step": None, "approved_at": now})
                if flow.on_approved:
                    flow.on_approved(obj, actor)
                transaction.on_commit(partial(_notify_owner, flow, obj, "disetujui"))

        audit_service.log_action(
            actor=actor.id, action=f"{step}_{decision}", object_type=flow.object_type, object_id=obj.pk,
            before=before, after={"status": obj.status, "current_step": obj.current_step}, notes=notes,
        )
    logger.info("[approval] %s#%s %s at %s by user=%s -> %s", flow.object_type, obj.pk, decision, step, actor.id, obj.status)
    return obj

def bulk_apply(
    ids: Iterable[int],
    fn: Callable[[int], Model],
    describe: Optional[Callable[[Model], Dict[str, Any]]] = None,
) -> Dict[str, List[Dict[str, Any]]]:
    """
    Run `fn(id)` for every id, each in its own transaction; no batch rollback.
    Returns {"success": [{id, new_status, ...}], "failed": [{id, reason}]}.
    """
    results: Dict[str, List[Dict[str, Any]]] = {"success": [], "failed": []}
    for obj_id in ids:
        try:
            obj = fn(obj_id)
        except ObjectDoesNotExist:
            results["failed"].append({"id": obj_id, "reason": "Data tidak ditemukan"})
        except (ValidationError, PermissionDenied, APIException) as ex:
            results["failed"].append({"id": obj_id, "reason": error_reason(ex)})
        else:
            item = {"id": obj_id, "new_status": obj.status}
            if describe:
                item.update(describe(obj))
            results["success"].append(item)
    return results

def bulk_decide(flow: Workflow, ids: Iterable[int], actor: User, decision: str, notes: str = "") -> Dict[str, List[Dict[str, Any]]]:
    return bulk_apply(
        ids,
        lambda obj_id: decide(flow, obj_id, actor, decision, notes),
        describe=lambda obj: {"number": flow.number(obj)},
    )

def cancel(flow: Workflow, obj_id: int, actor: User, reason: str = "", allow_draft: bool = True) -> Model:
    with transaction.atomic():
        obj = lock(flow.model, obj_id)
        _check_owner(flow, obj, actor)
        allowed = set(REVIEW_STATUSES) | ({DRAFT} if allow_draft else set())
        if obj.status not in allowed or (obj.status != DRAFT and not obj.current_step):
            raise ValidationError(f"{flow.label} dengan status {obj.status} tidak dapat dibatalkan")
        before = {"status": obj.status, "current_step": obj.current_step}
        save_fields(obj, {"status": CANCELLED, "current_step": None, "cancelled_at": timezone.now()})
        audit_service.log_action(
            actor=actor.id, action="CANCELLED", object_type=flow.object_type, object_id=obj.pk,
            before=before, after={"status": CANCELLED}, notes=reason,
        )
    return obj

def record_revision(flow: Workflow, obj, actor: User, notes: str, revised_data: Dict[str, Any]) -> Approval:
    """Mark the current step's row REVISED; the step keeps its turn to decide."""
    step = obj.current_step
    if not step:
        raise ValidationError(f"{flow.label} tidak sedang dalam proses persetujuan")
    row = repo.get_row_for_update(flow.object_type, obj.pk, step)
    if row is None or not row.is_open:
        raise ValidationError(f"Tahap {step} sudah diproses")
    save_fields(row, {
        "decision": ApprovalDecision.REVISED, "decided_by": actor, "decided_at": timezone.now(),
        "notes": notes or "", "revised_data": revised_data,
    })
    audit_service.log_action(
        actor=actor.id, action=f"{step}_REVISED", object_type=flow.object_type, object_id=obj.pk,
        after=revised_data, notes=notes,
    )
    return row


# ====== Flow configuration ======
def configure_flow(object_type: str, roles: Sequence[str]):
    roles = list(roles)
    if not roles:
        raise ValidationError({"roles": ["Minimal satu tahap persetujuan"]})
    unknown = [r for r in roles if r not in ROLE_STEP]
    if unknown:
        raise ValidationError({"roles": [f"Role tidak dapat menjadi approver: {', '.join(unknown)}"]})
    if len(set(roles)) != len(roles):
        raise ValidationError({"roles": ["Role tidak boleh duplikat"]})
    return repo.replace_flow(object_type, roles)

def describe_flow(flow: Workflow) -> Dict[str, Any]:
    steps = steps_for(flow)
    return {
        "object_type": flow.object_type,
        "label": flow.label,
        "steps": steps,
        "roles": [STEP_ROLE[s] for s in steps],
        "is_default": not repo.flow_roles(flow.object_type),
    }
