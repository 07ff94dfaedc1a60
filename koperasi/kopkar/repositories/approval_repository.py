# -*- coding: utf-8 -*-
"""
Repository cho Approval rows + ApprovalFlow configuration (thuần DB).
"""
from __future__ import annotations
from typing import List, Optional, Sequence

from django.db import transaction
from django.db.models import QuerySet

from kopkar.models import Approval, ApprovalFlow


# ============== Queries ==============
def rows_for(object_type: str, object_id: int) -> QuerySet[Approval]:
    return Approval.objects.filter(object_type=object_type, object_id=object_id).order_by("sequence")

def get_row_for_update(object_type: str, object_id: int, step: str) -> Optional[Approval]:
    return (
        Approval.objects.select_for_update()
        .filter(object_type=object_type, object_id=object_id, step=step)
        .first()
    )

def flow_roles(object_type: str) -> List[str]:
    return list(ApprovalFlow.objects.filter(object_type=object_type).order_by("step").values_list("role", flat=True))


# ============== Mutations ==============
@transaction.atomic
def create_rows(object_type: str, object_id: int, steps: Sequence[str]) -> List[Approval]:
    return Approval.objects.bulk_create([
        Approval(object_type=object_type, object_id=object_id, sequence=i, step=step)
        for i, step in enumerate(steps, start=1)
    ])

@transaction.atomic
def replace_flow(object_type: str, roles: Sequence[str]) -> List[ApprovalFlow]:
    ApprovalFlow.objects.filter(object_type=object_type).delete()
    return ApprovalFlow.objects.bulk_create([
        ApprovalFlow(object_type=object_type, role=role, step=i)
        for i, role in enumerate(roles, start=1)
    ])
