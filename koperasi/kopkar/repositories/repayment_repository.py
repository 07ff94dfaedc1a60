# -*- coding: utf-8 -*-
from __future__ import annotations
from typing import Any, Dict, Sequence

from django.db import transaction
from django.db.models import QuerySet, Q

from kopkar.models import LoanRepayment


def base_qs() -> QuerySet[LoanRepayment]:
    return LoanRepayment.objects.select_related("loan", "user", "user__employee")

def get_by_id(repayment_id: int) -> LoanRepayment:
    return base_qs().get(id=repayment_id)

def filter_repayments(filters: Dict[str, Any]) -> QuerySet[LoanRepayment]:
    qs = base_qs()
    if (statuses := filters.get("status")):
        qs = qs.filter(status__in=statuses)
    if (steps := filters.get("current_step")):
        qs = qs.filter(current_step__in=steps)
    if (loan_id := filters.get("loan_id")):
        qs = qs.filter(loan_id=loan_id)
    if (qtext := (filters.get("q") or "").strip()):
        qs = qs.filter(
            Q(repayment_number__icontains=qtext) | Q(loan__loan_number__icontains=qtext) | Q(user__name__icontains=qtext)
        )
    return qs

def has_open_for_loan(loan_id: int, open_statuses: Sequence[str]) -> bool:
    return LoanRepayment.objects.filter(loan_id=loan_id, status__in=open_statuses).exists()

@transaction.atomic
def create(data: Dict[str, Any]) -> LoanRepayment:
    return LoanRepayment.objects.create(**data)
