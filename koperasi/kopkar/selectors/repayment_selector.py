# -*- coding: utf-8 -*-
from __future__ import annotations
from typing import Any, Dict

from django.db.models import QuerySet

from kopkar.models import LoanRepayment, User
from kopkar.repositories import repayment_repository as repo
from kopkar.selectors.common import as_int, as_str_list
from kopkar.services import approval_service


def _norm(filters: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "status": as_str_list(filters.get("status")),
        "current_step": as_str_list(filters.get("step") or filters.get("current_step")),
        "loan_id": as_int(filters.get("loanId") or filters.get("loan_id")),
        "q": (filters.get("search") or filters.get("q") or "").strip(),
    }

def filter_repayments(filters: Dict[str, Any]) -> QuerySet[LoanRepayment]:
    return repo.filter_repayments(_norm(filters))

def list_my_repayments(user: User, filters: Dict[str, Any]) -> QuerySet[LoanRepayment]:
    return repo.filter_repayments(_norm(filters)).filter(user_id=user.id)

def list_pending_for(user: User, filters: Dict[str, Any]) -> QuerySet[LoanRepayment]:
    return approval_service.pending_for(filter_repayments(filters), user)

get_repayment_by_id = repo.get_by_id
