# -*- coding: utf-8 -*-
"""
Selector cho LoanApplication:
- Chuẩn hoá input
- Uỷ quyền sang repository
"""
from __future__ import annotations
from typing import Any, Dict

from django.db.models import QuerySet

from kopkar.models import LoanApplication, User
from kopkar.repositories import loan_repository as repo
from kopkar.selectors.common import as_int, as_str_list
from kopkar.services import approval_service


def _norm(filters: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "status": as_str_list(filters.get("status")),
        "loan_type": as_str_list(filters.get("loanType") or filters.get("loan_type")),
        "current_step": as_str_list(filters.get("step") or filters.get("current_step")),
        "user_id": as_int(filters.get("userId") or filters.get("user_id")),
        "q": (filters.get("search") or filters.get("q") or "").strip(),
    }

def filter_loans(filters: Dict[str, Any]) -> QuerySet[LoanApplication]:
    return repo.filter_loans(_norm(filters))

def list_my_loans(user: User, filters: Dict[str, Any]) -> QuerySet[LoanApplication]:
    return repo.filter_loans({**_norm(filters), "user_id": user.id})

def list_pending_for(user: User, filters: Dict[str, Any]) -> QuerySet[LoanApplication]:
    return approval_service.pending_for(filter_loans(filters), user)

def list_by_status(status: str, filters: Dict[str, Any]) -> QuerySet[LoanApplication]:
    return repo.filter_loans({**_norm(filters), "status": [status]})

get_loan_by_id = repo.get_by_id
list_installments = repo.installments
