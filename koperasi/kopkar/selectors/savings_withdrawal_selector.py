# -*- coding: utf-8 -*-
from __future__ import annotations
from typing import Any, Dict

from django.db.models import QuerySet

from kopkar.models import SavingsWithdrawal, User
from kopkar.repositories import savings_repository as repo
from kopkar.selectors.common import as_str_list
from kopkar.services import approval_service


def _norm(filters: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "status": as_str_list(filters.get("status")),
        "current_step": as_str_list(filters.get("step") or filters.get("current_step")),
        "q": (filters.get("search") or filters.get("q") or "").strip(),
    }

def filter_withdrawals(filters: Dict[str, Any]) -> QuerySet[SavingsWithdrawal]:
    return repo.filter_withdrawals(_norm(filters))

def list_my_withdrawals(user: User, filters: Dict[str, Any]) -> QuerySet[SavingsWithdrawal]:
    return repo.filter_withdrawals(_norm(filters)).filter(user_id=user.id)

def list_pending_for(user: User, filters: Dict[str, Any]) -> QuerySet[SavingsWithdrawal]:
    return approval_service.pending_for(filter_withdrawals(filters), user)

def list_by_status(status: str, filters: Dict[str, Any]) -> QuerySet[SavingsWithdrawal]:
    return repo.filter_withdrawals({**_norm(filters), "status": [status]})

get_withdrawal_by_id = repo.get_withdrawal
