# -*- coding: utf-8 -*-
"""Filters for deposit withdrawals and deposit change requests."""
from __future__ import annotations
from typing import Any, Dict

from django.db.models import QuerySet

from kopkar.models import DepositChangeRequest, DepositWithdrawal, User
from kopkar.repositories import deposit_repository as repo
from kopkar.selectors.common import as_int, as_str_list
from kopkar.services import approval_service


def _norm(filters: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "status": as_str_list(filters.get("status")),
        "current_step": as_str_list(filters.get("step") or filters.get("current_step")),
        "user_id": as_int(filters.get("userId") or filters.get("user_id")),
        "deposit_id": as_int(filters.get("depositId") or filters.get("deposit_id")),
        "q": (filters.get("search") or filters.get("q") or "").strip(),
    }


# ====== Withdrawals ======
def filter_withdrawals(filters: Dict[str, Any]) -> QuerySet[DepositWithdrawal]:
    return repo.filter_requests(repo.withdrawal_qs(), "withdrawal_number", _norm(filters))

def list_my_withdrawals(user: User, filters: Dict[str, Any]) -> QuerySet[DepositWithdrawal]:
    return repo.filter_requests(repo.withdrawal_qs(), "withdrawal_number", {**_norm(filters), "user_id": user.id})

def list_pending_withdrawals(user: User, filters: Dict[str, Any]) -> QuerySet[DepositWithdrawal]:
    return approval_service.pending_for(filter_withdrawals(filters), user)

def withdrawals_by_status(status: str, filters: Dict[str, Any]) -> QuerySet[DepositWithdrawal]:
    return repo.filter_requests(repo.withdrawal_qs(), "withdrawal_number", {**_norm(filters), "status": [status]})

get_withdrawal_by_id = repo.get_withdrawal


# ====== Change requests ======
def filter_changes(filters: Dict[str, Any]) -> QuerySet[DepositChangeRequest]:
    return repo.filter_requests(repo.change_qs(), "change_number", _norm(filters))

def list_my_changes(user: User, filters: Dict[str, Any]) -> QuerySet[DepositChangeRequest]:
    return repo.filter_requests(repo.change_qs(), "change_number", {**_norm(filters), "user_id": user.id})

def list_pending_changes(user: User, filters: Dict[str, Any]) -> QuerySet[DepositChangeRequest]:
    return approval_service.pending_for(filter_changes(filters), user)

get_change_by_id = repo.get_change
