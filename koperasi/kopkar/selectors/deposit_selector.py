# -*- coding: utf-8 -*-
from __future__ import annotations
from typing import Any, Dict

from django.db.models import QuerySet

from kopkar.models import DepositApplication, User
from kopkar.repositories import deposit_repository as repo
from kopkar.selectors.common import as_int, as_str_list
from kopkar.services import approval_service


def _norm(filters: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "status": as_str_list(filters.get("status")),
        "current_step": as_str_list(filters.get("step") or filters.get("current_step")),
        "user_id": as_int(filters.get("userId") or filters.get("user_id")),
        "q": (filters.get("search") or filters.get("q") or "").strip(),
    }

def filter_deposits(filters: Dict[str, Any]) -> QuerySet[DepositApplication]:
    return repo.filter_deposits(_norm(filters))

def list_my_deposits(user: User, filters: Dict[str, Any]) -> QuerySet[DepositApplication]:
    return repo.filter_deposits({**_norm(filters), "user_id": user.id})

def list_pending_for(user: User, filters: Dict[str, Any]) -> QuerySet[DepositApplication]:
    return approval_service.pending_for(filter_deposits(filters), user)

get_deposit_by_id = repo.get_by_id
