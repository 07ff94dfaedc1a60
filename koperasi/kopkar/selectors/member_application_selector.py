# -*- coding: utf-8 -*-
from __future__ import annotations
from typing import Any, Dict

from django.db.models import QuerySet

from kopkar.models import MemberApplication, User
from kopkar.repositories import member_repository as repo
from kopkar.selectors.common import as_str_list
from kopkar.services import approval_service


def filter_applications(filters: Dict[str, Any]) -> QuerySet[MemberApplication]:
    return repo.filter_applications({
        "status": as_str_list(filters.get("status")),
        "current_step": as_str_list(filters.get("step") or filters.get("current_step")),
        "q": (filters.get("search") or filters.get("q") or "").strip(),
    })

def list_pending_for(user: User, filters: Dict[str, Any]) -> QuerySet[MemberApplication]:
    return approval_service.pending_for(filter_applications(filters), user)

get_application_by_id = repo.get_by_id
get_my_application = repo.latest_for_user
