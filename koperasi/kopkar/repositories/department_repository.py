# -*- coding: utf-8 -*-
"""
Repository layer cho Department (thuần DB).
"""
from __future__ import annotations
from typing import Optional, Dict, Any
from django.db import transaction
from django.db.models import QuerySet

from kopkar.models import Department


# ============== Queries ==============
def get_by_id(dept_id: int) -> Optional[Department]:
    return Department.objects.filter(id=dept_id).first()

def get_by_name(name: str) -> Optional[Department]:
    return Department.objects.filter(name__iexact=name).first()

def list_all(q: str = "", active_only: bool = False) -> QuerySet[Department]:
    qs = Department.objects.all()
    if q:
        qs = qs.filter(name__icontains=q)
    if active_only:
        qs = qs.filter(is_active=True)
    return qs.order_by("name")


# ============== Mutations ==============
@transaction.atomic
def create(data: Dict[str, Any]) -> Department:
    return Department.objects.create(**data)

@transaction.atomic
def delete(obj: Department) -> None:
    obj.delete()
