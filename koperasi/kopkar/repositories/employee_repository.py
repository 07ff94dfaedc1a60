# -*- coding: utf-8 -*-
from __future__ import annotations
from typing import Any, Dict, Optional

from django.db import transaction
from django.db.models import QuerySet, Q

from kopkar.models import Employee


def base_qs() -> QuerySet[Employee]:
    return Employee.objects.select_related("department", "golongan")

def get_by_id(emp_id: int) -> Optional[Employee]:
    return base_qs().filter(id=emp_id).first()

def get_by_number(number: str) -> Optional[Employee]:
    return base_qs().filter(employee_number=number).first()

def filter_employees(filters: Dict[str, Any]) -> QuerySet[Employee]:
    qs = base_qs()
    if (dept := filters.get("department_id")):
        qs = qs.filter(department_id=dept)
    if (gol := filters.get("golongan_id")):
        qs = qs.filter(golongan_id=gol)
    if (etype := filters.get("employee_type")):
        qs = qs.filter(employee_type=etype)
    if (active := filters.get("is_active")) is not None:
        qs = qs.filter(is_active=active)
    if (qtext := (filters.get("q") or "").strip()):
        qs = qs.filter(Q(employee_number__icontains=qtext) | Q(full_name__icontains=qtext))
    return qs

@transaction.atomic
def create(data: Dict[str, Any]) -> Employee:
    return Employee.objects.create(**data)

@transaction.atomic
def delete(obj: Employee) -> None:
    obj.delete()
