# -*- coding: utf-8 -*-
from __future__ import annotations
from typing import Any, Dict, List, Optional

from django.db import transaction
from django.db.models import QuerySet, Prefetch

from kopkar.models import Golongan, LoanLimit


def list_all() -> QuerySet[Golongan]:
    return Golongan.objects.prefetch_related(
        Prefetch("loan_limits", queryset=LoanLimit.objects.order_by("min_years_of_service"))
    ).order_by("name")

def get_by_id(golongan_id: int) -> Optional[Golongan]:
    return list_all().filter(id=golongan_id).first()

def get_by_name(name: str) -> Optional[Golongan]:
    return Golongan.objects.filter(name__iexact=name).first()

def limits_for(golongan_id: int) -> QuerySet[LoanLimit]:
    return LoanLimit.objects.filter(golongan_id=golongan_id).order_by("min_years_of_service")

@transaction.atomic
def create(data: Dict[str, Any]) -> Golongan:
    return Golongan.objects.create(**data)

@transaction.atomic
def delete(obj: Golongan) -> None:
    obj.delete()

@transaction.atomic
def replace_limits(golongan: Golongan, rows: List[Dict[str, Any]]) -> List[LoanLimit]:
    LoanLimit.objects.filter(golongan=golongan).delete()
    return LoanLimit.objects.bulk_create([LoanLimit(golongan=golongan, **r) for r in rows])
