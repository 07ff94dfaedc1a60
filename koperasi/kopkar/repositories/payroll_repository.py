# -*- coding: utf-8 -*-
from __future__ import annotations
from typing import Any, Dict, Optional

from django.db import transaction
from django.db.models import QuerySet

from kopkar.models import PayrollPeriod, SavingsTransaction


def list_periods() -> QuerySet[PayrollPeriod]:
    return PayrollPeriod.objects.all()

def get_by_id(period_id: int) -> PayrollPeriod:
    return PayrollPeriod.objects.get(id=period_id)

def find(month: int, year: int) -> Optional[PayrollPeriod]:
    return PayrollPeriod.objects.filter(month=month, year=year).first()

def lock_or_create(month: int, year: int, defaults: Dict[str, Any]) -> PayrollPeriod:
    period, _ = PayrollPeriod.objects.select_for_update().get_or_create(month=month, year=year, defaults=defaults)
    return period

def transactions(period_id: int) -> QuerySet[SavingsTransaction]:
    return (
        SavingsTransaction.objects.filter(payroll_period_id=period_id)
        .select_related("account", "account__user", "account__user__employee")
        .order_by("account__user__name")
    )

@transaction.atomic
def create(data: Dict[str, Any]) -> PayrollPeriod:
    return PayrollPeriod.objects.create(**data)
