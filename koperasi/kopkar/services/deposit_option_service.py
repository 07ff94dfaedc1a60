# -*- coding: utf-8 -*-
"""
Deposit amount/tenor options and the return projection shown to members.
"""
from __future__ import annotations
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List

from django.core.exceptions import ValidationError

from kopkar.models import DepositAmountOption, DepositTenorOption
from kopkar.repositories import deposit_repository as repo
from kopkar.repositories.base import save_fields
from kopkar.services import settings_service

OPTION_MODELS = {"amount": DepositAmountOption, "tenor": DepositTenorOption}


def _model(kind: str):
    try:
        return OPTION_MODELS[kind]
    except KeyError:
        raise ValidationError("Jenis opsi harus 'amount' atau 'tenor'")


# ====== Options CRUD ======
def get_option(kind: str, option_id: int):
    return _model(kind).objects.get(pk=option_id)

def list_options(kind: str, active_only: bool = False):
    if _model(kind) is DepositAmountOption:
        return repo.list_amount_options(active_only)
    return repo.list_tenor_options(active_only)

def create_option(kind: str, data: Dict[str, Any]):
    model = _model(kind)
    if model.objects.filter(code=data["code"]).exists():
        raise ValidationError({"code": ["Kode opsi sudah digunakan"]})
    return repo.create_option(model, data)

def update_option(obj, data: Dict[str, Any]):
    if "code" in data and data["code"] != obj.code and type(obj).objects.filter(code=data["code"]).exists():
        raise ValidationError({"code": ["Kode opsi sudah digunakan"]})
    return save_fields(obj, data, allowed={"code", "label", "amount", "months", "is_active", "sort_order"})

def delete_option(obj) -> None:
    repo.delete_option(obj)

def config() -> Dict[str, Any]:
    return {
        "amounts": list(repo.list_amount_options(active_only=True)),
        "tenors": list(repo.list_tenor_options(active_only=True)),
        "interest_rate": settings_service.get_decimal("deposit_interest_rate"),
        "calculation_method": settings_service.get_value("deposit_calculation_method").upper(),
    }


# ====== Projection ======
def _r(value: Decimal) -> Decimal:
    return value.quantize(Decimal("1"), rounding=ROUND_HALF_UP)

def calculate_return(monthly_deposit, tenor_months: int, annual_rate, method: str = "SIMPLE") -> Dict[str, Any]:
    """
    Monthly-installment term savings.
    SIMPLE: interest on the average balance, (P × n × (n + 1)) / (2n) × rate × n/12.
    COMPOUND: the whole balance earns rate/12 every month.
    """
    pmt = Decimal(str(monthly_deposit))
    n = int(tenor_months)
    rate = Decimal(str(annual_rate))
    principal = pmt * n
    breakdown: List[Dict[str, Any]] = []

    if method.upper() == "COMPOUND":
        monthly_rate = rate / 100 / 12
        deposits = interest = Decimal("0")
        for month in range(1, n + 1):
            deposits += pmt
            interest += (deposits + interest) * monthly_rate
            breakdown.append({"month": month, "deposit_accumulation": _r(deposits),
                              "interest_accumulation": _r(interest), "total_balance": _r(deposits + interest)})
        projected = interest
        effective = ((1 + monthly_rate) ** 12 - 1) * 100
    else:
        average = (pmt * n * (n + 1)) / (2 * n) if n else Decimal("0")
        projected = average * rate / 100 * Decimal(n) / 12
        effective = rate
        per_month = projected / n if n else Decimal("0")
        for month in range(1, n + 1):
            breakdown.append({"month": month, "deposit_accumulation": _r(pmt * month),
                              "interest_accumulation": _r(per_month * month),
                              "total_balance": _r(pmt * month + per_month * month)})

    return {
        "monthly_deposit": pmt,
        "tenor_months": n,
        "interest_rate": rate,
        "calculation_method": method.upper(),
        "total_principal": principal,
        "projected_interest": _r(projected),
        "total_return": _r(principal + projected),
        "effective_rate": effective.quantize(Decimal("0.01")),
        "monthly_breakdown": breakdown,
    }
