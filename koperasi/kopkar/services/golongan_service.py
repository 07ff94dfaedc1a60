# -*- coding: utf-8 -*-
"""Service cho Golongan + ma trận plafond (LoanLimit)."""
from __future__ import annotations
from decimal import Decimal
from typing import Any, Dict, List

from django.core.exceptions import ValidationError
from django.db import transaction

from kopkar.models import Golongan, LoanLimit
from kopkar.repositories import golongan_repository as repo
from kopkar.repositories.base import save_fields
from kopkar.utils.exceptions import Conflict


def create_golongan(data: Dict[str, Any]) -> Golongan:
    if repo.get_by_name(data["name"]):
        raise Conflict("Golongan dengan nama tersebut sudah ada")
    return repo.create(data)

def update_golongan(golongan: Golongan, data: Dict[str, Any]) -> Golongan:
    if "name" in data and data["name"].lower() != golongan.name.lower():
        if repo.get_by_name(data["name"]):
            raise Conflict("Golongan dengan nama tersebut sudah ada")
    return save_fields(golongan, data, allowed={"name", "description"})

def delete_golongan(golongan: Golongan) -> None:
    count = golongan.employees.count()
    if count:
        raise ValidationError(f"Tidak dapat menghapus golongan. Masih ada {count} karyawan dengan golongan ini.")
    repo.delete(golongan)


def _check_ranges(rows: List[Dict[str, Any]]) -> None:
    """Rows sorted by min years; ranges must not overlap and only the last may be open."""
    ordered = sorted(rows, key=lambda r: r["min_years_of_service"])
    for i, row in enumerate(ordered):
        low, high = row["min_years_of_service"], row.get("max_years_of_service")
        if high is not None and high < low:
            raise ValidationError({"limits": [f"Rentang masa kerja {low}-{high} tidak valid"]})
        if Decimal(row["max_loan_amount"]) <= 0:
            raise ValidationError({"limits": ["Plafond harus lebih dari 0"]})
        if i + 1 < len(ordered):
            nxt = ordered[i + 1]["min_years_of_service"]
            if high is None or high >= nxt:
                raise ValidationError({"limits": [f"Rentang masa kerja mulai {low} tumpang tindih dengan {nxt}"]})

def replace_limits(golongan: Golongan, rows: List[Dict[str, Any]]) -> List[LoanLimit]:
    _check_ranges(rows)
    with transaction.atomic():
        return repo.replace_limits(golongan, rows)

def max_loan_amount(golongan: Golongan, years: int):
    for limit in repo.limits_for(golongan.id):
        if limit.covers(years):
            return limit.max_loan_amount
    return None
