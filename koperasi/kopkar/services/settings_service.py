# -*- coding: utf-8 -*-
"""
Cooperative settings (key/value) with code defaults.

Values are stored as strings; typed getters fall back to DEFAULTS when a key
is missing or malformed.
"""
from __future__ import annotations
import logging
from decimal import Decimal, InvalidOperation
from typing import Dict, List, Any

from django.core.exceptions import ObjectDoesNotExist, ValidationError
from django.db import transaction

from kopkar.models import CooperativeSetting
from kopkar.repositories import setting_repository as repo
from kopkar.services import audit_service

logger = logging.getLogger(__name__)

C = CooperativeSetting.Category

# key -> (default value, category, label)
DEFAULTS: Dict[str, tuple] = {
    "cooperative_name": ("Koperasi Karyawan", C.GENERAL, "Nama koperasi"),
    "cooperative_cutoff_date": ("15", C.GENERAL, "Tanggal cut-off bulanan"),
    "cooperative_payroll_date": ("27", C.GENERAL, "Tanggal penggajian"),
    "initial_membership_fee": ("500000", C.MEMBERSHIP, "Simpanan pokok (iuran pendaftaran)"),
    "monthly_membership_fee": ("100000", C.MEMBERSHIP, "Simpanan wajib bulanan"),
    "loan_interest_rate": ("8", C.LOAN, "Bunga pinjaman per tahun (%)"),
    "min_loan_amount": ("500000", C.LOAN, "Minimal pinjaman"),
    "max_goods_loan_amount": ("15000000", C.LOAN, "Maksimal kredit barang"),
    "max_loan_tenor": ("36", C.LOAN, "Tenor maksimal (bulan)"),
    "shop_margin_rate": ("5", C.LOAN, "Margin toko kredit online (%)"),
    "deposit_interest_rate": ("4", C.DEPOSIT, "Bunga deposito per tahun (%)"),
    "deposit_calculation_method": ("SIMPLE", C.DEPOSIT, "Metode perhitungan bunga (SIMPLE/COMPOUND)"),
    "deposit_change_admin_fee": ("15000", C.DEPOSIT, "Biaya admin perubahan deposito"),
    "deposit_early_withdrawal_penalty_rate": ("3", C.SAVINGS, "Penalti penarikan saat deposito berjalan (%)"),
}

NUMERIC_KEYS = {k for k, v in DEFAULTS.items() if v[0].replace(".", "", 1).isdigit()}


# ====== Typed getters ======
def get_value(key: str) -> str:
    obj = repo.get_by_key(key)
    if obj is not None:
        return obj.value
    return DEFAULTS[key][0] if key in DEFAULTS else ""

def get_decimal(key: str) -> Decimal:
    raw = get_value(key)
    try:
        return Decimal(str(raw).strip())
    except (InvalidOperation, ValueError):
        logger.warning("[settings] %s=%r is not numeric; using default", key, raw)
        return Decimal(DEFAULTS[key][0])

def get_int(key: str) -> int:
    return int(get_decimal(key))


# ====== CRUD ======
def list_settings(category: str = "") -> List[CooperativeSetting]:
    return list(repo.list_all(category or None))

def grouped() -> Dict[str, List[Dict[str, Any]]]:
    """Stored rows merged with defaults, grouped by category."""
    stored = {s.key: s for s in repo.list_all()}
    out: Dict[str, List[Dict[str, Any]]] = {}
    for key in sorted(set(stored) | set(DEFAULTS)):
        s = stored.get(key)
        default = DEFAULTS.get(key)
        category = s.category if s else default[1]
        out.setdefault(category, []).append({
            "key": key,
            "value": s.value if s else default[0],
            "label": (s.label if s and s.label else (default[2] if default else key)),
            "is_default": s is None,
        })
    return out

def get_setting(key: str) -> Dict[str, Any]:
    s = repo.get_by_key(key)
    if s:
        return {"key": s.key, "value": s.value, "category": s.category, "label": s.label, "description": s.description}
    if key in DEFAULTS:
        value, category, label = DEFAULTS[key]
        return {"key": key, "value": value, "category": category, "label": label, "description": ""}
    raise ObjectDoesNotExist(f"Setting '{key}' tidak ditemukan")

def _validate(key: str, value: str) -> str:
    value = str(value).strip()
    if key in NUMERIC_KEYS:
        try:
            num = Decimal(value)
        except InvalidOperation:
            raise ValidationError({"value": [f"Nilai {key} harus berupa angka"]})
        if num < 0:
            raise ValidationError({"value": [f"Nilai {key} tidak boleh negatif"]})
        if key in ("cooperative_cutoff_date", "cooperative_payroll_date") and not (1 <= num <= 31):
            raise ValidationError({"value": ["Tanggal harus antara 1 dan 31"]})
    if key == "deposit_calculation_method" and value.upper() not in ("SIMPLE", "COMPOUND"):
        raise ValidationError({"value": ["Metode harus SIMPLE atau COMPOUND"]})
    return value.upper() if key == "deposit_calculation_method" else value

def update_setting(key: str, value: str, *, actor=None) -> CooperativeSetting:
    value = _validate(key, value)
    before = get_value(key)
    default = DEFAULTS.get(key)
    extra = {"category": default[1], "label": default[2]} if default else {}
    obj = repo.upsert(key, value, **extra)
    audit_service.log_action(
        actor=getattr(actor, "id", None), action="SETTING_UPDATED", object_type="setting",
        object_id=key, before={"value": before}, after={"value": value},
    )
    return obj

@transaction.atomic
def bulk_update(items: List[Dict[str, str]], *, actor=None) -> List[CooperativeSetting]:
    return [update_setting(i["key"], i["value"], actor=actor) for i in items]

@transaction.atomic
def seed_defaults() -> int:
    created = 0
    for key, (value, category, label) in DEFAULTS.items():
        if repo.get_by_key(key) is None:
            repo.upsert(key, value, category=category, label=label)
            created += 1
    return created
