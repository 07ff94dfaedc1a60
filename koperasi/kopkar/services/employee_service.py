# -*- coding: utf-8 -*-
"""
Employee Service: CRUD + import CSV (upsert theo employee_number).
"""
from __future__ import annotations
import csv
import io
import logging
from typing import Any, Dict, List, Optional

from django.core.exceptions import ValidationError
from django.db import transaction

from kopkar.models import Employee
from kopkar.repositories import department_repository, employee_repository as repo, golongan_repository
from kopkar.repositories.base import save_fields
from kopkar.utils.exceptions import Conflict

logger = logging.getLogger(__name__)

EDITABLE = {
    "employee_number", "full_name", "department", "golongan", "employee_type",
    "permanent_employee_date", "bank_account_number", "bank_account_name", "is_active",
}

CSV_HEADER = ["employee_number", "full_name", "department", "golongan", "employee_type", "is_active"]
HEADER_ALIASES = {
    "employeenumber": "employee_number",
    "nomor induk karyawan": "employee_number",
    "fullname": "full_name",
    "nama lengkap": "full_name",
    "departmentname": "department",
    "department_name": "department",
    "dept": "department",
    "golonganname": "golongan",
    "golongan_name": "golongan",
    "employeetype": "employee_type",
    "tipe karyawan": "employee_type",
    "tipe": "employee_type",
    "isactive": "is_active",
    "status": "is_active",
}
TRUE_WORDS = {"1", "true", "yes", "ya", "aktif", "active"}


def create_employee(data: Dict[str, Any]) -> Employee:
    if repo.get_by_number(data["employee_number"]):
        raise Conflict("Nomor karyawan sudah terdaftar")
    return repo.create(data)

def update_employee(emp: Employee, data: Dict[str, Any]) -> Employee:
    number = data.get("employee_number")
    if number and number != emp.employee_number and repo.get_by_number(number):
        raise Conflict("Nomor karyawan sudah terdaftar")
    return save_fields(emp, data, allowed=EDITABLE)

def toggle_active(emp: Employee) -> Employee:
    return save_fields(emp, {"is_active": not emp.is_active})

def delete_employee(emp: Employee) -> None:
    if hasattr(emp, "user"):
        raise ValidationError("Tidak dapat menghapus karyawan yang sudah memiliki akun user. Nonaktifkan saja.")
    repo.delete(emp)


# ====== CSV ======
def _norm_header(name: str) -> str:
    key = (name or "").strip().lower()
    return HEADER_ALIASES.get(key, key)

def _employee_type(raw: str) -> str:
    value = (raw or "").strip().upper()
    if value in ("KONTRAK", "CONTRACT"):
        return Employee.EmployeeType.KONTRAK
    if value in ("", "TETAP", "PERMANENT"):
        return Employee.EmployeeType.TETAP
    raise ValueError(f'Tipe karyawan "{raw}" tidak valid')

def parse_csv(content: bytes) -> List[Dict[str, str]]:
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise ValidationError("File CSV harus berformat UTF-8")
    reader = csv.DictReader(io.StringIO(text))
    if not reader.fieldnames:
        raise ValidationError("File CSV kosong")
    reader.fieldnames = [_norm_header(h) for h in reader.fieldnames]
    missing = {"employee_number", "full_name"} - set(reader.fieldnames)
    if missing:
        raise ValidationError(f"Kolom wajib tidak ada: {', '.join(sorted(missing))}")
    return [{k: (v or "").strip() for k, v in row.items() if k} for row in reader]

def _lookup(model_name: str, name: str, finder) -> Optional[Any]:
    if not name:
        return None
    found = finder(name)
    if found is None:
        raise ValueError(f'{model_name} "{name}" tidak ditemukan')
    return found

def import_csv(content: bytes) -> Dict[str, Any]:
    """Upsert every row; each row stands alone. Returns {success, failed, errors[{row, employee_number, error}]}."""
    rows = parse_csv(content)
    results: Dict[str, Any] = {"success": 0, "failed": 0, "errors": []}
    for index, row in enumerate(rows, start=2):
        number = row.get("employee_number", "")
        try:
            if not number or not row.get("full_name"):
                raise ValueError("Nomor karyawan dan nama lengkap wajib diisi")
            data = {
                "full_name": row["full_name"],
                "department": _lookup("Department", row.get("department", ""), department_repository.get_by_name),
                "golongan": _lookup("Golongan", row.get("golongan", ""), golongan_repository.get_by_name),
                "employee_type": _employee_type(row.get("employee_type", "")),
                "is_active": (row.get("is_active") or "aktif").lower() in TRUE_WORDS,
            }
            with transaction.atomic():
                existing = repo.get_by_number(number)
                if existing:
                    save_fields(existing, data)
                else:
                    repo.create({"employee_number": number, **data})
            results["success"] += 1
        except (ValueError, ValidationError) as ex:
            results["failed"] += 1
            results["errors"].append({"row": index, "employee_number": number, "error": str(ex)})
    logger.info("[employee] csv import: %s ok, %s failed", results["success"], results["failed"])
    return results

def csv_rows(qs) -> List[List[Any]]:
    out: List[List[Any]] = [CSV_HEADER]
    for emp in qs:
        out.append([
            emp.employee_number, emp.full_name,
            emp.department.name if emp.department else "",
            emp.golongan.name if emp.golongan else "",
            emp.employee_type, "Aktif" if emp.is_active else "Tidak Aktif",
        ])
    return out
