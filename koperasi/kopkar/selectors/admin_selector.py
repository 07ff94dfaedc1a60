# -*- coding: utf-8 -*-
"""
Selectors cho dữ liệu master/admin: user, employee, department, golongan,
level, buku tabungan, email log.
"""
from __future__ import annotations
from typing import Any, Dict

from django.db.models import QuerySet

from kopkar.models import EmailLog, Employee, SavingsAccount, User
from kopkar.repositories import (
    department_repository, email_repository, employee_repository, golongan_repository,
    level_repository, savings_repository, user_repository,
)
from kopkar.selectors.common import as_bool, as_date, as_int


def filter_users(filters: Dict[str, Any]) -> QuerySet[User]:
    return user_repository.filter_users({
        "role": (filters.get("role") or "").strip(),
        "member_verified": as_bool(filters.get("memberVerified") or filters.get("member_verified")),
        "department_id": as_int(filters.get("departmentId") or filters.get("department_id")),
        "q": (filters.get("search") or filters.get("q") or "").strip(),
    })

def filter_employees(filters: Dict[str, Any]) -> QuerySet[Employee]:
    return employee_repository.filter_employees({
        "department_id": as_int(filters.get("departmentId") or filters.get("department_id")),
        "golongan_id": as_int(filters.get("golonganId") or filters.get("golongan_id")),
        "employee_type": (filters.get("employeeType") or filters.get("employee_type") or "").upper() or None,
        "is_active": as_bool(filters.get("isActive") or filters.get("is_active")),
        "q": (filters.get("search") or filters.get("q") or "").strip(),
    })

def filter_accounts(filters: Dict[str, Any]) -> QuerySet[SavingsAccount]:
    return savings_repository.filter_accounts({
        "department_id": as_int(filters.get("departmentId") or filters.get("department_id")),
        "q": (filters.get("search") or filters.get("q") or "").strip(),
    })

def ledger_filters(filters: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "date_from": as_date(filters.get("startDate") or filters.get("date_from")),
        "date_to": as_date(filters.get("endDate") or filters.get("date_to")),
        "payroll_period_id": as_int(filters.get("periodId") or filters.get("payroll_period_id")),
    }

def filter_email_logs(filters: Dict[str, Any]) -> QuerySet[EmailLog]:
    status = (filters.get("status") or "").strip().upper()
    delivered = {"SENT": True, "DELIVERED": True, "FAILED": False}.get(status)
    if delivered is None:
        delivered = as_bool(filters.get("delivered"))
    return email_repository.filter_logs({
        "delivered": delivered,
        "object_type": (filters.get("objectType") or filters.get("object_type") or "").strip(),
        "q": (filters.get("search") or filters.get("q") or "").strip(),
    })

def list_departments(filters: Dict[str, Any]):
    return department_repository.list_all(
        q=(filters.get("search") or filters.get("q") or "").strip(),
        active_only=bool(as_bool(filters.get("activeOnly") or filters.get("active_only"))),
    )

get_user_by_id = user_repository.get_by_id
get_employee_by_id = employee_repository.get_by_id
get_department_by_id = department_repository.get_by_id
list_golongan = golongan_repository.list_all
get_golongan_by_id = golongan_repository.get_by_id
list_levels = level_repository.list_all
get_level_by_id = level_repository.get_by_id
users_of_level = level_repository.users_of
list_email_configs = email_repository.list_configs
get_email_config = email_repository.get_config
get_email_log = email_repository.get_log
