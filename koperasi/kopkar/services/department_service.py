# -*- coding: utf-8 -*-
"""
Service layer cho Department.
- Tên department unique (không phân biệt hoa thường) → 409.
- Không xoá khi còn nhân viên.
"""
from __future__ import annotations
from typing import Dict, Any

from django.core.exceptions import ValidationError

from kopkar.models import Department
from kopkar.repositories import department_repository as repo
from kopkar.repositories.base import save_fields
from kopkar.utils.exceptions import Conflict


def create_department(data: Dict[str, Any]) -> Department:
    if repo.get_by_name(data["name"]):
        raise Conflict("Department dengan nama tersebut sudah ada")
    return repo.create(data)

def update_department(dept: Department, data: Dict[str, Any]) -> Department:
    if "name" in data and data["name"].lower() != dept.name.lower():
        if repo.get_by_name(data["name"]):
            raise Conflict("Department dengan nama tersebut sudah ada")
    return save_fields(dept, data, allowed={"name", "is_active"})

def delete_department(dept: Department) -> None:
    count = dept.employees.count()
    if count:
        raise ValidationError(
            f"Tidak dapat menghapus department. Masih ada {count} karyawan yang terdaftar di department ini."
        )
    repo.delete(dept)
