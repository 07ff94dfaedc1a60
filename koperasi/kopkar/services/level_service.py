# -*- coding: utf-8 -*-
from __future__ import annotations
from typing import Any, Dict

from django.core.exceptions import ObjectDoesNotExist, ValidationError

from kopkar.models import Level, User
from kopkar.repositories import level_repository as repo, user_repository
from kopkar.repositories.base import save_fields
from kopkar.utils import roles
from kopkar.utils.exceptions import Conflict


def create_level(data: Dict[str, Any]) -> Level:
    if Level.objects.filter(level_name__iexact=data["level_name"]).exists():
        raise Conflict("Level dengan nama tersebut sudah ada")
    return repo.create(data)

def update_level(level: Level, data: Dict[str, Any]) -> Level:
    name = data.get("level_name")
    if name and name != level.level_name:
        if level.level_name in roles.ALL_ROLES:
            raise ValidationError(f'Nama level "{level.level_name}" tidak dapat diubah')
        if Level.objects.filter(level_name__iexact=name).exclude(id=level.id).exists():
            raise Conflict("Level dengan nama tersebut sudah ada")
    return save_fields(level, data, allowed={"level_name", "description"})

def delete_level(level: Level) -> None:
    if level.level_name == roles.ANGGOTA:
        raise ValidationError('Level "anggota" tidak dapat dihapus karena merupakan level default')
    count = level.users.count()
    if count:
        raise ValidationError(f"Tidak dapat menghapus level. Masih ada {count} user yang memiliki level ini.")
    repo.delete(level)

def assign_user(level: Level, user_id: int) -> User:
    user = user_repository.get_by_id(user_id)
    if user is None:
        raise ObjectDoesNotExist("User tidak ditemukan")
    if user.levels.filter(id=level.id).exists():
        raise Conflict("User sudah memiliki level ini")
    return user_repository.add_level(user, level)

def remove_user(level: Level, user_id: int) -> None:
    user = user_repository.get_by_id(user_id)
    if user is None or not user.levels.filter(id=level.id).exists():
        raise ObjectDoesNotExist("User tidak memiliki level ini")
    user_repository.remove_level(user, level)
