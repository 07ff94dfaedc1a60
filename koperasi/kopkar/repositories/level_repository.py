# -*- coding: utf-8 -*-
from __future__ import annotations
from typing import Any, Dict, Iterable, List, Optional

from django.db import transaction
from django.db.models import QuerySet, Count

from kopkar.models import Level, User


def list_all() -> QuerySet[Level]:
    return Level.objects.annotate(user_count=Count("users")).order_by("level_name")

def get_by_id(level_id: int) -> Optional[Level]:
    return list_all().filter(id=level_id).first()

def get_by_names(names: Iterable[str]) -> List[Level]:
    return list(Level.objects.filter(level_name__in=list(names)))

def users_of(level_id: int) -> QuerySet[User]:
    return User.objects.filter(levels__id=level_id).order_by("name")

def emails_of_role(role: str) -> List[tuple]:
    return list(
        User.objects.filter(levels__level_name=role, is_active=True)
        .values_list("id", "email").distinct()
    )

@transaction.atomic
def create(data: Dict[str, Any]) -> Level:
    return Level.objects.create(**data)

@transaction.atomic
def delete(obj: Level) -> None:
    obj.delete()
