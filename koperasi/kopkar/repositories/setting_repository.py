# -*- coding: utf-8 -*-
from __future__ import annotations
from typing import Dict, Optional

from django.db import transaction
from django.db.models import QuerySet

from kopkar.models import CooperativeSetting


def list_all(category: Optional[str] = None) -> QuerySet[CooperativeSetting]:
    qs = CooperativeSetting.objects.all()
    if category:
        qs = qs.filter(category=category)
    return qs.order_by("category", "key")

def get_by_key(key: str) -> Optional[CooperativeSetting]:
    return CooperativeSetting.objects.filter(key=key).first()

def values() -> Dict[str, str]:
    return dict(CooperativeSetting.objects.values_list("key", "value"))

@transaction.atomic
def upsert(key: str, value: str, **defaults) -> CooperativeSetting:
    obj, created = CooperativeSetting.objects.get_or_create(key=key, defaults={"value": value, **defaults})
    if not created and obj.value != value:
        obj.value = value
        obj.save(update_fields=["value", "updated_at"])
    return obj
