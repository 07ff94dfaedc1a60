# -*- coding: utf-8 -*-
"""Mutation helpers shared by the repositories (thuần DB)."""
from __future__ import annotations
from typing import Any, Dict, Iterable, List, Optional, Type, TypeVar

from django.db import models, transaction

M = TypeVar("M", bound=models.Model)


@transaction.atomic
def save_fields(obj: M, patch: Dict[str, Any], allowed: Optional[Iterable[str]] = None) -> M:
    fields: List[str] = []
    for k, v in patch.items():
        if (allowed is None) or (k in allowed):
            setattr(obj, k, v)
            fields.append(k)
    if fields:
        if any(f.name == "updated_at" for f in obj._meta.fields):
            fields.append("updated_at")
        obj.save(update_fields=fields)
    return obj


def lock(model: Type[M], pk: int) -> M:
    """Row lock; call inside transaction.atomic()."""
    return model.objects.select_for_update().get(pk=pk)
