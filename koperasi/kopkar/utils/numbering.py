# -*- coding: utf-8 -*-
from typing import Optional
from datetime import date

from django.db.models import Model
from django.utils import timezone


def next_number(model: type[Model], field: str, prefix: str, on: Optional[date] = None) -> str:
    """
    <PREFIX>-YYYYMMDD-NNNN, sequence restarting every day.
    Callers run inside a transaction; the unique constraint on `field` guards races.
    """
    on = on or timezone.localdate()
    stem = f"{prefix}-{on:%Y%m%d}-"
    last = (
        model.objects.filter(**{f"{field}__startswith": stem})
        .order_by(f"-{field}")
        .values_list(field, flat=True)
        .first()
    )
    seq = int(last.rsplit("-", 1)[1]) + 1 if last else 1
    return f"{stem}{seq:04d}"
