# -*- coding: utf-8 -*-
from __future__ import annotations
from typing import Any, Dict, Optional

from django.db import transaction
from django.db.models import QuerySet, Q

from kopkar.models import EmailConfig, EmailLog


# ============== Configs ==============
def list_configs() -> QuerySet[EmailConfig]:
    return EmailConfig.objects.all()

def get_config(config_id: int) -> Optional[EmailConfig]:
    return EmailConfig.objects.filter(id=config_id).first()

@transaction.atomic
def create_config(data: Dict[str, Any]) -> EmailConfig:
    return EmailConfig.objects.create(**data)

@transaction.atomic
def deactivate_others(keep_id: int) -> int:
    return EmailConfig.objects.filter(is_active=True).exclude(id=keep_id).update(is_active=False)

@transaction.atomic
def delete_config(obj: EmailConfig) -> None:
    obj.delete()


# ============== Logs ==============
def filter_logs(filters: Dict[str, Any]) -> QuerySet[EmailLog]:
    qs = EmailLog.objects.all()
    if (delivered := filters.get("delivered")) is not None:
        qs = qs.filter(delivered=delivered)
    if (otype := filters.get("object_type")):
        qs = qs.filter(object_type=otype)
    if (qtext := (filters.get("q") or "").strip()):
        qs = qs.filter(Q(to_email__icontains=qtext) | Q(subject__icontains=qtext))
    return qs

def get_log(log_id: int) -> Optional[EmailLog]:
    return EmailLog.objects.filter(id=log_id).first()
