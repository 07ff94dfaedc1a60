# -*- coding: utf-8 -*-
"""
EmailConfig: nhiều cấu hình SMTP, tối đa một cấu hình active.
"""
from __future__ import annotations
from typing import Any, Dict

from django.core.exceptions import ValidationError
from django.db import transaction

from kopkar.models import EmailConfig
from kopkar.repositories import email_repository as repo
from kopkar.repositories.base import save_fields
from kopkar.utils.notify import send_email_notification

EDITABLE = {"name", "host", "port", "username", "password", "use_tls", "use_ssl", "from_email", "from_name", "is_active"}


def _check(data: Dict[str, Any]) -> None:
    if data.get("use_tls") and data.get("use_ssl"):
        raise ValidationError({"use_ssl": ["TLS dan SSL tidak dapat aktif bersamaan"]})

def create_config(data: Dict[str, Any]) -> EmailConfig:
    _check(data)
    with transaction.atomic():
        config = repo.create_config(data)
        if config.is_active:
            repo.deactivate_others(config.id)
    return config

def update_config(config: EmailConfig, data: Dict[str, Any]) -> EmailConfig:
    _check({"use_tls": data.get("use_tls", config.use_tls), "use_ssl": data.get("use_ssl", config.use_ssl)})
    if not data.get("password"):
        data = {k: v for k, v in data.items() if k != "password"}
    with transaction.atomic():
        save_fields(config, data, allowed=EDITABLE)
        if config.is_active:
            repo.deactivate_others(config.id)
    return config

def activate(config: EmailConfig) -> EmailConfig:
    with transaction.atomic():
        repo.deactivate_others(config.id)
        return save_fields(config, {"is_active": True})

def delete_config(config: EmailConfig) -> None:
    if config.is_active:
        raise ValidationError("Konfigurasi email yang aktif tidak dapat dihapus")
    repo.delete_config(config)

def send_test(config: EmailConfig, to_email: str) -> bool:
    """Send through this config (active or not); the attempt lands in EmailLog."""
    return send_email_notification(
        subject="Tes konfigurasi email",
        text_body=f"Email ini dikirim untuk menguji konfigurasi SMTP \"{config.name}\".",
        to_emails=[to_email],
        object_type="email_config",
        object_id=str(config.id),
        config=config,
    )
