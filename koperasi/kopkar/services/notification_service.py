# -*- coding: utf-8 -*-
"""
Email fan-out for workflow events. Never raises: failures are logged and
recorded in EmailLog by utils.notify.
"""
from __future__ import annotations
import logging
from typing import Optional

from django.conf import settings

from kopkar.models import User
from kopkar.repositories import level_repository
from kopkar.utils.notify import send_email_notification

logger = logging.getLogger(__name__)


def _footer() -> str:
    return f"\n\nBuka aplikasi: {getattr(settings, 'FRONTEND_URL', '')}\n"


def notify_role(role: str, *, subject: str, text: str, object_type: str = "", object_id="") -> int:
    """Send one email per active user holding `role`; returns the number delivered."""
    sent = 0
    for user_id, email in level_repository.emails_of_role(role):
        try:
            if send_email_notification(
                subject=subject, text_body=text + _footer(), to_emails=[email],
                object_type=object_type, object_id=str(object_id), to_user=user_id,
            ):
                sent += 1
        except Exception as ex:
            logger.warning("[notify] role=%s user=%s failed: %s", role, user_id, ex)
    return sent


def notify_user(user: Optional[User], *, subject: str, text: str, object_type: str = "", object_id="") -> bool:
    if user is None or not user.email:
        return False
    try:
        return send_email_notification(
            subject=subject, text_body=f"Halo {user.name},\n\n{text}" + _footer(), to_emails=[user.email],
            object_type=object_type, object_id=str(object_id), to_user=user.id,
        )
    except Exception as ex:
        logger.warning("[notify] user=%s failed: %s", user.id, ex)
        return False
