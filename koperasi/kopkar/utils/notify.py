# -*- coding: utf-8 -*-
from __future__ import annotations
import logging
from typing import Iterable, Optional, Dict, Any

from django.conf import settings
from django.core.mail import EmailMultiAlternatives, get_connection
from django.utils import timezone

from kopkar.models import EmailConfig, EmailLog

logger = logging.getLogger(__name__)


# -----------------------------
# Helpers
# -----------------------------
def _mk_subject(subject: str) -> str:
    prefix = getattr(settings, "EMAIL_SUBJECT_PREFIX", "")
    return f"{prefix}{subject}" if prefix else subject


def _create_log(
    *,
    subject: str,
    payload: Optional[Dict[str, Any]] = None,
    object_type: str = "",
    object_id: str = "",
    to_user: Optional[int] = None,
    to_email: str = "",
    delivered: bool,
    last_error: str = "",
    email_config: Optional[EmailConfig] = None,
) -> EmailLog:
    return EmailLog.objects.create(
        subject=subject[:255],
        payload=payload or None,
        object_type=object_type or "",
        object_id=str(object_id or ""),
        to_user=to_user,
        to_email=to_email or "",
        delivered=delivered,
        delivered_at=timezone.now() if delivered else None,
        attempt_count=1,
        last_error=last_error or "",
        email_config=email_config,
    )


def active_config() -> Optional[EmailConfig]:
    return EmailConfig.objects.filter(is_active=True).first()


def _connection_and_sender(config: Optional[EmailConfig]):
    """SMTP settings from the active EmailConfig row, else Django's EMAIL_* settings."""
    if config is None:
        from_email = getattr(settings, "DEFAULT_FROM_EMAIL", None) or getattr(settings, "SERVER_EMAIL", None)
        return get_connection(), from_email
    conn = get_connection(
        backend="django.core.mail.backends.smtp.EmailBackend",
        host=config.host,
        port=config.port,
        username=config.username or None,
        password=config.password or None,
        use_tls=config.use_tls,
        use_ssl=config.use_ssl,
    )
    return conn, config.sender


# -----------------------------
# Email
# -----------------------------
def send_email_notification(
    *,
    subject: str,
    text_body: str,
    to_emails: Iterable[str],
    html_body: Optional[str] = None,
    # logging context
    object_type: str = "",
    object_id: str = "",
    to_user: Optional[int] = None,
    config: Optional[EmailConfig] = None,
) -> bool:
    """
    Gửi email và ghi log vào EmailLog. Trả về True/False, không raise.
    """
    tos = [e for e in (to_emails or []) if e]
    full_subject = _mk_subject(subject)
    if not tos:
        logger.warning("[notify.email] No recipients; skip.")
        _create_log(
            subject=full_subject,
            payload={"text": text_body, "has_html": bool(html_body)},
            object_type=object_type,
            object_id=object_id,
            to_user=to_user,
            delivered=False,
            last_error="No recipients",
        )
        return False

    if config is None and getattr(settings, "EMAIL_BACKEND", "").endswith("smtp.EmailBackend"):
        config = active_config()
    ok = False
    error_msg = ""
    try:
        conn, from_email = _connection_and_sender(config)
        msg = EmailMultiAlternatives(
            subject=full_subject,
            body=text_body,
            from_email=from_email,
            to=tos,
            connection=conn,
        )
        if html_body:
            msg.attach_alternative(html_body, "text/html")
        msg.send(fail_silently=False)
        ok = True
    except Exception as ex:
        error_msg = str(ex)
        logger.warning("[notify.email] send failed: %s", ex)

    _create_log(
        subject=full_subject,
        payload={"text": text_body, "has_html": bool(html_body), "tos": tos},
        object_type=object_type,
        object_id=object_id,
        to_user=to_user,
        to_email=",".join(tos),
        delivered=ok,
        last_error="" if ok else error_msg,
        email_config=config,
    )
    return ok
