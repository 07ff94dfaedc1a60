# -*- coding: utf-8 -*-
"""
Map service-layer exceptions onto HTTP responses.

Services raise django.core.exceptions.ValidationError / PermissionDenied /
ObjectDoesNotExist or Conflict; views let them bubble up to here.
"""
import logging

from django.core.exceptions import ObjectDoesNotExist, PermissionDenied, ValidationError as DjangoValidationError
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler

from kopkar.utils.permissions import FORBIDDEN_MESSAGE

logger = logging.getLogger(__name__)


class Conflict(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Data sudah ada."
    default_code = "conflict"


def validation_message(exc: DjangoValidationError):
    if hasattr(exc, "error_dict"):
        return exc.message_dict
    messages = list(exc.messages)
    return messages[0] if len(messages) == 1 else messages


def error_reason(exc: Exception) -> str:
    """Flatten any service error into one line (bulk results, logs)."""
    if isinstance(exc, DjangoValidationError):
        return "; ".join(exc.messages)
    if isinstance(exc, APIException):
        return str(exc.detail)
    return str(exc) or exc.__class__.__name__


def api_exception_handler(exc, context):
    if isinstance(exc, DjangoValidationError):
        detail = validation_message(exc)
        body = detail if isinstance(detail, dict) else {"detail": detail}
        return Response(body, status=status.HTTP_400_BAD_REQUEST)
    if isinstance(exc, ObjectDoesNotExist):
        return Response({"detail": str(exc) or "Data tidak ditemukan."}, status=status.HTTP_404_NOT_FOUND)
    if isinstance(exc, (PermissionDenied, PermissionError)):
        return Response({"detail": str(exc) or FORBIDDEN_MESSAGE}, status=status.HTTP_403_FORBIDDEN)

    response = exception_handler(exc, context)
    if response is None:
        view = context.get("view")
        logger.exception("[api] unhandled error in %s", view.__class__.__name__ if view else "-")
    return response
