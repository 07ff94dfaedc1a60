import json
import os
import re
import subprocess
import sys
from pathlib import Path

import pytest
from django.core.exceptions import ObjectDoesNotExist, PermissionDenied, ValidationError
from rest_framework.test import APIClient

from kopkar.utils.exceptions import Conflict, api_exception_handler
from kopkar.utils.permissions import FORBIDDEN_MESSAGE

PROJECT_DIR = Path(__file__).resolve().parents[2]
# huruf khas Vietnam; dokumentasi API harus berbahasa Indonesia
VIETNAMESE = re.compile("[đĐưƯơƠăĂạảấầẩẫậắằẳẵặẹẻẽếềểễệỉịọỏốồổỗộớờởỡợụủứừửữựỳỵỷỹ]")


@pytest.mark.parametrize("first_import", ["kopkar.utils.exceptions", "kopkar.utils.permissions", "kopkar.urls"])
def test_modules_import_in_a_fresh_interpreter(first_import):
    # mỗi thứ tự import phải chạy được khi chưa có module nào được nạp
    env = {**os.environ, "DJANGO_SETTINGS_MODULE": "koperasi.settings"}
    code = f"import django; django.setup(); import {first_import}"
    result = subprocess.run([sys.executable, "-c", code], cwd=PROJECT_DIR, env=env, capture_output=True, text=True)
    assert result.returncode == 0, result.stderr


def test_service_errors_map_to_status_codes():
    assert api_exception_handler(ValidationError("Salah"), {}).status_code == 400
    assert api_exception_handler(ValidationError({"nik": ["Wajib"]}), {}).data == {"nik": ["Wajib"]}
    assert api_exception_handler(ObjectDoesNotExist(), {}).status_code == 404
    assert api_exception_handler(Conflict("NIK sudah terdaftar"), {}).status_code == 409

    resp = api_exception_handler(PermissionDenied(), {})
    assert resp.status_code == 403
    assert resp.data == {"detail": FORBIDDEN_MESSAGE}


@pytest.mark.django_db
def test_openapi_schema_builds(ketua):
    client = APIClient()
    client.force_authenticate(user=ketua)
    resp = client.get("/api/schema/", {"format": "json"})
    assert resp.status_code == 200
    paths = resp.json()["paths"]
    assert "/api/settings/approval-flows/" in paths
    assert "/api/deposit-changes/{id}/submit/" in paths
    assert "/api/dashboard/summary/" in paths
    assert not VIETNAMESE.search(json.dumps(resp.json(), ensure_ascii=False))
