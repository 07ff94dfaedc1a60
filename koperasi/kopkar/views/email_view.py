# views/email_view.py
from rest_framework import status
from rest_framework.response import Response

from kopkar.serializers.admin_serializer import EmailConfigSerializer, EmailLogSerializer, EmailTestSerializer
from kopkar.services import email_config_service
from kopkar.selectors.admin_selector import filter_email_logs, get_email_config, get_email_log, list_email_configs

from .utils import (
    AdminAPIView, OpenApiResponse, PAGE_PARAMS, extend_schema, extend_schema_view, not_found,
    paginate, path_int, q_str, std_errors,
)


# /api/email-configs/
@extend_schema_view(
    get=extend_schema(tags=["Email"], summary="Daftar konfigurasi SMTP", responses=OpenApiResponse(EmailConfigSerializer(many=True))),
    post=extend_schema(
        tags=["Email"],
        summary="Tambah konfigurasi SMTP",
        description="Jika `is_active=true`, konfigurasi lain dinonaktifkan.",
        request=EmailConfigSerializer,
        responses={201: OpenApiResponse(EmailConfigSerializer), **std_errors()},
    ),
)
class EmailConfigListCreateView(AdminAPIView):
    def get(self, request):
        return Response(EmailConfigSerializer(list_email_configs(), many=True).data)

    def post(self, request):
        ser = EmailConfigSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        config = email_config_service.create_config(ser.validated_data)
        return Response(EmailConfigSerializer(config).data, status=status.HTTP_201_CREATED)


# /api/email-configs/<pk>/
@extend_schema_view(
    get=extend_schema(
        tags=["Email"],
        summary="Detail konfigurasi SMTP",
        parameters=[path_int("pk", "ID konfigurasi")],
        responses={200: OpenApiResponse(EmailConfigSerializer), **std_errors()},
    ),
    put=extend_schema(
        tags=["Email"],
        summary="Ubah konfigurasi SMTP (password kosong = tidak diubah)",
        parameters=[path_int("pk", "ID konfigurasi")],
        request=EmailConfigSerializer,
        responses={200: OpenApiResponse(EmailConfigSerializer), **std_errors()},
    ),
    delete=extend_schema(
        tags=["Email"],
        summary="Hapus konfigurasi SMTP (konfigurasi aktif tidak dapat dihapus)",
        parameters=[path_int("pk", "ID konfigurasi")],
        responses={204: OpenApiResponse(None, description="Dihapus"), **std_errors()},
    ),
)
class EmailConfigDetailView(AdminAPIView):
    def get(self, request, pk: int):
        config = get_email_config(pk)
        if not config:
            return not_found("Konfigurasi email")
        return Response(EmailConfigSerializer(config).data)

    def put(self, request, pk: int):
        config = get_email_config(pk)
        if not config:
            return not_found("Konfigurasi email")
        ser = EmailConfigSerializer(config, data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        return Response(EmailConfigSerializer(email_config_service.update_config(config, ser.validated_data)).data)

    def delete(self, request, pk: int):
        config = get_email_config(pk)
        if not config:
            return not_found("Konfigurasi email")
        email_config_service.delete_config(config)
        return Response(status=status.HTTP_204_NO_CONTENT)


@extend_schema(
    tags=["Email"],
    summary="Aktifkan konfigurasi SMTP (konfigurasi lain dinonaktifkan)",
    parameters=[path_int("pk", "ID konfigurasi")],
    request=None,
    responses={200: EmailConfigSerializer, **std_errors()},
)
class EmailConfigActivateView(AdminAPIView):
    def post(self, request, pk: int):
        config = get_email_config(pk)
        if not config:
            return not_found("Konfigurasi email")
        return Response(EmailConfigSerializer(email_config_service.activate(config)).data)


@extend_schema(
    tags=["Email"],
    summary="Kirim email uji melalui konfigurasi ini",
    parameters=[path_int("pk", "ID konfigurasi")],
    request=EmailTestSerializer,
    responses={200: None, **std_errors()},
)
class EmailConfigTestView(AdminAPIView):
    def post(self, request, pk: int):
        config = get_email_config(pk)
        if not config:
            return not_found("Konfigurasi email")
        ser = EmailTestSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        if not email_config_service.send_test(config, ser.validated_data["to_email"]):
            return Response({"detail": "Email test gagal dikirim. Periksa log email."}, status=status.HTTP_400_BAD_REQUEST)
        return Response({"message": "Email test berhasil dikirim"})


# /api/email-logs/
@extend_schema(
    tags=["Email"],
    summary="Daftar log email",
    parameters=PAGE_PARAMS + [
        q_str("status", "SENT | FAILED"),
        q_str("objectType", "loan, deposit, ..."),
        q_str("search", "Email / subject"),
    ],
    responses={200: EmailLogSerializer(many=True), **std_errors()},
)
class EmailLogListView(AdminAPIView):
    def get(self, request):
        return paginate(self, filter_email_logs(request.query_params), EmailLogSerializer, ("created_at", "delivered_at"))


@extend_schema(
    tags=["Email"],
    summary="Detail log email",
    parameters=[path_int("pk", "ID log")],
    responses={200: EmailLogSerializer, **std_errors()},
)
class EmailLogDetailView(AdminAPIView):
    def get(self, request, pk: int):
        log = get_email_log(pk)
        if not log:
            return not_found("Log email")
        return Response(EmailLogSerializer(log).data)
