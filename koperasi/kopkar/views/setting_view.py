# views/setting_view.py
"""
Pengaturan koperasi (key/value) + cấu hình luồng duyệt cho từng loại đối tượng.
"""
from rest_framework import serializers
from rest_framework.response import Response

from kopkar.serializers.admin_serializer import (
    ApprovalFlowWriteSerializer, SettingBulkSerializer, SettingSerializer, SettingUpdateSerializer,
)
from kopkar.services import (
    approval_service, deposit_change_service, deposit_service, deposit_withdrawal_service, loan_service,
    member_application_service, repayment_service, savings_withdrawal_service, settings_service,
)

from .utils import (
    AdminAPIView, extend_schema, extend_schema_view, inline_serializer, not_found, q_str, std_errors,
)

WORKFLOWS = {
    flow.object_type: flow
    for flow in (
        loan_service.LOAN_FLOW,
        deposit_service.DEPOSIT_FLOW,
        deposit_withdrawal_service.DEPOSIT_WITHDRAWAL_FLOW,
        deposit_change_service.DEPOSIT_CHANGE_FLOW,
        savings_withdrawal_service.WITHDRAWAL_FLOW,
        member_application_service.MEMBER_FLOW,
        repayment_service.REPAYMENT_FLOW,
    )
}

SettingValueSerializer = inline_serializer(
    name="SettingValue",
    fields={
        "key": serializers.CharField(),
        "value": serializers.CharField(),
        "category": serializers.CharField(),
        "label": serializers.CharField(),
        "description": serializers.CharField(),
    },
)


class ApprovalFlowOverviewSerializer(serializers.Serializer):
    object_type = serializers.CharField()
    label = serializers.CharField()
    steps = serializers.ListField(child=serializers.CharField())
    roles = serializers.ListField(child=serializers.CharField())
    is_default = serializers.BooleanField()


@extend_schema_view(
    get=extend_schema(
        tags=["Settings"],
        summary="Semua pengaturan",
        description="Tanpa `category` → dikelompokkan per kategori (termasuk nilai default).",
        parameters=[q_str("category", "GENERAL | MEMBERSHIP | LOAN | DEPOSIT | SAVINGS")],
        responses={200: SettingSerializer(many=True), **std_errors()},
    ),
    put=extend_schema(
        tags=["Settings"],
        summary="Ubah banyak pengaturan sekaligus",
        request=SettingBulkSerializer,
        responses={200: SettingSerializer(many=True), **std_errors()},
    ),
)
class SettingListView(AdminAPIView):
    def get(self, request):
        category = (request.query_params.get("category") or "").strip().upper()
        if category:
            return Response(SettingSerializer(settings_service.list_settings(category), many=True).data)
        return Response(settings_service.grouped())

    def put(self, request):
        ser = SettingBulkSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        rows = settings_service.bulk_update(ser.validated_data["settings"], actor=request.user)
        return Response(SettingSerializer(rows, many=True).data)


@extend_schema_view(
    get=extend_schema(
        tags=["Settings"],
        summary="Nilai satu pengaturan",
        responses={200: SettingValueSerializer, **std_errors()},
    ),
    put=extend_schema(
        tags=["Settings"],
        summary="Ubah satu pengaturan",
        request=SettingUpdateSerializer,
        responses={200: SettingSerializer, **std_errors()},
    ),
)
class SettingDetailView(AdminAPIView):
    # member screens read fees and rates
    read_open = True

    def get(self, request, key: str):
        return Response(settings_service.get_setting(key))

    def put(self, request, key: str):
        ser = SettingUpdateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        obj = settings_service.update_setting(key, ser.validated_data["value"], actor=request.user)
        return Response(SettingSerializer(obj).data)


class ApprovalFlowListView(AdminAPIView):
    @extend_schema(
        tags=["Settings"],
        summary="Alur persetujuan setiap jenis pengajuan",
        responses={200: ApprovalFlowOverviewSerializer(many=True), **std_errors()},
    )
    def get(self, request):
        return Response([approval_service.describe_flow(flow) for flow in WORKFLOWS.values()])


class ApprovalFlowDetailView(AdminAPIView):
    @extend_schema(
        tags=["Settings"],
        summary="Alur persetujuan satu jenis pengajuan",
        responses={200: ApprovalFlowOverviewSerializer, **std_errors()},
    )
    def get(self, request, object_type: str):
        flow = WORKFLOWS.get(object_type)
        if flow is None:
            return not_found("Jenis pengajuan")
        return Response(approval_service.describe_flow(flow))

    @extend_schema(
        tags=["Settings"],
        summary="Atur urutan role approver",
        description="Hanya berlaku untuk pengajuan yang disubmit setelah perubahan; pengajuan yang sedang berjalan tetap memakai alur lama.",
        request=ApprovalFlowWriteSerializer,
        responses={200: ApprovalFlowOverviewSerializer, **std_errors()},
    )
    def put(self, request, object_type: str):
        flow = WORKFLOWS.get(object_type)
        if flow is None:
            return not_found("Jenis pengajuan")
        ser = ApprovalFlowWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        approval_service.configure_flow(object_type, ser.validated_data["roles"])
        return Response(approval_service.describe_flow(flow))
