# -*- coding: utf-8 -*-
from __future__ import annotations
from rest_framework import serializers

from kopkar.models import Department, MemberApplication
from .common import UserBriefSerializer, WorkflowTrailSerializer


class MemberApplicationReadSerializer(serializers.ModelSerializer):
    user = UserBriefSerializer(read_only=True)
    department = serializers.CharField(source="department.name", read_only=True, default=None)
    status_display = serializers.CharField(source="get_status_display", read_only=True)
    installment_plan_display = serializers.CharField(source="get_installment_plan_display", read_only=True)

    class Meta:
        model = MemberApplication
        fields = [
            "id", "user", "nik", "npwp", "date_of_birth", "birth_place", "department",
            "installment_plan", "installment_plan_display",
            "entrance_fee", "paid_amount", "remaining_amount", "is_paid_off",
            "status", "status_display", "current_step",
            "submitted_at", "approved_at", "rejected_at", "rejection_reason", "created_at", "updated_at",
        ]


class MemberApplicationDetailSerializer(MemberApplicationReadSerializer, WorkflowTrailSerializer):
    class Meta(MemberApplicationReadSerializer.Meta):
        fields = MemberApplicationReadSerializer.Meta.fields + ["approvals", "history"]


class MemberApplicationSubmitSerializer(serializers.Serializer):
    nik = serializers.RegexField(r"^\d{16}$", error_messages={"invalid": "NIK harus 16 digit angka"})
    npwp = serializers.RegexField(r"^[\d.\-]{15,20}$", required=False, allow_blank=True, default="",
                                  error_messages={"invalid": "Format NPWP tidak valid"})
    date_of_birth = serializers.DateField()
    birth_place = serializers.CharField(max_length=100)
    department = serializers.PrimaryKeyRelatedField(queryset=Department.objects.filter(is_active=True), required=False, allow_null=True)
    installment_plan = serializers.ChoiceField(choices=MemberApplication.InstallmentPlan.choices,
                                               default=MemberApplication.InstallmentPlan.FULL)
