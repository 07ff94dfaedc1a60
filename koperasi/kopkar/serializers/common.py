# -*- coding: utf-8 -*-
"""Serializers dùng chung cho mọi đối tượng có approval workflow."""
from __future__ import annotations
from rest_framework import serializers

from kopkar.models import Approval, ApprovalDecision, AuditLog, User


class UserBriefSerializer(serializers.ModelSerializer):
    employee_number = serializers.CharField(source="employee.employee_number", read_only=True, default=None)
    department = serializers.CharField(source="employee.department.name", read_only=True, default=None)

    class Meta:
        model = User
        fields = ["id", "name", "email", "employee_number", "department"]


class ApprovalSerializer(serializers.ModelSerializer):
    step_display = serializers.CharField(source="get_step_display", read_only=True)
    decided_by = UserBriefSerializer(read_only=True)

    class Meta:
        model = Approval
        fields = ["id", "sequence", "step", "step_display", "decision", "decided_by", "decided_at", "notes", "revised_data"]


class AuditLogSerializer(serializers.ModelSerializer):
    class Meta:
        model = AuditLog
        fields = ["id", "actor", "action", "before", "after", "notes", "created_at"]


# ===== Approver decisions =====
DECISION_CHOICES = [ApprovalDecision.APPROVED, ApprovalDecision.REJECTED]


class DecisionSerializer(serializers.Serializer):
    decision = serializers.ChoiceField(choices=DECISION_CHOICES)
    notes = serializers.CharField(required=False, allow_blank=True, default="")

    def validate(self, attrs):
        if attrs["decision"] == ApprovalDecision.REJECTED and not attrs.get("notes", "").strip():
            raise serializers.ValidationError({"notes": "Alasan penolakan wajib diisi"})
        return attrs


class BulkDecisionSerializer(DecisionSerializer):
    ids = serializers.ListField(child=serializers.IntegerField(min_value=1), allow_empty=False, max_length=100)


class BulkIdsSerializer(serializers.Serializer):
    ids = serializers.ListField(child=serializers.IntegerField(min_value=1), allow_empty=False, max_length=100)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class CancelSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="")


class NotesSerializer(serializers.Serializer):
    notes = serializers.CharField(required=False, allow_blank=True, default="")


# ===== Response shapes (schema only) =====
class BulkItemSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    new_status = serializers.CharField(required=False)
    number = serializers.CharField(required=False)
    reason = serializers.CharField(required=False)


class BulkResultSerializer(serializers.Serializer):
    message = serializers.CharField()
    results = serializers.DictField(child=BulkItemSerializer(many=True))


class WorkflowTrailSerializer(serializers.Serializer):
    """Riwayat persetujuan dan audit; diisi lewat context oleh view detail."""
    approvals = serializers.SerializerMethodField()
    history = serializers.SerializerMethodField()

    def get_approvals(self, obj):
        return ApprovalSerializer(self.context.get("approvals", []), many=True).data

    def get_history(self, obj):
        return AuditLogSerializer(self.context.get("history", []), many=True).data
