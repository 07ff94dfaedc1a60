# -*- coding: utf-8 -*-
from __future__ import annotations
from rest_framework import serializers

from kopkar.models import LoanRepayment
from .common import UserBriefSerializer, WorkflowTrailSerializer


class LoanRepaymentReadSerializer(serializers.ModelSerializer):
    user = UserBriefSerializer(read_only=True)
    loan_number = serializers.CharField(source="loan.loan_number", read_only=True)
    status_display = serializers.CharField(source="get_status_display", read_only=True)

    class Meta:
        model = LoanRepayment
        fields = [
            "id", "repayment_number", "loan", "loan_number", "user", "total_amount",
            "paid_installments", "remaining_installments", "notes",
            "status", "status_display", "current_step",
            "submitted_at", "approved_at", "rejected_at", "cancelled_at", "rejection_reason", "created_at", "updated_at",
        ]


class LoanRepaymentDetailSerializer(LoanRepaymentReadSerializer, WorkflowTrailSerializer):
    class Meta(LoanRepaymentReadSerializer.Meta):
        fields = LoanRepaymentReadSerializer.Meta.fields + ["approvals", "history"]


class LoanRepaymentCreateSerializer(serializers.Serializer):
    loan_id = serializers.IntegerField(min_value=1)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class RepaymentCalculationSerializer(serializers.Serializer):
    loan_id = serializers.IntegerField()
    loan_number = serializers.CharField()
    total_repayment = serializers.DecimalField(max_digits=15, decimal_places=2)
    paid_amount = serializers.DecimalField(max_digits=15, decimal_places=2)
    remaining_amount = serializers.DecimalField(max_digits=15, decimal_places=2)
    paid_installments = serializers.IntegerField()
    remaining_installments = serializers.IntegerField()
    has_pending_repayment = serializers.BooleanField()
