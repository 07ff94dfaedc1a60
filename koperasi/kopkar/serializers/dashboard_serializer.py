# -*- coding: utf-8 -*-
from __future__ import annotations
from rest_framework import serializers

from .savings_serializer import SavingsTransactionSerializer

MONEY = {"max_digits": 17, "decimal_places": 2}


class GreetingSerializer(serializers.Serializer):
    name = serializers.CharField()
    employee_number = serializers.CharField(allow_null=True)


class NextBillSerializer(serializers.Serializer):
    loan_number = serializers.CharField()
    installment_number = serializers.IntegerField()
    due_date = serializers.DateField()
    amount = serializers.DecimalField(**MONEY)
    days_until_due = serializers.IntegerField()


class FinancialSummarySerializer(serializers.Serializer):
    total_savings = serializers.DecimalField(**MONEY)
    active_deposits = serializers.DecimalField(**MONEY)
    remaining_loan = serializers.DecimalField(**MONEY)
    next_bill = NextBillSerializer(allow_null=True)


class ActivitySerializer(serializers.Serializer):
    object_type = serializers.CharField()
    label = serializers.CharField()
    id = serializers.IntegerField()
    number = serializers.CharField()
    owner = serializers.CharField()
    status = serializers.CharField()
    status_display = serializers.CharField()
    current_step = serializers.CharField(allow_null=True)
    updated_at = serializers.DateTimeField()


class ChartPointSerializer(serializers.Serializer):
    month = serializers.CharField()
    income = serializers.DecimalField(**MONEY)
    expense = serializers.DecimalField(**MONEY)


class DashboardSummarySerializer(serializers.Serializer):
    greeting = GreetingSerializer()
    financial_summary = FinancialSummarySerializer()
    activities = ActivitySerializer(many=True)
    chart_data = ChartPointSerializer(many=True)
    recent_transactions = SavingsTransactionSerializer(many=True)
    is_approver = serializers.BooleanField()
    approver_roles = serializers.ListField(child=serializers.CharField())
