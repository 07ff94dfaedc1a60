# -*- coding: utf-8 -*-
"""Serializers cho dữ liệu master: department, golongan, level, employee, user, setting, email."""
from __future__ import annotations
from rest_framework import serializers

from kopkar.models import (
    ApprovalFlow, CooperativeSetting, Department, EmailConfig, EmailLog,
    Employee, Golongan, Level, LoanLimit, User,
)
from kopkar.utils.roles import ALL_ROLES, APPROVER_ROLES


# ===== Department =====
class DepartmentSerializer(serializers.ModelSerializer):
    employee_count = serializers.IntegerField(source="employees.count", read_only=True)

    class Meta:
        model = Department
        fields = ["id", "name", "is_active", "employee_count", "created_at", "updated_at"]
        read_only_fields = ["id", "employee_count", "created_at", "updated_at"]
        extra_kwargs = {"name": {"validators": []}}


# ===== Golongan / plafond =====
class LoanLimitSerializer(serializers.ModelSerializer):
    class Meta:
        model = LoanLimit
        fields = ["id", "min_years_of_service", "max_years_of_service", "max_loan_amount"]
        read_only_fields = ["id"]


class GolonganSerializer(serializers.ModelSerializer):
    loan_limits = LoanLimitSerializer(many=True, read_only=True)

    class Meta:
        model = Golongan
        fields = ["id", "name", "description", "loan_limits", "created_at", "updated_at"]
        read_only_fields = ["id", "loan_limits", "created_at", "updated_at"]
        extra_kwargs = {"name": {"validators": []}}


class LoanLimitWriteSerializer(serializers.Serializer):
    min_years_of_service = serializers.IntegerField(min_value=0)
    max_years_of_service = serializers.IntegerField(min_value=0, required=False, allow_null=True, default=None)
    max_loan_amount = serializers.DecimalField(max_digits=15, decimal_places=2, min_value=0)


class LoanLimitBulkSerializer(serializers.Serializer):
    limits = LoanLimitWriteSerializer(many=True)


# ===== Level =====
class LevelSerializer(serializers.ModelSerializer):
    user_count = serializers.IntegerField(read_only=True, default=0)

    class Meta:
        model = Level
        fields = ["id", "level_name", "description", "user_count", "created_at"]
        read_only_fields = ["id", "user_count", "created_at"]
        extra_kwargs = {"level_name": {"validators": []}}


class LevelAssignSerializer(serializers.Serializer):
    user_id = serializers.IntegerField(min_value=1)


# ===== Employee =====
class EmployeeReadSerializer(serializers.ModelSerializer):
    department = serializers.CharField(source="department.name", read_only=True, default=None)
    golongan = serializers.CharField(source="golongan.name", read_only=True, default=None)
    employee_type_display = serializers.CharField(source="get_employee_type_display", read_only=True)

    class Meta:
        model = Employee
        fields = [
            "id", "employee_number", "full_name", "department", "department_id", "golongan", "golongan_id",
            "employee_type", "employee_type_display", "permanent_employee_date",
            "bank_account_number", "bank_account_name", "is_active", "created_at", "updated_at",
        ]


class EmployeeWriteSerializer(serializers.Serializer):
    employee_number = serializers.CharField(max_length=32)
    full_name = serializers.CharField(max_length=150)
    department = serializers.PrimaryKeyRelatedField(queryset=Department.objects.all(), required=False, allow_null=True)
    golongan = serializers.PrimaryKeyRelatedField(queryset=Golongan.objects.all(), required=False, allow_null=True)
    employee_type = serializers.ChoiceField(choices=Employee.EmployeeType.choices, default=Employee.EmployeeType.TETAP)
    permanent_employee_date = serializers.DateField(required=False, allow_null=True)
    bank_account_number = serializers.CharField(max_length=32, required=False, allow_blank=True)
    bank_account_name = serializers.CharField(max_length=150, required=False, allow_blank=True)
    is_active = serializers.BooleanField(default=True)


class EmployeeImportSerializer(serializers.Serializer):
    file = serializers.FileField()


# ===== User =====
class UserReadSerializer(serializers.ModelSerializer):
    roles = serializers.SerializerMethodField()
    employee = EmployeeReadSerializer(read_only=True)
    email_verified = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = [
            "id", "name", "email", "nik", "npwp", "date_of_birth", "birth_place", "bank_account_number",
            "employee", "roles", "email_verified", "email_verified_at",
            "member_verified", "member_verified_at", "is_active", "last_login_at", "created_at", "updated_at",
        ]

    def get_roles(self, obj):
        return sorted(obj.role_names)

    def get_email_verified(self, obj) -> bool:
        return obj.email_verified_at is not None


class UserWriteSerializer(serializers.Serializer):
    name = serializers.CharField(min_length=3, max_length=150)
    email = serializers.EmailField()
    password = serializers.CharField(min_length=8, write_only=True)
    nik = serializers.CharField(max_length=32, required=False, allow_null=True)
    npwp = serializers.CharField(max_length=32, required=False, allow_null=True)
    date_of_birth = serializers.DateField(required=False, allow_null=True)
    birth_place = serializers.CharField(max_length=100, required=False, allow_blank=True)
    bank_account_number = serializers.CharField(max_length=32, required=False, allow_blank=True)
    employee = serializers.PrimaryKeyRelatedField(queryset=Employee.objects.all(), required=False, allow_null=True)
    roles = serializers.ListField(child=serializers.ChoiceField(choices=ALL_ROLES), required=False)


class UserUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(min_length=3, max_length=150, required=False)
    email = serializers.EmailField(required=False)
    nik = serializers.CharField(max_length=32, required=False, allow_null=True)
    npwp = serializers.CharField(max_length=32, required=False, allow_null=True)
    date_of_birth = serializers.DateField(required=False, allow_null=True)
    birth_place = serializers.CharField(max_length=100, required=False, allow_blank=True)
    bank_account_number = serializers.CharField(max_length=32, required=False, allow_blank=True)
    employee = serializers.PrimaryKeyRelatedField(queryset=Employee.objects.all(), required=False, allow_null=True)
    is_active = serializers.BooleanField(required=False)


class RoleAssignSerializer(serializers.Serializer):
    roles = serializers.ListField(child=serializers.CharField(max_length=64), allow_empty=False)


# ===== Settings =====
class SettingSerializer(serializers.ModelSerializer):
    class Meta:
        model = CooperativeSetting
        fields = ["key", "value", "category", "label", "description", "updated_at"]


class SettingUpdateSerializer(serializers.Serializer):
    value = serializers.CharField(max_length=255)


class SettingBulkItemSerializer(serializers.Serializer):
    key = serializers.CharField(max_length=64)
    value = serializers.CharField(max_length=255)


class SettingBulkSerializer(serializers.Serializer):
    settings = SettingBulkItemSerializer(many=True)


class ApprovalFlowSerializer(serializers.ModelSerializer):
    class Meta:
        model = ApprovalFlow
        fields = ["id", "object_type", "role", "step"]


class ApprovalFlowWriteSerializer(serializers.Serializer):
    roles = serializers.ListField(child=serializers.ChoiceField(choices=APPROVER_ROLES), allow_empty=False)


# ===== Email =====
class EmailConfigSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, required=False, allow_blank=True)

    class Meta:
        model = EmailConfig
        fields = [
            "id", "name", "host", "port", "username", "password", "use_tls", "use_ssl",
            "from_email", "from_name", "is_active", "created_at", "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]


class EmailTestSerializer(serializers.Serializer):
    to_email = serializers.EmailField()


class EmailLogSerializer(serializers.ModelSerializer):
    email_config = serializers.CharField(source="email_config.name", read_only=True, default=None)

    class Meta:
        model = EmailLog
        fields = [
            "id", "object_type", "object_id", "to_user", "to_email", "subject", "payload",
            "delivered", "delivered_at", "attempt_count", "last_error", "email_config", "created_at",
        ]
