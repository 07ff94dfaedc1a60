from django.db import models
from .mixins import TimeStampedModel
from .account import User
from .approval import ApprovalStep


class DepositAmountOption(TimeStampedModel):
    code = models.CharField(max_length=32, unique=True)
    label = models.CharField(max_length=100)
    amount = models.DecimalField(max_digits=15, decimal_places=2)
    is_active = models.BooleanField(default=True)
    sort_order = models.PositiveSmallIntegerField(default=0)

    class Meta:
        ordering = ["sort_order", "amount"]
        db_table = "DepositAmountOption"

    def __str__(self):
        return self.label


class DepositTenorOption(TimeStampedModel):
    code = models.CharField(max_length=32, unique=True)
    label = models.CharField(max_length=100)
    months = models.PositiveSmallIntegerField()
    is_active = models.BooleanField(default=True)
    sort_order = models.PositiveSmallIntegerField(default=0)

    class Meta:
        ordering = ["sort_order", "months"]
        db_table = "DepositTenorOption"

    def __str__(self):
        return self.label


class DepositApplication(TimeStampedModel):
    class Status(models.TextChoices):
        DRAFT = "DRAFT", "Draft"
        SUBMITTED = "SUBMITTED", "Diajukan"
        UNDER_REVIEW_DSP = "UNDER_REVIEW_DSP", "Review Divisi Simpan Pinjam"
        UNDER_REVIEW_KETUA = "UNDER_REVIEW_KETUA", "Review Ketua"
        UNDER_REVIEW_PENGAWAS = "UNDER_REVIEW_PENGAWAS", "Review Pengawas"
        APPROVED = "APPROVED", "Disetujui"
        ACTIVE = "ACTIVE", "Aktif"
        COMPLETED = "COMPLETED", "Selesai"
        REJECTED = "REJECTED", "Ditolak"
        CANCELLED = "CANCELLED", "Dibatalkan"

    deposit_number = models.CharField(max_length=32, unique=True)
    user = models.ForeignKey(User, on_delete=models.PROTECT, related_name="deposits")
    amount_code = models.CharField(max_length=32)
    tenor_code = models.CharField(max_length=32)
    amount_value = models.DecimalField(max_digits=15, decimal_places=2, help_text="Setoran per bulan")
    tenor_months = models.PositiveSmallIntegerField()
    interest_rate = models.DecimalField(max_digits=5, decimal_places=2)
    projected_interest = models.DecimalField(max_digits=15, decimal_places=2, default=0)
    total_return = models.DecimalField(max_digits=15, decimal_places=2, default=0)
    agreed_to_terms = models.BooleanField(default=False)

    status = models.CharField(max_length=32, choices=Status.choices, default=Status.DRAFT, db_index=True)
    current_step = models.CharField(max_length=32, choices=ApprovalStep.choices, null=True, blank=True)

    installment_count = models.PositiveSmallIntegerField(default=0)
    collected_amount = models.DecimalField(max_digits=15, decimal_places=2, default=0)
    last_installment_date = models.DateField(null=True, blank=True)
    activated_at = models.DateField(null=True, blank=True)
    maturity_date = models.DateField(null=True, blank=True)

    submitted_at = models.DateTimeField(null=True, blank=True)
    approved_at = models.DateTimeField(null=True, blank=True)
    rejected_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    rejection_reason = models.TextField(blank=True, default="")

    class Meta:
        ordering = ["-created_at"]
        db_table = "DepositApplication"
        indexes = [models.Index(fields=["user", "status"])]

    def __str__(self):
        return f"{self.deposit_number} ({self.status})"


class DepositWithdrawal(TimeStampedModel):
    """Penarikan dana deposito yang sudah terkumpul."""
    class Status(models.TextChoices):
        SUBMITTED = "SUBMITTED", "Diajukan"
        UNDER_REVIEW_DSP = "UNDER_REVIEW_DSP", "Review Divisi Simpan Pinjam"
        UNDER_REVIEW_KETUA = "UNDER_REVIEW_KETUA", "Review Ketua"
        UNDER_REVIEW_PENGAWAS = "UNDER_REVIEW_PENGAWAS", "Review Pengawas"
        APPROVED_WAITING_DISBURSEMENT = "APPROVED_WAITING_DISBURSEMENT", "Disetujui, menunggu pencairan"
        DISBURSEMENT_IN_PROGRESS = "DISBURSEMENT_IN_PROGRESS", "Pencairan diproses"
        COMPLETED = "COMPLETED", "Selesai"
        REJECTED = "REJECTED", "Ditolak"
        CANCELLED = "CANCELLED", "Dibatalkan"

    withdrawal_number = models.CharField(max_length=32, unique=True)
    user = models.ForeignKey(User, on_delete=models.PROTECT, related_name="deposit_withdrawals")
    deposit = models.ForeignKey(DepositApplication, on_delete=models.PROTECT, related_name="withdrawals")
    withdrawal_amount = models.DecimalField(max_digits=15, decimal_places=2)
    is_early_withdrawal = models.BooleanField(default=False)
    penalty_rate = models.DecimalField(max_digits=5, decimal_places=2, default=0)
    penalty_amount = models.DecimalField(max_digits=15, decimal_places=2, default=0)
    net_amount = models.DecimalField(max_digits=15, decimal_places=2)
    bank_account_number = models.CharField(max_length=32, blank=True, default="")
    reason = models.TextField(blank=True, default="")

    status = models.CharField(max_length=32, choices=Status.choices, default=Status.SUBMITTED, db_index=True)
    current_step = models.CharField(max_length=32, choices=ApprovalStep.choices, null=True, blank=True)

    submitted_at = models.DateTimeField(null=True, blank=True)
    approved_at = models.DateTimeField(null=True, blank=True)
    rejected_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    disbursed_at = models.DateTimeField(null=True, blank=True)
    disbursed_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name="+")
    authorized_at = models.DateTimeField(null=True, blank=True)
    authorized_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name="+")
    completed_at = models.DateTimeField(null=True, blank=True)
    rejection_reason = models.TextField(blank=True, default="")

    class Meta:
        ordering = ["-created_at"]
        db_table = "DepositWithdrawal"
        indexes = [models.Index(fields=["deposit", "status"])]

    def __str__(self):
        return f"{self.withdrawal_number} ({self.status})"


class DepositChangeRequest(TimeStampedModel):
    """Perubahan setoran bulanan dan/atau tenor deposito berjalan."""
    class Status(models.TextChoices):
        DRAFT = "DRAFT", "Draft"
        SUBMITTED = "SUBMITTED", "Diajukan"
        UNDER_REVIEW_DSP = "UNDER_REVIEW_DSP", "Review Divisi Simpan Pinjam"
        UNDER_REVIEW_KETUA = "UNDER_REVIEW_KETUA", "Review Ketua"
        UNDER_REVIEW_PENGAWAS = "UNDER_REVIEW_PENGAWAS", "Review Pengawas"
        APPROVED = "APPROVED", "Disetujui"
        REJECTED = "REJECTED", "Ditolak"
        CANCELLED = "CANCELLED", "Dibatalkan"

    class ChangeType(models.TextChoices):
        AMOUNT_CHANGE = "AMOUNT_CHANGE", "Perubahan setoran"
        TENOR_CHANGE = "TENOR_CHANGE", "Perubahan tenor"
        BOTH = "BOTH", "Setoran dan tenor"

    change_number = models.CharField(max_length=32, unique=True)
    user = models.ForeignKey(User, on_delete=models.PROTECT, related_name="deposit_changes")
    deposit = models.ForeignKey(DepositApplication, on_delete=models.PROTECT, related_name="change_requests")
    change_type = models.CharField(max_length=16, choices=ChangeType.choices)

    current_amount_code = models.CharField(max_length=32)
    current_amount_value = models.DecimalField(max_digits=15, decimal_places=2)
    current_tenor_code = models.CharField(max_length=32)
    current_tenor_months = models.PositiveSmallIntegerField()
    new_amount_code = models.CharField(max_length=32)
    new_amount_value = models.DecimalField(max_digits=15, decimal_places=2)
    new_tenor_code = models.CharField(max_length=32)
    new_tenor_months = models.PositiveSmallIntegerField()
    admin_fee = models.DecimalField(max_digits=15, decimal_places=2, default=0)
    agreed_to_terms = models.BooleanField(default=False)
    agreed_to_admin_fee = models.BooleanField(default=False)

    status = models.CharField(max_length=32, choices=Status.choices, default=Status.DRAFT, db_index=True)
    current_step = models.CharField(max_length=32, choices=ApprovalStep.choices, null=True, blank=True)

    submitted_at = models.DateTimeField(null=True, blank=True)
    approved_at = models.DateTimeField(null=True, blank=True)
    rejected_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    rejection_reason = models.TextField(blank=True, default="")

    class Meta:
        ordering = ["-created_at"]
        db_table = "DepositChangeRequest"
        indexes = [models.Index(fields=["deposit", "status"])]

    def __str__(self):
        return f"{self.change_number} ({self.status})"
