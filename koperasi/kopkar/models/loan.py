from django.db import models
from .mixins import TimeStampedModel
from .account import User
from .approval import ApprovalStep


class LoanApplication(TimeStampedModel):
    class LoanType(models.TextChoices):
        CASH_LOAN = "CASH_LOAN", "Peminjaman uang"
        GOODS_REIMBURSE = "GOODS_REIMBURSE", "Kredit barang (reimburse)"
        GOODS_ONLINE = "GOODS_ONLINE", "Kredit barang (belanja online)"
        GOODS_PHONE = "GOODS_PHONE", "Kredit handphone"

    class Status(models.TextChoices):
        DRAFT = "DRAFT", "Draft"
        SUBMITTED = "SUBMITTED", "Diajukan"
        UNDER_REVIEW_DSP = "UNDER_REVIEW_DSP", "Review Divisi Simpan Pinjam"
        UNDER_REVIEW_KETUA = "UNDER_REVIEW_KETUA", "Review Ketua"
        UNDER_REVIEW_PENGAWAS = "UNDER_REVIEW_PENGAWAS", "Review Pengawas"
        APPROVED_PENDING_DISBURSEMENT = "APPROVED_PENDING_DISBURSEMENT", "Disetujui, menunggu pencairan"
        PENDING_AUTHORIZATION = "PENDING_AUTHORIZATION", "Menunggu otorisasi"
        DISBURSED = "DISBURSED", "Dicairkan"
        COMPLETED = "COMPLETED", "Lunas"
        REJECTED = "REJECTED", "Ditolak"
        CANCELLED = "CANCELLED", "Dibatalkan"

    loan_number = models.CharField(max_length=32, unique=True)
    user = models.ForeignKey(User, on_delete=models.PROTECT, related_name="loans")
    loan_type = models.CharField(max_length=20, choices=LoanType.choices)

    loan_amount = models.DecimalField(max_digits=15, decimal_places=2)
    loan_tenor = models.PositiveSmallIntegerField(help_text="Bulan")
    loan_purpose = models.TextField(blank=True, default="")
    bank_account_number = models.CharField(max_length=32, blank=True, default="")

    interest_rate = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)
    shop_margin_rate = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)
    total_interest = models.DecimalField(max_digits=15, decimal_places=2, null=True, blank=True)
    total_repayment = models.DecimalField(max_digits=15, decimal_places=2, null=True, blank=True)
    monthly_installment = models.DecimalField(max_digits=15, decimal_places=2, null=True, blank=True)

    status = models.CharField(max_length=32, choices=Status.choices, default=Status.DRAFT, db_index=True)
    current_step = models.CharField(max_length=32, choices=ApprovalStep.choices, null=True, blank=True)
    revision_count = models.PositiveSmallIntegerField(default=0)

    submitted_at = models.DateTimeField(null=True, blank=True)
    approved_at = models.DateTimeField(null=True, blank=True)
    rejected_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    disbursed_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    rejection_reason = models.TextField(blank=True, default="")

    class Meta:
        ordering = ["-created_at"]
        db_table = "LoanApplication"
        indexes = [models.Index(fields=["user", "status"])]

    def __str__(self):
        return f"{self.loan_number} ({self.status})"


class CashLoanDetail(TimeStampedModel):
    loan = models.OneToOneField(LoanApplication, on_delete=models.CASCADE, related_name="cash_detail")
    notes = models.TextField(blank=True, default="")

    class Meta:
        db_table = "CashLoanDetail"


class GoodsReimburseDetail(TimeStampedModel):
    loan = models.OneToOneField(LoanApplication, on_delete=models.CASCADE, related_name="reimburse_detail")
    item_name = models.CharField(max_length=255)
    item_price = models.DecimalField(max_digits=15, decimal_places=2)
    purchase_date = models.DateField()
    notes = models.TextField(blank=True, default="")

    class Meta:
        db_table = "GoodsReimburseDetail"


class GoodsOnlineDetail(TimeStampedModel):
    loan = models.OneToOneField(LoanApplication, on_delete=models.CASCADE, related_name="online_detail")
    item_name = models.CharField(max_length=255)
    item_price = models.DecimalField(max_digits=15, decimal_places=2)
    item_url = models.URLField(max_length=500)
    notes = models.TextField(blank=True, default="")

    class Meta:
        db_table = "GoodsOnlineDetail"


class GoodsPhoneDetail(TimeStampedModel):
    loan = models.OneToOneField(LoanApplication, on_delete=models.CASCADE, related_name="phone_detail")
    item_name = models.CharField(max_length=255)
    retail_price = models.DecimalField(max_digits=15, decimal_places=2, default=0)
    cooperative_price = models.DecimalField(max_digits=15, decimal_places=2, null=True, blank=True,
        help_text="Diisi Divisi Simpan Pinjam saat revisi")
    notes = models.TextField(blank=True, default="")

    class Meta:
        db_table = "GoodsPhoneDetail"


class LoanDisbursement(TimeStampedModel):
    loan = models.OneToOneField(LoanApplication, on_delete=models.CASCADE, related_name="disbursement")
    processed_by = models.ForeignKey(User, on_delete=models.PROTECT, related_name="+")
    disbursement_date = models.DateField()
    notes = models.TextField(blank=True, default="")

    class Meta:
        db_table = "LoanDisbursement"


class LoanAuthorization(TimeStampedModel):
    loan = models.OneToOneField(LoanApplication, on_delete=models.CASCADE, related_name="authorization")
    authorized_by = models.ForeignKey(User, on_delete=models.PROTECT, related_name="+")
    authorization_date = models.DateField()
    notes = models.TextField(blank=True, default="")

    class Meta:
        db_table = "LoanAuthorization"


class LoanInstallment(TimeStampedModel):
    loan = models.ForeignKey(LoanApplication, on_delete=models.CASCADE, related_name="installments")
    installment_number = models.PositiveSmallIntegerField()
    due_date = models.DateField(db_index=True)
    amount = models.DecimalField(max_digits=15, decimal_places=2)
    is_paid = models.BooleanField(default=False)
    paid_at = models.DateTimeField(null=True, blank=True)
    payroll_period = models.ForeignKey("PayrollPeriod", on_delete=models.SET_NULL, null=True, blank=True, related_name="installments")

    class Meta:
        ordering = ["loan_id", "installment_number"]
        db_table = "LoanInstallment"
        unique_together = [("loan", "installment_number")]

    def __str__(self):
        return f"{self.loan.loan_number} #{self.installment_number}"
