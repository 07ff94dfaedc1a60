from django.db import models
from .mixins import TimeStampedModel
from .account import User
from .approval import ApprovalStep


class SavingsAccount(TimeStampedModel):
    """Buku tabungan: running balances per savings column."""
    user = models.OneToOneField(User, on_delete=models.PROTECT, related_name="savings_account")
    saldo_pokok = models.DecimalField(max_digits=15, decimal_places=2, default=0)
    saldo_wajib = models.DecimalField(max_digits=15, decimal_places=2, default=0)
    saldo_sukarela = models.DecimalField(max_digits=15, decimal_places=2, default=0)
    bunga_deposito = models.DecimalField(max_digits=15, decimal_places=2, default=0)

    class Meta:
        db_table = "SavingsAccount"
        ordering = ["user__name"]

    def __str__(self):
        return f"Tabungan {self.user.name}"

    @property
    def total_saldo(self):
        return self.saldo_pokok + self.saldo_wajib + self.saldo_sukarela + self.bunga_deposito


class SavingsTransaction(TimeStampedModel):
    account = models.ForeignKey(SavingsAccount, on_delete=models.CASCADE, related_name="transactions")
    payroll_period = models.ForeignKey("PayrollPeriod", on_delete=models.SET_NULL, null=True, blank=True, related_name="transactions")
    transaction_date = models.DateField(db_index=True)

    iuran_pendaftaran = models.DecimalField(max_digits=15, decimal_places=2, default=0)
    iuran_bulanan = models.DecimalField(max_digits=15, decimal_places=2, default=0)
    tabungan_deposito = models.DecimalField(max_digits=15, decimal_places=2, default=0)
    shu = models.DecimalField(max_digits=15, decimal_places=2, default=0)
    penarikan = models.DecimalField(max_digits=15, decimal_places=2, default=0)
    bunga = models.DecimalField(max_digits=15, decimal_places=2, default=0)
    interest_rate = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)
    note = models.CharField(max_length=255, blank=True, default="")

    class Meta:
        db_table = "SavingsTransaction"
        ordering = ["-transaction_date", "-id"]
        constraints = [
            models.UniqueConstraint(
                fields=["account", "payroll_period"],
                condition=models.Q(payroll_period__isnull=False),
                name="uniq_savings_tx_account_period",
            )
        ]

    def __str__(self):
        return f"{self.account_id} @ {self.transaction_date}"


class SavingsWithdrawal(TimeStampedModel):
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
    user = models.ForeignKey(User, on_delete=models.PROTECT, related_name="savings_withdrawals")
    withdrawal_amount = models.DecimalField(max_digits=15, decimal_places=2)
    has_early_deposit_penalty = models.BooleanField(default=False)
    early_deposit_penalty_rate = models.DecimalField(max_digits=5, decimal_places=2, default=0)
    early_deposit_penalty_amount = models.DecimalField(max_digits=15, decimal_places=2, default=0)
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
        db_table = "SavingsWithdrawal"
        indexes = [models.Index(fields=["user", "status"])]

    def __str__(self):
        return f"{self.withdrawal_number} ({self.status})"
