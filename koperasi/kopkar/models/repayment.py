from django.db import models
from .mixins import TimeStampedModel
from .account import User
from .approval import ApprovalStep
from .loan import LoanApplication


class LoanRepayment(TimeStampedModel):
    """Early settlement of the remaining balance of a disbursed loan."""

    class Status(models.TextChoices):
        SUBMITTED = "SUBMITTED", "Diajukan"
        UNDER_REVIEW_DSP = "UNDER_REVIEW_DSP", "Review Divisi Simpan Pinjam"
        UNDER_REVIEW_KETUA = "UNDER_REVIEW_KETUA", "Review Ketua"
        UNDER_REVIEW_PENGAWAS = "UNDER_REVIEW_PENGAWAS", "Review Pengawas"
        APPROVED = "APPROVED", "Disetujui"
        REJECTED = "REJECTED", "Ditolak"
        CANCELLED = "CANCELLED", "Dibatalkan"

    repayment_number = models.CharField(max_length=32, unique=True)
    loan = models.ForeignKey(LoanApplication, on_delete=models.PROTECT, related_name="repayments")
    user = models.ForeignKey(User, on_delete=models.PROTECT, related_name="loan_repayments")
    total_amount = models.DecimalField(max_digits=15, decimal_places=2)
    paid_installments = models.PositiveSmallIntegerField(default=0)
    remaining_installments = models.PositiveSmallIntegerField(default=0)
    notes = models.TextField(blank=True, default="")

    status = models.CharField(max_length=32, choices=Status.choices, default=Status.SUBMITTED, db_index=True)
    current_step = models.CharField(max_length=32, choices=ApprovalStep.choices, null=True, blank=True)

    submitted_at = models.DateTimeField(null=True, blank=True)
    approved_at = models.DateTimeField(null=True, blank=True)
    rejected_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    rejection_reason = models.TextField(blank=True, default="")

    class Meta:
        ordering = ["-created_at"]
        db_table = "LoanRepayment"

    def __str__(self):
        return f"{self.repayment_number} ({self.status})"
