from django.db import models
from .mixins import TimeStampedModel
from .account import User
from .core import Department
from .approval import ApprovalStep


class MemberApplication(TimeStampedModel):
    class Status(models.TextChoices):
        SUBMITTED = "SUBMITTED", "Diajukan"
        UNDER_REVIEW_DSP = "UNDER_REVIEW_DSP", "Review Divisi Simpan Pinjam"
        UNDER_REVIEW_KETUA = "UNDER_REVIEW_KETUA", "Review Ketua"
        UNDER_REVIEW_PENGAWAS = "UNDER_REVIEW_PENGAWAS", "Review Pengawas"
        APPROVED = "APPROVED", "Disetujui"
        REJECTED = "REJECTED", "Ditolak"
        CANCELLED = "CANCELLED", "Dibatalkan"

    class InstallmentPlan(models.IntegerChoices):
        FULL = 1, "Lunas sekali bayar"
        TWO_MONTHS = 2, "Dicicil 2 kali"

    user = models.ForeignKey(User, on_delete=models.PROTECT, related_name="member_applications")
    nik = models.CharField(max_length=32)
    npwp = models.CharField(max_length=32, blank=True, default="")
    date_of_birth = models.DateField()
    birth_place = models.CharField(max_length=100)
    department = models.ForeignKey(Department, on_delete=models.SET_NULL, null=True, blank=True, related_name="+")
    installment_plan = models.PositiveSmallIntegerField(choices=InstallmentPlan.choices, default=InstallmentPlan.FULL)

    entrance_fee = models.DecimalField(max_digits=15, decimal_places=2, default=0)
    paid_amount = models.DecimalField(max_digits=15, decimal_places=2, default=0)
    remaining_amount = models.DecimalField(max_digits=15, decimal_places=2, default=0)
    is_paid_off = models.BooleanField(default=False)

    status = models.CharField(max_length=32, choices=Status.choices, default=Status.SUBMITTED, db_index=True)
    current_step = models.CharField(max_length=32, choices=ApprovalStep.choices, null=True, blank=True)

    submitted_at = models.DateTimeField(null=True, blank=True)
    approved_at = models.DateTimeField(null=True, blank=True)
    rejected_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    rejection_reason = models.TextField(blank=True, default="")

    class Meta:
        ordering = ["-created_at"]
        db_table = "MemberApplication"

    def __str__(self):
        return f"Member application #{self.pk} {self.user_id} ({self.status})"
