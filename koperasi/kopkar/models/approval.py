from django.db import models
from .mixins import TimeStampedModel
from .account import User


class ApprovalStep(models.TextChoices):
    DIVISI_SIMPAN_PINJAM = "DIVISI_SIMPAN_PINJAM", "Divisi Simpan Pinjam"
    KETUA = "KETUA", "Ketua"
    PENGAWAS = "PENGAWAS", "Pengawas"


class ApprovalDecision(models.TextChoices):
    APPROVED = "APPROVED", "Disetujui"
    REJECTED = "REJECTED", "Ditolak"
    REVISED = "REVISED", "Direvisi"


class Approval(TimeStampedModel):
    """
    One row per configured step of an approvable object, created at submission.
    `decision` stays null until the approver of that step acts.
    """
    object_type = models.CharField(max_length=32)
    object_id = models.BigIntegerField()
    sequence = models.PositiveSmallIntegerField()
    step = models.CharField(max_length=32, choices=ApprovalStep.choices)
    decision = models.CharField(max_length=16, choices=ApprovalDecision.choices, null=True, blank=True)
    decided_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name="+")
    decided_at = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True, default="")
    revised_data = models.JSONField(null=True, blank=True)

    class Meta:
        db_table = "Approval"
        ordering = ["object_type", "object_id", "sequence"]
        unique_together = [("object_type", "object_id", "step")]
        indexes = [models.Index(fields=["object_type", "object_id"])]

    def __str__(self):
        return f"{self.object_type}#{self.object_id} {self.step}: {self.decision or 'PENDING'}"

    @property
    def is_open(self) -> bool:
        return self.decision in (None, ApprovalDecision.REVISED)
