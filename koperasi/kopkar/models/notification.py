from django.db import models
from .mixins import TimeStampedModel


class EmailConfig(TimeStampedModel):
    name = models.CharField(max_length=100)
    host = models.CharField(max_length=255)
    port = models.PositiveIntegerField(default=587)
    username = models.CharField(max_length=255, blank=True, default="")
    password = models.CharField(max_length=255, blank=True, default="")
    use_tls = models.BooleanField(default=True)
    use_ssl = models.BooleanField(default=False)
    from_email = models.EmailField()
    from_name = models.CharField(max_length=150, blank=True, default="")
    is_active = models.BooleanField(default=False, db_index=True)

    class Meta:
        db_table = "EmailConfig"
        ordering = ["-is_active", "name"]

    def __str__(self):
        return f"{self.name} ({self.host}:{self.port})"

    @property
    def sender(self) -> str:
        return f"{self.from_name} <{self.from_email}>" if self.from_name else self.from_email


class EmailLog(TimeStampedModel):
    object_type = models.CharField(max_length=64, blank=True, default="", help_text="vd: loan, deposit, savings_withdrawal")
    object_id = models.CharField(max_length=64, blank=True, default="")

    to_user = models.IntegerField(null=True, blank=True, db_index=True)
    to_email = models.CharField(max_length=1000, blank=True, default="")
    subject = models.CharField(max_length=255)
    payload = models.JSONField(null=True, blank=True)

    delivered = models.BooleanField(default=False, db_index=True)
    delivered_at = models.DateTimeField(null=True, blank=True)
    attempt_count = models.IntegerField(default=0)
    last_error = models.TextField(blank=True, default="")
    email_config = models.ForeignKey(EmailConfig, on_delete=models.SET_NULL, null=True, blank=True, related_name="logs")

    class Meta:
        db_table = "EmailLog"
        ordering = ["-created_at"]

    def __str__(self):
        state = "sent" if self.delivered else "failed"
        return f"EMAIL to={self.to_email or '-'} ({state})"
