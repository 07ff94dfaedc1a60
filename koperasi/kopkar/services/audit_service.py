from kopkar.models import AuditLog


def log_action(*, actor, action: str, object_type: str, object_id, before=None, after=None, notes: str = "", ip=None):
    return AuditLog.objects.create(
        actor=actor, action=action, object_type=object_type, object_id=str(object_id),
        before=before, after=after, notes=notes or "", ip=ip
    )


def history(object_type: str, object_id):
    return AuditLog.objects.filter(object_type=object_type, object_id=str(object_id)).order_by("created_at", "id")
