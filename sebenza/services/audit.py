from typing import Any, Optional

from sqlalchemy.orm import Session

from sebenza.models.audit_log import AuditLog


def log_action(
    db: Session,
    user_id: Optional[str],
    action: str,
    resource_type: str,
    resource_id: Any = None,
    details: dict | None = None,
    ip_address: str | None = None,
    commit: bool = True,
):
    entry = AuditLog(
        user_id=str(user_id) if user_id is not None else None,
        action=action,
        resource_type=resource_type,
        resource_id=str(resource_id) if resource_id is not None else None,
        details=details.copy() if isinstance(details, dict) else {},
        ip_address=ip_address,
    )
    db.add(entry)
    if commit:
        db.commit()
    return entry
