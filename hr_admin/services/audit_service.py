import logging
from typing import Optional
from uuid import UUID

from fastapi import Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from hr_admin.models.audit_log import AuditLog, AuditAction

logger = logging.getLogger(__name__)


def log_audit(
    db: Session,
    user_id: UUID,
    action: AuditAction,
    entity_type: str,
    entity_id: Optional[UUID] = None,
    old_value: Optional[dict] = None,
    new_value: Optional[dict] = None,
    request: Optional[Request] = None
) -> None:
    """
    Schreibt einen Audit-Eintrag nach einer erfolgreichen Aktion.
    Scheitert das Schreiben, wird nur geloggt; die eigentliche Aktion ist bereits committet.
    """
    new_audit_log = AuditLog(
        user_id=user_id,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        old_value=old_value,
        new_value=new_value,
        ip_address=request.client.host if request and request.client else None,
        user_agent=(request.headers.get("user-agent") or "")[:255] if request else None
    )
    try:
        db.add(new_audit_log)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception(f"Audit-Log für {entity_type} {entity_id} konnte nicht geschrieben werden")
