"""Audit trail helpers.

Audit rows are appended best-effort: a storage failure is logged and never
fails the operation being audited.
"""
import logging
from typing import Any, Optional

from pydantic import BaseModel

from .models import AuditAction, AuditLog
from .storage import Storage

logger = logging.getLogger("controle.audit")


class AuditContext(BaseModel):
    """Who performed an operation and from where."""

    user_id: Optional[str] = None
    user_email: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None

    model_config = {"frozen": True}

    def entry(
        self,
        action: AuditAction,
        resource_type: str,
        resource_id: Optional[str] = None,
        old_data: Optional[dict[str, Any]] = None,
        new_data: Optional[dict[str, Any]] = None,
    ) -> AuditLog:
        return AuditLog(
            user_id=self.user_id,
            user_email=self.user_email,
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            old_data=old_data,
            new_data=new_data,
            ip_address=self.ip_address,
            user_agent=self.user_agent,
        )


async def record_audit(storage: Storage, entry: AuditLog) -> None:
    """Append an audit entry, logging instead of raising on failure."""
    try:
        await storage.create_audit_log(entry)
    except Exception as err:
        logger.error(
            "Failed to write audit log action=%s resource=%s id=%s: %s",
            entry.action, entry.resource_type, entry.resource_id, err,
        )
