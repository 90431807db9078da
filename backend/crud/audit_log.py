from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from typing import Optional
import logging

from models.audit_log import AuditLog
from schemas.audit_log import AuditLogCreate
from utils import sqlalchemy_to_dict

logger = logging.getLogger(__name__)

def create_audit_log(db: Session, log_entry: AuditLogCreate):
    db_log_entry = AuditLog(**log_entry.model_dump())
    db.add(db_log_entry)
    db.commit()
    db.refresh(db_log_entry)
    return db_log_entry

def log_change(db: Session, table_name: str, record, changed_by: str, action: str,
               old_values: Optional[dict] = None):
    """
    Write an audit row for a change that has already been committed.

    A failure here must not undo the change itself, so it is logged and the
    session rolled back instead of raised.
    """
    try:
        if action == 'DELETE':
            # the row is gone; identify it from the values captured before deletion
            new_values = {}
            record_id = (old_values or {}).get('id', '')
        else:
            new_values = sqlalchemy_to_dict(record)
            record_id = record.id
        return create_audit_log(db, AuditLogCreate(
            table_name=table_name,
            record_id=str(record_id),
            changed_by=changed_by,
            action=action,
            old_values=old_values or {},
            new_values=new_values,
        ))
    except SQLAlchemyError:
        db.rollback()
        logger.exception(f"Failed to write audit log for {table_name} {action}")
        return None

def get_audit_logs(db: Session, table_name: Optional[str] = None, record_id: Optional[str] = None,
                   skip: int = 0, limit: int = 100):
    query = db.query(AuditLog)
    if table_name:
        query = query.filter(AuditLog.table_name == table_name)
    if record_id:
        query = query.filter(AuditLog.record_id == record_id)
    return query.order_by(AuditLog.changed_at.desc(), AuditLog.id.desc()).offset(skip).limit(limit).all()
