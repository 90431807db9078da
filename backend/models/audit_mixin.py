from sqlalchemy import Column, DateTime, String
from utils.clock import local_now


class TimestampMixin:
    """Mixin that provides created/updated timestamps and user info.

    This is the minimal mixin used for most models. It does NOT include soft-delete
    columns so rows such as cart items can be deleted and recreated without
    unique-constraint collisions.
    """
    # DateTime(timezone=True) keeps the bakery's timezone info in the database.
    created_at = Column(DateTime(timezone=True), default=local_now)
    updated_at = Column(DateTime(timezone=True), onupdate=local_now)
    created_by = Column(String, nullable=True)
    updated_by = Column(String, nullable=True)


class SoftDeleteMixin:
    """Mixin for soft-delete columns (deleted_at, deleted_by).

    Apply this only to models where soft-delete is required (catalogue rows that
    historical orders still point at). Ledger tables never use it: entries are
    immutable and are corrected by appending, not by deleting.
    """
    deleted_at = Column(DateTime(timezone=True), nullable=True)
    deleted_by = Column(String, nullable=True)


class AuditMixin(TimestampMixin, SoftDeleteMixin):
    """Timestamps + soft-delete in one mixin."""
    pass
