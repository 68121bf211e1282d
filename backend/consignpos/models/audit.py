from __future__ import annotations

from ..extensions import db
from consignpos.time_utils import to_utc_z, utcnow


class AuditLog(db.Model):
    """
    Append-only activity log.

    Rows are inserted by services inside the same transaction as the change
    they describe and are never updated or deleted.
    """
    __tablename__ = "audit_logs"
    __table_args__ = (
        db.Index("ix_audit_logs_timestamp", "timestamp"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    action = db.Column(db.String(64), nullable=False)
    details = db.Column(db.Text, nullable=False, default="")
    user = db.Column(db.String(120), nullable=False)
    timestamp = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "action": self.action,
            "details": self.details,
            "user": self.user,
            "timestamp": to_utc_z(self.timestamp),
        }
