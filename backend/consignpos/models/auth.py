from __future__ import annotations

from ..extensions import db
from consignpos.time_utils import to_utc_z, utcnow


class OperatorSession(db.Model):
    """
    Console session for a named operator.

    The console has no user accounts: an operator signs in with a display
    name only, and that name is what audit entries record. Tokens are random
    and stored hashed (SHA-256); the plaintext only ever goes to the client.
    """
    __tablename__ = "operator_sessions"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    operator_name = db.Column(db.String(120), nullable=False)

    # Token hash (never store plaintext tokens!)
    token_hash = db.Column(db.String(255), nullable=False, unique=True, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now())
    expires_at = db.Column(db.DateTime(timezone=True), nullable=False, index=True)
    is_revoked = db.Column(db.Boolean, nullable=False, default=False)
    revoked_at = db.Column(db.DateTime(timezone=True), nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "operator_name": self.operator_name,
            "created_at": to_utc_z(self.created_at),
            "expires_at": to_utc_z(self.expires_at),
            "is_revoked": self.is_revoked,
        }
