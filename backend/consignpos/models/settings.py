from __future__ import annotations

from ..extensions import db
from consignpos.time_utils import to_utc_z, utcnow


STORE_PROFILE_ID = 1


class StoreProfile(db.Model):
    """
    Singleton store identity used as template data for invoice drafts.

    Always stored as row id=1 and replaced wholesale on save.
    """
    __tablename__ = "store_profile"

    id = db.Column(db.Integer, primary_key=True, default=STORE_PROFILE_ID)
    name = db.Column(db.String(255), nullable=False)
    address = db.Column(db.Text, nullable=False, default="")
    phone = db.Column(db.String(32), nullable=False, default="")
    email = db.Column(db.String(255), nullable=False, default="")
    tax_id = db.Column(db.String(64), nullable=False, default="")
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=db.func.now(),
        onupdate=utcnow,
    )

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "address": self.address,
            "phone": self.phone,
            "email": self.email,
            "tax_id": self.tax_id,
            "updated_at": to_utc_z(self.updated_at),
        }
