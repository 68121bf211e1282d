from __future__ import annotations

from ..extensions import db
from consignpos.time_utils import to_utc_z, utcnow


class Brand(db.Model):
    """
    Consignment partner whose goods the store sells on commission.

    commission_rate is the percentage of the selling price the store keeps;
    the remainder is payable to the brand. Historical sale lines copy the
    brand name and rate at sale time, so edits here never rewrite old reports.
    """
    __tablename__ = "brands"
    __table_args__ = (
        db.CheckConstraint(
            "commission_rate >= 0 AND commission_rate <= 100",
            name="ck_brands_commission_rate_range",
        ),
        db.Index("ix_brands_name", "name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    contact_email = db.Column(db.String(255), nullable=True)
    contact_phone = db.Column(db.String(32), nullable=True)

    # EXCLUSIVE | NON_EXCLUSIVE
    type = db.Column(db.String(16), nullable=False, default="EXCLUSIVE")
    commission_rate = db.Column(db.Numeric(5, 2), nullable=False)

    joined_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=db.func.now(),
        onupdate=utcnow,
    )
    version_id = db.Column(db.Integer, nullable=False, default=1)

    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<Brand id={self.id} name={self.name!r} rate={self.commission_rate}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "contact_email": self.contact_email,
            "contact_phone": self.contact_phone,
            "type": self.type,
            "commission_rate": float(self.commission_rate) if self.commission_rate is not None else None,
            "joined_at": to_utc_z(self.joined_at),
            "updated_at": to_utc_z(self.updated_at),
        }
