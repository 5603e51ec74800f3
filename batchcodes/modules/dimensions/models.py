from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, UniqueConstraint, Index
from batchcodes.core.base import Base, TimestampedMixin

class DimensionSetRow(Base, TimestampedMixin):
    __tablename__ = "dimensionset"

    funding_source_code: Mapped[str] = mapped_column(String(1))
    funding_source_name: Mapped[str] = mapped_column(String(255))
    medicine_type_code: Mapped[str] = mapped_column(String(1))
    medicine_type_name: Mapped[str] = mapped_column(String(255))
    active_ingredient_code: Mapped[str] = mapped_column(String(3))
    active_ingredient_name: Mapped[str] = mapped_column(String(255))
    producer_code: Mapped[str] = mapped_column(String(1))
    producer_name: Mapped[str] = mapped_column(String(255))
    # "" when the set has no package type; NULL would escape the unique constraint
    package_type_code: Mapped[str] = mapped_column(String(1), default="", server_default="")
    package_type_name: Mapped[str] = mapped_column(String(255), default="", server_default="")
    status: Mapped[str] = mapped_column(String(16), default="active")  # active, inactive
    created_by: Mapped[str | None] = mapped_column(String(191), nullable=True)
    updated_by: Mapped[str | None] = mapped_column(String(191), nullable=True)

    __table_args__ = (
        UniqueConstraint(
            "funding_source_code", "medicine_type_code", "active_ingredient_code", "producer_code", "package_type_code",
            name="uq_dimensionset_codes",
        ),
        Index("ix_dimensionset_status", "status"),
    )
