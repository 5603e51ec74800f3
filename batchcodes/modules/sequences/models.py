from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Integer, TIMESTAMP, UniqueConstraint, ForeignKeyConstraint, Index
from batchcodes.core.base import Base, TimestampedMixin

class SequenceCounterRow(Base, TimestampedMixin):
    __tablename__ = "sequencecounter"

    year: Mapped[str] = mapped_column(String(2))
    month: Mapped[str] = mapped_column(String(2))
    funding_source_code: Mapped[str] = mapped_column(String(1))
    medicine_type_code: Mapped[str] = mapped_column(String(1))
    active_ingredient_code: Mapped[str] = mapped_column(String(3))
    producer_code: Mapped[str] = mapped_column(String(1))
    package_type_code: Mapped[str] = mapped_column(String(1), default="", server_default="")
    # 4 chars while numeric, 5 once promoted (0001A / A0001)
    current_sequence: Mapped[str] = mapped_column(String(5), default="0001")
    sequence_type: Mapped[str] = mapped_column(String(16), default="numeric")  # numeric, alpha_suffix, alpha_prefix
    status: Mapped[str] = mapped_column(String(16), default="active")  # active, exhausted
    total_generated: Mapped[int] = mapped_column(Integer, default=0)
    last_generated_at: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)

    __table_args__ = (
        UniqueConstraint(
            "year", "month",
            "funding_source_code", "medicine_type_code", "active_ingredient_code", "producer_code", "package_type_code",
            name="uq_sequencecounter_period_codes",
        ),
        ForeignKeyConstraint(
            ["funding_source_code", "medicine_type_code", "active_ingredient_code", "producer_code", "package_type_code"],
            ["dimensionset.funding_source_code", "dimensionset.medicine_type_code", "dimensionset.active_ingredient_code",
             "dimensionset.producer_code", "dimensionset.package_type_code"],
            name="fk_sequencecounter_dimensionset",
        ),
        Index("ix_sequencecounter_period", "year", "month"),
    )
