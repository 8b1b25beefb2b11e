"""battles table model."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, Float, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base


class Battle(Base):
    """One battle between an attacking squad and a defending opponent.

    Rating columns stay NULL until the battle is processed; once
    ``processed_at`` is set the row is never modified again.
    """

    __tablename__ = "battles"
    __table_args__ = (
        CheckConstraint("squad_id <> opponent_id", name="ck_battles_distinct_squads"),
        CheckConstraint("sigma_before IS NULL OR sigma_before > 0.0", name="ck_battles_sigma_before"),
        CheckConstraint(
            "opponent_sigma_before IS NULL OR opponent_sigma_before > 0.0",
            name="ck_battles_opponent_sigma_before",
        ),
        Index("idx_battles_squad_end", "squad_id", "end_date"),
        Index("idx_battles_opponent_end", "opponent_id", "end_date"),
        Index("idx_battles_processed", "processed_at", "end_date"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    squad_id: Mapped[str] = mapped_column(ForeignKey("squads.id"), nullable=False)
    opponent_id: Mapped[str] = mapped_column(ForeignKey("squads.id"), nullable=False)
    score: Mapped[int] = mapped_column(Integer, nullable=False)
    opponent_score: Mapped[int] = mapped_column(Integer, nullable=False)
    mu_before: Mapped[float | None] = mapped_column(Float, nullable=True)
    sigma_before: Mapped[float | None] = mapped_column(Float, nullable=True)
    opponent_mu_before: Mapped[float | None] = mapped_column(Float, nullable=True)
    opponent_sigma_before: Mapped[float | None] = mapped_column(Float, nullable=True)
    skill_change: Mapped[float | None] = mapped_column(Float, nullable=True)
    opponent_skill_change: Mapped[float | None] = mapped_column(Float, nullable=True)
    end_date: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
    processed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)
