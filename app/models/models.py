from sqlalchemy import (
    Column, Integer, String, DateTime, ForeignKey, JSON,
)
from sqlalchemy.sql import func
from app.core.database import Base


# --- Models ---

class Season(Base):
    """
    One season of the game. The whole game state (cast status, players,
    weekly results, adjustments) lives in ``state`` as a single JSON document,
    in the same camelCase shape the commissioner console writes.
    """
    __tablename__ = "seasons"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)  # e.g. "The Traitors US S4"
    rule_pack_id = Column(String(50), nullable=True)  # Null = configured default pack
    state = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class WeeklyScoreSnapshot(Base):
    """
    Archived leaderboard totals after an episode. Only the totals are kept,
    keyed by player id:

    {"p-ana": 23.5, "p-ben": 18, ...}

    The full breakdown is always recomputed from the season state.
    """
    __tablename__ = "weekly_score_snapshots"

    id = Column(Integer, primary_key=True, index=True)
    season_id = Column(Integer, ForeignKey("seasons.id"), nullable=False, index=True)
    label = Column(String(100), nullable=False)  # e.g. "Week 3"
    week_id = Column(String(50))
    weekly_results = Column(JSON)  # Outcomes in effect when archived
    totals = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
