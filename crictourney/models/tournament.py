"""
Tournament storage models
"""
import json
from typing import List, Optional
from datetime import datetime
from sqlalchemy import String, Integer, ForeignKey, DateTime, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from crictourney.database import Base


class Tournament(Base):
    __tablename__ = "tournaments"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    name: Mapped[str] = mapped_column(String(100))
    overs: Mapped[int] = mapped_column(Integer, default=20)
    status: Mapped[str] = mapped_column(String(20), default="active")  # setup, auction, active, completed
    champion_id: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    runner_up_id: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)

    # Auction state serialized as JSON, null until an auction is set up
    auction_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    teams: Mapped[List["TournamentTeam"]] = relationship(
        "TournamentTeam", back_populates="tournament", cascade="all, delete-orphan",
        order_by="TournamentTeam.position",
    )
    players: Mapped[List["TournamentPlayer"]] = relationship(
        "TournamentPlayer", back_populates="tournament", cascade="all, delete-orphan",
        order_by="TournamentPlayer.position",
    )
    matches: Mapped[List["MatchRecord"]] = relationship(
        "MatchRecord", back_populates="tournament", cascade="all, delete-orphan",
        order_by="MatchRecord.match_number",
    )

    def __repr__(self):
        return f"<Tournament '{self.name}' ({len(self.teams)} teams)>"


class TournamentTeam(Base):
    __tablename__ = "tournament_teams"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    tournament_id: Mapped[str] = mapped_column(ForeignKey("tournaments.id", ondelete="CASCADE"))
    tournament: Mapped["Tournament"] = relationship("Tournament", back_populates="teams")

    position: Mapped[int] = mapped_column(Integer, default=0)
    name: Mapped[str] = mapped_column(String(100))
    short_name: Mapped[str] = mapped_column(String(5), default="")
    color: Mapped[str] = mapped_column(String(7), default="#000000")  # Hex color

    # JSON array of player ids in batting order
    roster_json: Mapped[str] = mapped_column(Text, default="[]")

    @property
    def roster(self) -> list:
        return json.loads(self.roster_json or "[]")

    def __repr__(self):
        return f"<TournamentTeam {self.name} ({self.short_name})>"


class TournamentPlayer(Base):
    __tablename__ = "tournament_players"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    tournament_id: Mapped[str] = mapped_column(ForeignKey("tournaments.id", ondelete="CASCADE"))
    tournament: Mapped["Tournament"] = relationship("Tournament", back_populates="players")

    position: Mapped[int] = mapped_column(Integer, default=0)
    name: Mapped[str] = mapped_column(String(100))
    role: Mapped[str] = mapped_column(String(20), default="batsman")
    team_id: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    base_price: Mapped[int] = mapped_column(Integer, default=0)

    def __repr__(self):
        return f"<TournamentPlayer {self.name} ({self.role})>"


class MatchRecord(Base):
    """A fixture with its full match state serialized as JSON"""
    __tablename__ = "tournament_matches"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    tournament_id: Mapped[str] = mapped_column(ForeignKey("tournaments.id", ondelete="CASCADE"))
    tournament: Mapped["Tournament"] = relationship("Tournament", back_populates="matches")

    match_number: Mapped[int] = mapped_column(Integer, default=0)
    status: Mapped[str] = mapped_column(String(20), default="scheduled")
    winner_id: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    state_json: Mapped[str] = mapped_column(Text)

    def __repr__(self):
        return f"<MatchRecord #{self.match_number} ({self.status})>"
