"""
Match and tournament state dataclasses with serialization support.
"""
import enum
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, List


def generate_id() -> str:
    return uuid.uuid4().hex


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class MatchStatus(str, enum.Enum):
    SCHEDULED = "scheduled"
    LIVE = "live"
    COMPLETED = "completed"


class TossDecision(str, enum.Enum):
    BAT = "bat"
    BOWL = "bowl"


class CommentaryType(str, enum.Enum):
    INFO = "info"
    TOSS = "toss"
    RUN = "run"
    BOUNDARY = "boundary"
    SIX = "six"
    WICKET = "wicket"
    EXTRA = "extra"
    OVER_END = "over_end"
    INNINGS_END = "innings_end"
    TARGET = "target"
    RESULT = "result"


class MatchType(str, enum.Enum):
    LEAGUE = "league"
    QUALIFIER_1 = "qualifier_1"
    ELIMINATOR = "eliminator"
    QUALIFIER_2 = "qualifier_2"
    FINAL = "final"


class TournamentStatus(str, enum.Enum):
    SETUP = "setup"          # squads still to be filled by auction
    AUCTION = "auction"
    ACTIVE = "active"
    COMPLETED = "completed"


class AuctionStatus(str, enum.Enum):
    WAITING = "waiting"
    ACTIVE = "active"
    COMPLETED = "completed"


class LotStatus(str, enum.Enum):
    AVAILABLE = "available"
    IN_BIDDING = "in_bidding"
    SOLD = "sold"
    UNSOLD = "unsold"


@dataclass
class PlayerInfo:
    """A player registered in a tournament"""
    id: str
    name: str
    team_id: Optional[str] = None
    role: str = "batsman"
    base_price: int = 0  # auction reserve, 0 means derived from the team budget

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "team_id": self.team_id,
            "role": self.role,
            "base_price": self.base_price,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "PlayerInfo":
        return cls(
            id=d["id"],
            name=d["name"],
            team_id=d.get("team_id"),
            role=d.get("role", "batsman"),
            base_price=d.get("base_price", 0),
        )


@dataclass
class TeamInfo:
    """A tournament team. `players` is the roster in batting order."""
    id: str
    name: str
    short_name: str = ""
    color: str = "#000000"
    players: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "short_name": self.short_name,
            "color": self.color,
            "players": list(self.players),
        }

    @classmethod
    def from_dict(cls, d: dict) -> "TeamInfo":
        return cls(
            id=d["id"],
            name=d["name"],
            short_name=d.get("short_name", ""),
            color=d.get("color", "#000000"),
            players=list(d.get("players", [])),
        )


@dataclass
class MatchSide:
    """One team's running totals inside a match"""
    id: str
    name: str
    color: str = "#000000"
    players: List[str] = field(default_factory=list)
    score: int = 0
    wickets: int = 0
    extras: int = 0
    overs: float = 0.0  # decimal overs, e.g. 4 overs 3 balls -> 4.5
    balls: int = 0      # legal deliveries faced

    @property
    def overs_display(self) -> str:
        return f"{self.balls // 6}.{self.balls % 6}"

    @property
    def run_rate(self) -> float:
        if self.balls == 0:
            return 0.0
        return round(self.score / self.balls * 6, 2)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "players": list(self.players),
            "score": self.score,
            "wickets": self.wickets,
            "extras": self.extras,
            "overs": self.overs,
            "balls": self.balls,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "MatchSide":
        return cls(
            id=d["id"],
            name=d["name"],
            color=d.get("color", "#000000"),
            players=list(d.get("players", [])),
            score=d.get("score", 0),
            wickets=d.get("wickets", 0),
            extras=d.get("extras", 0),
            overs=d.get("overs", 0.0),
            balls=d.get("balls", 0),
        )


@dataclass
class CommentaryEntry:
    text: str
    type: CommentaryType
    ball: str = "0.0"
    innings: int = 1
    id: str = field(default_factory=generate_id)
    timestamp: str = field(default_factory=utc_now)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "text": self.text,
            "type": self.type.value,
            "ball": self.ball,
            "innings": self.innings,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "CommentaryEntry":
        return cls(
            id=d.get("id") or generate_id(),
            text=d["text"],
            type=CommentaryType(d["type"]),
            ball=d.get("ball", "0.0"),
            innings=d.get("innings", 1),
            timestamp=d.get("timestamp") or utc_now(),
        )


@dataclass
class BattingEntry:
    """Tracks a batter's innings"""
    player_id: str
    team_id: str
    runs: int = 0
    balls: int = 0
    fours: int = 0
    sixes: int = 0
    is_out: bool = False
    dismissal: str = ""

    @property
    def strike_rate(self) -> float:
        if self.balls == 0:
            return 0.0
        return round(self.runs / self.balls * 100, 2)

    def to_dict(self) -> dict:
        return {
            "player_id": self.player_id,
            "team_id": self.team_id,
            "runs": self.runs,
            "balls": self.balls,
            "fours": self.fours,
            "sixes": self.sixes,
            "is_out": self.is_out,
            "dismissal": self.dismissal,
            "strike_rate": self.strike_rate,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "BattingEntry":
        return cls(
            player_id=d["player_id"],
            team_id=d["team_id"],
            runs=d.get("runs", 0),
            balls=d.get("balls", 0),
            fours=d.get("fours", 0),
            sixes=d.get("sixes", 0),
            is_out=d.get("is_out", False),
            dismissal=d.get("dismissal", ""),
        )


@dataclass
class BowlingEntry:
    """Tracks a bowler's spell"""
    player_id: str
    team_id: str
    balls: int = 0
    runs: int = 0
    wickets: int = 0
    wides: int = 0
    no_balls: int = 0

    @property
    def overs(self) -> float:
        return self.balls / 6

    @property
    def overs_display(self) -> str:
        return f"{self.balls // 6}.{self.balls % 6}"

    @property
    def economy(self) -> float:
        if self.balls == 0:
            return 0.0
        return round(self.runs / self.balls * 6, 2)

    def to_dict(self) -> dict:
        return {
            "player_id": self.player_id,
            "team_id": self.team_id,
            "balls": self.balls,
            "overs": self.overs,
            "runs": self.runs,
            "wickets": self.wickets,
            "wides": self.wides,
            "no_balls": self.no_balls,
            "economy": self.economy,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "BowlingEntry":
        return cls(
            player_id=d["player_id"],
            team_id=d["team_id"],
            balls=d.get("balls", 0),
            runs=d.get("runs", 0),
            wickets=d.get("wickets", 0),
            wides=d.get("wides", 0),
            no_balls=d.get("no_balls", 0),
        )


@dataclass
class Match:
    """
    One fixture between two teams.

    `current_over` counts completed overs of the current innings and
    `current_ball` the legal deliveries bowled in the over in progress (0-5).
    """
    id: str
    tournament_id: str
    team1: MatchSide
    team2: MatchSide
    overs: int = 20
    venue: str = "Home Ground"
    scheduled_date: str = field(default_factory=utc_now)
    match_type: str = "league"

    status: MatchStatus = MatchStatus.SCHEDULED
    current_innings: int = 1
    batting_team_id: Optional[str] = None
    bowling_team_id: Optional[str] = None
    current_over: int = 0
    current_ball: int = 0
    target: Optional[int] = None

    toss_winner_id: Optional[str] = None
    toss_decision: Optional[TossDecision] = None

    striker_id: Optional[str] = None
    non_striker_id: Optional[str] = None
    bowler_id: Optional[str] = None
    batting_scorecard: List[BattingEntry] = field(default_factory=list)
    bowling_scorecard: List[BowlingEntry] = field(default_factory=list)

    commentary: List[CommentaryEntry] = field(default_factory=list)
    winner_id: Optional[str] = None
    is_tied: bool = False
    result_summary: Optional[str] = None
    last_updated: str = field(default_factory=utc_now)

    def side(self, team_id: Optional[str]) -> MatchSide:
        if team_id == self.team1.id:
            return self.team1
        if team_id == self.team2.id:
            return self.team2
        raise KeyError(f"Team {team_id} is not playing match {self.id}")

    @property
    def batting_side(self) -> MatchSide:
        return self.side(self.batting_team_id)

    @property
    def bowling_side(self) -> MatchSide:
        return self.side(self.bowling_team_id)

    @property
    def is_completed(self) -> bool:
        return self.status == MatchStatus.COMPLETED

    @property
    def ball_label(self) -> str:
        return f"{self.current_over}.{self.current_ball}"

    def batting_entry(self, player_id: Optional[str]) -> Optional[BattingEntry]:
        return next((b for b in self.batting_scorecard if b.player_id == player_id), None)

    def bowling_entry(self, player_id: Optional[str]) -> Optional[BowlingEntry]:
        return next((b for b in self.bowling_scorecard if b.player_id == player_id), None)

    def add_commentary(self, text: str, type: CommentaryType, ball: Optional[str] = None) -> CommentaryEntry:
        entry = CommentaryEntry(
            text=text,
            type=type,
            ball=ball or self.ball_label,
            innings=self.current_innings,
        )
        self.commentary.append(entry)
        return entry

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "tournament_id": self.tournament_id,
            "team1": self.team1.to_dict(),
            "team2": self.team2.to_dict(),
            "overs": self.overs,
            "venue": self.venue,
            "scheduled_date": self.scheduled_date,
            "match_type": self.match_type,
            "status": self.status.value,
            "current_innings": self.current_innings,
            "batting_team_id": self.batting_team_id,
            "bowling_team_id": self.bowling_team_id,
            "current_over": self.current_over,
            "current_ball": self.current_ball,
            "target": self.target,
            "toss_winner_id": self.toss_winner_id,
            "toss_decision": self.toss_decision.value if self.toss_decision else None,
            "striker_id": self.striker_id,
            "non_striker_id": self.non_striker_id,
            "bowler_id": self.bowler_id,
            "batting_scorecard": [b.to_dict() for b in self.batting_scorecard],
            "bowling_scorecard": [b.to_dict() for b in self.bowling_scorecard],
            "commentary": [c.to_dict() for c in self.commentary],
            "winner_id": self.winner_id,
            "is_tied": self.is_tied,
            "result_summary": self.result_summary,
            "last_updated": self.last_updated,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "Match":
        toss_decision = d.get("toss_decision")
        return cls(
            id=d["id"],
            tournament_id=d["tournament_id"],
            team1=MatchSide.from_dict(d["team1"]),
            team2=MatchSide.from_dict(d["team2"]),
            overs=d.get("overs", 20),
            venue=d.get("venue", "Home Ground"),
            scheduled_date=d.get("scheduled_date") or utc_now(),
            match_type=d.get("match_type", "league"),
            status=MatchStatus(d.get("status", MatchStatus.SCHEDULED.value)),
            current_innings=d.get("current_innings", 1),
            batting_team_id=d.get("batting_team_id"),
            bowling_team_id=d.get("bowling_team_id"),
            current_over=d.get("current_over", 0),
            current_ball=d.get("current_ball", 0),
            target=d.get("target"),
            toss_winner_id=d.get("toss_winner_id"),
            toss_decision=TossDecision(toss_decision) if toss_decision else None,
            striker_id=d.get("striker_id"),
            non_striker_id=d.get("non_striker_id"),
            bowler_id=d.get("bowler_id"),
            batting_scorecard=[BattingEntry.from_dict(b) for b in d.get("batting_scorecard", [])],
            bowling_scorecard=[BowlingEntry.from_dict(b) for b in d.get("bowling_scorecard", [])],
            commentary=[CommentaryEntry.from_dict(c) for c in d.get("commentary", [])],
            winner_id=d.get("winner_id"),
            is_tied=d.get("is_tied", False),
            result_summary=d.get("result_summary"),
            last_updated=d.get("last_updated") or utc_now(),
        )

    def __repr__(self):
        return f"<Match {self.team1.name} vs {self.team2.name} ({self.status.value})>"


@dataclass
class Bid:
    team_id: str
    amount: int
    timestamp: str = field(default_factory=utc_now)

    def to_dict(self) -> dict:
        return {"team_id": self.team_id, "amount": self.amount, "timestamp": self.timestamp}

    @classmethod
    def from_dict(cls, d: dict) -> "Bid":
        return cls(team_id=d["team_id"], amount=d["amount"], timestamp=d.get("timestamp") or utc_now())


@dataclass
class AuctionLot:
    """One player going under the hammer"""
    player_id: str
    base_price: int
    status: LotStatus = LotStatus.AVAILABLE
    current_bid: int = 0
    current_bidder_id: Optional[str] = None
    bids: List[Bid] = field(default_factory=list)
    sold_to: Optional[str] = None
    sold_price: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "player_id": self.player_id,
            "base_price": self.base_price,
            "status": self.status.value,
            "current_bid": self.current_bid,
            "current_bidder_id": self.current_bidder_id,
            "bids": [b.to_dict() for b in self.bids],
            "sold_to": self.sold_to,
            "sold_price": self.sold_price,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "AuctionLot":
        return cls(
            player_id=d["player_id"],
            base_price=d["base_price"],
            status=LotStatus(d.get("status", "available")),
            current_bid=d.get("current_bid", 0),
            current_bidder_id=d.get("current_bidder_id"),
            bids=[Bid.from_dict(b) for b in d.get("bids", [])],
            sold_to=d.get("sold_to"),
            sold_price=d.get("sold_price"),
        )


@dataclass
class TeamPurse:
    """A team's budget and acquisitions during the auction"""
    team_id: str
    budget: int
    remaining: int
    players: List[str] = field(default_factory=list)

    @property
    def spent(self) -> int:
        return self.budget - self.remaining

    def to_dict(self) -> dict:
        return {
            "team_id": self.team_id,
            "budget": self.budget,
            "remaining": self.remaining,
            "players": list(self.players),
        }

    @classmethod
    def from_dict(cls, d: dict) -> "TeamPurse":
        return cls(
            team_id=d["team_id"],
            budget=d["budget"],
            remaining=d["remaining"],
            players=list(d.get("players", [])),
        )


@dataclass
class AuctionState:
    """
    The player auction of a tournament.

    Lots are sold in order; `current_index` points at the lot under the
    hammer (-1 before the auction starts, len(lots) once it is over).
    """
    id: str
    budget: int
    squad_size: int
    status: AuctionStatus = AuctionStatus.WAITING
    lots: List[AuctionLot] = field(default_factory=list)
    purses: List[TeamPurse] = field(default_factory=list)
    current_index: int = -1

    @property
    def current_lot(self) -> Optional[AuctionLot]:
        if self.status != AuctionStatus.ACTIVE or not 0 <= self.current_index < len(self.lots):
            return None
        return self.lots[self.current_index]

    def purse(self, team_id: str) -> Optional[TeamPurse]:
        return next((p for p in self.purses if p.team_id == team_id), None)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "budget": self.budget,
            "squad_size": self.squad_size,
            "status": self.status.value,
            "lots": [lot.to_dict() for lot in self.lots],
            "purses": [p.to_dict() for p in self.purses],
            "current_index": self.current_index,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "AuctionState":
        return cls(
            id=d["id"],
            budget=d["budget"],
            squad_size=d["squad_size"],
            status=AuctionStatus(d.get("status", "waiting")),
            lots=[AuctionLot.from_dict(lot) for lot in d.get("lots", [])],
            purses=[TeamPurse.from_dict(p) for p in d.get("purses", [])],
            current_index=d.get("current_index", -1),
        )


@dataclass
class TournamentData:
    """Snapshot of a tournament as read from the repository"""
    id: str
    name: str
    overs: int = 20
    teams: List[TeamInfo] = field(default_factory=list)
    players: List[PlayerInfo] = field(default_factory=list)
    matches: List[Match] = field(default_factory=list)
    status: TournamentStatus = TournamentStatus.ACTIVE
    champion_id: Optional[str] = None
    runner_up_id: Optional[str] = None
    auction: Optional[AuctionState] = None

    def team(self, team_id: str) -> Optional[TeamInfo]:
        return next((t for t in self.teams if t.id == team_id), None)

    def player(self, player_id: str) -> Optional[PlayerInfo]:
        return next((p for p in self.players if p.id == player_id), None)

    def match(self, match_id: str) -> Optional[Match]:
        return next((m for m in self.matches if m.id == match_id), None)
