"""
Auction Engine - sells the tournament's player pool to the teams

Lots go under the hammer in auction order. Teams bid in increments until
the lot is closed: the highest bidder buys the player, a lot without bids
goes unsold. When the last lot closes the purchased players become the
team squads and the tournament is ready for fixtures.
"""
import copy
import logging
import math
import random
import threading
from dataclasses import dataclass
from typing import Dict, List, Optional

from crictourney.config import settings
from crictourney.engine.errors import NotFoundError, IllegalStateError
from crictourney.engine.state import (
    AuctionState, AuctionStatus, AuctionLot, LotStatus, Bid, TeamPurse, TeamInfo,
    TournamentData, TournamentStatus, generate_id,
)

logger = logging.getLogger(__name__)

BASE_PRICE_RATE = 0.05     # default reserve: 5% of the team budget
BID_INCREMENT_RATE = 0.04  # each raise is at least 4% of the current bid

# Batting order of a bought squad: bowlers last, they make up the bowling rotation
ROLE_ORDER = {"batsman": 0, "wicket_keeper": 1, "all_rounder": 2, "bowler": 3}

# Target squad composition used by the automatic bidders
IDEAL_COMPOSITION = {"batsman": 4, "wicket_keeper": 1, "all_rounder": 2, "bowler": 4}

# Spare players per team in a generated pool, so the last lots still see competition
POOL_SURPLUS_PER_TEAM = 4


@dataclass
class LotResult:
    """Outcome of one closed lot"""
    player_id: str
    is_sold: bool
    team_id: Optional[str] = None
    price: int = 0


def calculate_base_price(budget: int) -> int:
    return max(1, round(budget * BASE_PRICE_RATE))


def next_bid_amount(current_bid: int) -> int:
    """Smallest valid raise over the current bid"""
    return current_bid + max(1, math.ceil(current_bid * BID_INCREMENT_RATE))


def max_bid_possible(state: AuctionState, purse: TeamPurse) -> int:
    """
    Most a team can bid while still being able to fill its squad.
    Every slot left after this one keeps the default base price in reserve.
    """
    slots_left = state.squad_size - len(purse.players)
    if slots_left <= 0:
        return 0
    reserved = (slots_left - 1) * calculate_base_price(state.budget)
    return max(0, purse.remaining - reserved)


class AuctionEngine:
    """
    Runs the auction of one tournament.

    Every operation reads the auction from the repository, applies the
    change and writes it back, so the stored auction is always current.
    """

    def __init__(self, repository, rng: Optional[random.Random] = None):
        self.repository = repository
        self.rng = rng or random.Random()
        self._lock = threading.Lock()

    # ==================== Setup ====================

    def initialize_auction(
        self, tournament_id: str, budget: Optional[int] = None, squad_size: Optional[int] = None,
    ) -> AuctionState:
        """Put every unattached player up for auction and give each team its purse"""
        with self._lock:
            tournament = self.repository.get_tournament(tournament_id)
            if tournament.status != TournamentStatus.SETUP:
                raise IllegalStateError(f"Tournament {tournament.id} is {tournament.status.value}, not in setup")

            budget = budget or settings.AUCTION_BUDGET
            squad_size = squad_size or settings.SQUAD_SIZE
            pool = [p for p in tournament.players if p.team_id is None]
            if not pool:
                raise ValueError("No players available for auction")

            default_price = calculate_base_price(budget)
            # Most expensive players first; ties keep pool order
            ordered = sorted(pool, key=lambda p: -(p.base_price or default_price))
            state = AuctionState(
                id=generate_id(),
                budget=budget,
                squad_size=squad_size,
                lots=[AuctionLot(player_id=p.id, base_price=p.base_price or default_price) for p in ordered],
                purses=[TeamPurse(team_id=t.id, budget=budget, remaining=budget) for t in tournament.teams],
            )
            self.repository.update_tournament(
                tournament.id, {"auction": state, "status": TournamentStatus.AUCTION},
            )

        logger.info(
            "Auction %s set up for tournament %s: %d players, %d teams, budget %d",
            state.id, tournament.id, len(state.lots), len(state.purses), budget,
        )
        return copy.deepcopy(state)

    def get_auction(self, tournament_id: str) -> AuctionState:
        tournament = self.repository.get_tournament(tournament_id)
        if tournament.auction is None:
            raise NotFoundError(f"Tournament {tournament_id} has no auction")
        return tournament.auction

    def start_auction(self, tournament_id: str) -> AuctionState:
        with self._lock:
            tournament, state = self._load(tournament_id)
            if state.status != AuctionStatus.WAITING:
                raise IllegalStateError("Auction already started or completed")

            state.status = AuctionStatus.ACTIVE
            self._open_lot(state, 0)
            self._save(tournament, state)

        logger.info("Auction %s started", state.id)
        return copy.deepcopy(state)

    # ==================== Bidding ====================

    def place_bid(self, tournament_id: str, team_id: str, amount: Optional[int] = None) -> AuctionState:
        """Raise the bid on the current lot. Without an amount the minimum raise is bid."""
        with self._lock:
            tournament, state = self._load(tournament_id)
            lot = self._require_lot(state)
            self._record_bid(state, lot, team_id, amount)
            self._save(tournament, state)
        return copy.deepcopy(state)

    def _record_bid(self, state: AuctionState, lot: AuctionLot, team_id: str, amount: Optional[int]) -> Bid:
        purse = state.purse(team_id)
        if purse is None:
            raise NotFoundError(f"Team {team_id} is not in the auction")
        if lot.current_bidder_id == team_id:
            raise ValueError("Team already holds the highest bid")
        if len(purse.players) >= state.squad_size:
            raise ValueError("Squad is already full")

        amount = amount if amount is not None else next_bid_amount(lot.current_bid)
        if amount <= lot.current_bid:
            raise ValueError("Bid must be higher than current bid")
        if amount > max_bid_possible(state, purse):
            raise ValueError("Insufficient budget")

        bid = Bid(team_id=team_id, amount=amount)
        lot.bids.append(bid)
        lot.current_bid = amount
        lot.current_bidder_id = team_id
        return bid

    def simulate_bidding(self, tournament_id: str) -> List[Bid]:
        """
        Let the teams bid on the current lot until two rounds pass without a bid.
        Each team values the player once, then raises while the price is below it.
        """
        with self._lock:
            tournament, state = self._load(tournament_id)
            lot = self._require_lot(state)
            player = tournament.player(lot.player_id)
            role = player.role if player else "batsman"
            valuations = {p.team_id: self._value_player(state, tournament, p, role, lot) for p in state.purses}

            bids = []
            passes = 0
            for _ in range(100):
                bidder = self._pick_bidder(state, lot, valuations)
                if bidder is None:
                    passes += 1
                    if passes >= 2:
                        break
                    continue
                passes = 0
                bids.append(self._record_bid(state, lot, bidder, None))

            self._save(tournament, state)
        return bids

    def _value_player(
        self, state: AuctionState, tournament: TournamentData, purse: TeamPurse, role: str, lot: AuctionLot,
    ) -> int:
        """Most this team will pay for the player, based on squad needs"""
        owned = [tournament.player(pid) for pid in purse.players]
        have = sum(1 for p in owned if p is not None and p.role == role)
        need_multiplier = 1.6 if have < IDEAL_COMPOSITION.get(role, 0) else 0.9

        # Bid harder as the auction runs out of players to fill the squad
        slots_left = state.squad_size - len(purse.players)
        lots_left = max(1, len(state.lots) - state.current_index)
        urgency = min(1.0, slots_left / lots_left)

        variance = self.rng.uniform(0.85, 1.15)
        return int(lot.base_price * need_multiplier * (1.0 + urgency) * variance)

    def _pick_bidder(self, state: AuctionState, lot: AuctionLot, valuations: Dict[str, int]) -> Optional[str]:
        next_bid = next_bid_amount(lot.current_bid)
        interested = []
        for purse in state.purses:
            if purse.team_id == lot.current_bidder_id:
                continue
            if len(purse.players) >= state.squad_size or next_bid > max_bid_possible(state, purse):
                continue
            value = valuations[purse.team_id]
            if next_bid > value:
                continue
            # Keener while the price is well below the team's valuation
            probability = max(0.1, 1.0 - (next_bid / value) * 0.8)
            if self.rng.random() < probability:
                interested.append(purse.team_id)

        if not interested:
            return None
        return self.rng.choice(interested)

    # ==================== Closing lots ====================

    def complete_player_auction(self, tournament_id: str) -> LotResult:
        """Close the current lot: sold to the highest bidder, unsold without bids"""
        with self._lock:
            tournament, state = self._load(tournament_id)
            lot = self._require_lot(state)

            if lot.current_bidder_id is not None:
                purse = state.purse(lot.current_bidder_id)
                purse.remaining -= lot.current_bid
                purse.players.append(lot.player_id)
                lot.status = LotStatus.SOLD
                lot.sold_to = purse.team_id
                lot.sold_price = lot.current_bid
                result = LotResult(player_id=lot.player_id, is_sold=True, team_id=purse.team_id, price=lot.current_bid)
            else:
                lot.status = LotStatus.UNSOLD
                lot.current_bid = 0
                result = LotResult(player_id=lot.player_id, is_sold=False)

            if state.current_index + 1 < len(state.lots):
                self._open_lot(state, state.current_index + 1)
                self._save(tournament, state)
            else:
                state.current_index = len(state.lots)
                state.status = AuctionStatus.COMPLETED
                self._complete_auction(tournament, state)

        if result.is_sold:
            logger.info("Player %s sold to %s for %d", result.player_id, result.team_id, result.price)
        else:
            logger.info("Player %s unsold", result.player_id)
        return result

    def auto_complete(self, tournament_id: str) -> List[LotResult]:
        """Run automatic bidding on every remaining lot"""
        results = []
        while self.get_auction(tournament_id).status == AuctionStatus.ACTIVE:
            self.simulate_bidding(tournament_id)
            results.append(self.complete_player_auction(tournament_id))
        return results

    def _complete_auction(self, tournament: TournamentData, state: AuctionState) -> None:
        """Bought players become the team squads; the tournament moves on to fixtures"""
        players = {p.id: p for p in tournament.players}
        teams: List[TeamInfo] = []
        for team in tournament.teams:
            purse = state.purse(team.id)
            bought = [players[pid] for pid in purse.players] if purse else []
            for player in bought:
                player.team_id = team.id
            bought.sort(key=lambda p: ROLE_ORDER.get(p.role, 0))
            team.players = list(team.players) + [p.id for p in bought]
            teams.append(team)

        self.repository.update_tournament(tournament.id, {
            "auction": state,
            "teams": teams,
            "players": list(players.values()),
            "status": TournamentStatus.ACTIVE,
        })
        logger.info(
            "Auction %s completed: %d sold, %d unsold",
            state.id,
            sum(1 for lot in state.lots if lot.status == LotStatus.SOLD),
            sum(1 for lot in state.lots if lot.status == LotStatus.UNSOLD),
        )

    # ==================== Helpers ====================

    def _load(self, tournament_id: str):
        tournament = self.repository.get_tournament(tournament_id)
        if tournament.auction is None:
            raise NotFoundError(f"Tournament {tournament_id} has no auction")
        return tournament, tournament.auction

    def _save(self, tournament: TournamentData, state: AuctionState) -> None:
        self.repository.update_tournament(tournament.id, {"auction": state})

    @staticmethod
    def _require_lot(state: AuctionState) -> AuctionLot:
        lot = state.current_lot
        if lot is None:
            raise IllegalStateError(f"Auction is {state.status.value}, no player under the hammer")
        return lot

    @staticmethod
    def _open_lot(state: AuctionState, index: int) -> None:
        state.current_index = index
        lot = state.lots[index]
        lot.status = LotStatus.IN_BIDDING
        lot.current_bid = lot.base_price
        lot.current_bidder_id = None
