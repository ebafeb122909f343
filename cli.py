#!/usr/bin/env python3
"""
CLI for running CricTourney simulations
"""
import itertools
import logging
import random
from collections import defaultdict

import click
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.progress import track

from crictourney.config import settings
from crictourney.database import init_db, SessionLocal
from crictourney.engine import MatchLifecycleManager, AuctionEngine
from crictourney.engine.auction import POOL_SURPLUS_PER_TEAM
from crictourney.engine.state import Match, MatchStatus, TournamentData, TournamentStatus
from crictourney.generators import TeamGenerator, PlayerGenerator
from crictourney.repository import InMemoryTournamentRepository, SqlTournamentRepository

console = Console()


def _repository(save: bool):
    if save:
        init_db()
        return SqlTournamentRepository(SessionLocal)
    return InMemoryTournamentRepository()


def _setup(name: str, teams: int, overs: int, seed, save: bool = False):
    """Create a demo tournament and a lifecycle session for it"""
    rng = random.Random(seed)
    repository = _repository(save)
    team_list, players = TeamGenerator.create_teams(teams, rng=rng)
    tournament = repository.create_tournament(name, team_list, players, overs=overs)
    manager = MatchLifecycleManager(repository, rng=rng)
    manager.initialize_match_state(tournament.id)
    return tournament, manager


def _play(manager: MatchLifecycleManager, tournament_id: str, team1_id: str, team2_id: str) -> Match:
    """Schedule, start and bowl out a whole match"""
    match = manager.create_match(tournament_id, team1_id, team2_id)
    return _play_fixture(manager, tournament_id, match.id)


def _play_fixture(manager: MatchLifecycleManager, tournament_id: str, match_id: str) -> Match:
    match = manager.start_match(tournament_id, match_id)
    while not match.is_completed:
        match = manager.simulate_ball()
    return match


@click.group()
@click.option("--log-level", default=settings.LOG_LEVEL, help="Logging level")
def cli(log_level: str):
    """CricTourney - Fantasy Cricket Tournament Simulation"""
    logging.basicConfig(level=log_level.upper())


@cli.command()
def init():
    """Initialize the database"""
    console.print("[yellow]Initializing database...[/yellow]")
    init_db()
    console.print("[green]Database initialized successfully![/green]")


@cli.command()
@click.option("--overs", default=settings.DEFAULT_OVERS, help="Overs per innings")
@click.option("--seed", default=None, type=int, help="Random seed for a reproducible match")
@click.option("--commentary", "commentary_lines", default=15, help="Commentary lines to show")
def simulate(overs: int, seed, commentary_lines: int):
    """Simulate a single match between two demo teams"""
    tournament, manager = _setup("Exhibition", 2, overs, seed)
    team1, team2 = tournament.teams

    console.print(Panel(f"[bold cyan]{team1.name}[/bold cyan] vs [bold magenta]{team2.name}[/bold magenta]"))
    match = _play(manager, tournament.id, team1.id, team2.id)
    tournament = manager.repository.get_tournament(tournament.id)

    console.print(Panel("[bold]Match Result[/bold]"))
    for side in (match.team1, match.team2):
        console.print(
            f"[cyan]{side.name}:[/cyan] {side.score}/{side.wickets} "
            f"({side.overs_display} overs) - RR: {side.run_rate}"
        )
    console.print(f"\n[bold green]{match.result_summary}[/bold green]")

    for side in (match.team1, match.team2):
        console.print(f"\n[bold]{side.name} Innings:[/bold]")
        _print_scorecard(match, side.id, tournament)

    console.print("\n[bold]Commentary (last lines):[/bold]")
    for entry in match.commentary[-commentary_lines:]:
        console.print(f"  [dim]{entry.ball:>5}[/dim] {entry.text}")


def _print_scorecard(match: Match, batting_team_id: str, tournament: TournamentData):
    """Print one innings: the batting side's batters, the other side's bowlers"""
    names = {p.id: p.name for p in tournament.players}

    bat_table = Table(title="Batting")
    bat_table.add_column("Batter", style="cyan")
    bat_table.add_column("Dismissal")
    bat_table.add_column("R", justify="right")
    bat_table.add_column("B", justify="right")
    bat_table.add_column("4s", justify="right")
    bat_table.add_column("6s", justify="right")
    bat_table.add_column("SR", justify="right")

    for entry in match.batting_scorecard:
        if entry.team_id != batting_team_id:
            continue
        bat_table.add_row(
            names.get(entry.player_id, entry.player_id),
            entry.dismissal if entry.is_out else "not out",
            str(entry.runs),
            str(entry.balls),
            str(entry.fours),
            str(entry.sixes),
            f"{entry.strike_rate:.1f}",
        )
    console.print(bat_table)

    bowl_table = Table(title="Bowling")
    bowl_table.add_column("Bowler", style="magenta")
    bowl_table.add_column("O", justify="right")
    bowl_table.add_column("R", justify="right")
    bowl_table.add_column("W", justify="right")
    bowl_table.add_column("Econ", justify="right")

    for spell in match.bowling_scorecard:
        if spell.team_id == batting_team_id:
            continue
        bowl_table.add_row(
            names.get(spell.player_id, spell.player_id),
            spell.overs_display,
            str(spell.runs),
            str(spell.wickets),
            f"{spell.economy:.1f}",
        )
    console.print(bowl_table)


@cli.command()
@click.option("--teams", default=4, help="Number of franchise teams (2-8)")
@click.option("--overs", default=settings.DEFAULT_OVERS, help="Overs per innings")
@click.option("--seed", default=None, type=int, help="Random seed for a reproducible season")
@click.option("--save", is_flag=True, help="Store the tournament in the database")
@click.option("--playoffs", is_flag=True, help="Play the knockouts after the league")
def season(teams: int, overs: int, seed, save: bool, playoffs: bool):
    """Play a single round-robin and show the standings"""
    tournament, manager = _setup("Demo Premier League", teams, overs, seed, save=save)
    fixtures = list(itertools.combinations(tournament.teams, 2))

    for team1, team2 in track(fixtures, description="Playing fixtures..."):
        _play(manager, tournament.id, team1.id, team2.id)

    table = Table(title=f"{tournament.name} - Points Table")
    table.add_column("#", justify="right")
    table.add_column("Team", style="cyan")
    table.add_column("P", justify="right")
    table.add_column("W", justify="right")
    table.add_column("L", justify="right")
    table.add_column("T", justify="right")
    table.add_column("Pts", justify="right", style="green")
    table.add_column("NRR", justify="right")

    for standing in manager.standings():
        row = standing.row
        table.add_row(
            str(standing.position),
            row.team_name,
            str(row.played),
            str(row.won),
            str(row.lost),
            str(row.tied),
            str(row.points),
            f"{row.net_run_rate:+.3f}",
        )
    console.print(table)

    stats = manager.performance_stats
    leaderboards = [
        ("Most Runs", stats.most_runs, lambda s: str(s.runs)),
        ("Most Wickets", stats.most_wickets, lambda s: str(s.wickets)),
        ("Best Economy", stats.best_economy, lambda s: f"{s.economy:.2f}"),
        ("Highest Strike Rate", stats.highest_strike_rate, lambda s: f"{s.strike_rate:.1f}"),
    ]
    for title, entries, value in leaderboards:
        board = Table(title=title)
        board.add_column("Player", style="cyan")
        board.add_column("Team")
        board.add_column("M", justify="right")
        board.add_column("Value", justify="right", style="green")
        for stat in entries[:5]:
            board.add_row(stat.player_name, stat.team_name, str(stat.matches), value(stat))
        console.print(board)

    if playoffs:
        _play_knockouts(manager, tournament.id)

    if save:
        console.print(f"[green]Tournament saved with id {tournament.id}[/green]")


def _play_knockouts(manager: MatchLifecycleManager, tournament_id: str):
    """Play knockout fixtures as they are scheduled until the final is decided"""
    manager.generate_playoffs(tournament_id)
    names = {t.id: t.name for t in manager.repository.get_tournament(tournament_id).teams}

    console.print(Panel("[bold]Playoffs[/bold]"))
    while True:
        tournament = manager.repository.get_tournament(tournament_id)
        scheduled = [m for m in tournament.matches if m.status == MatchStatus.SCHEDULED]
        if not scheduled:
            break
        match = _play_fixture(manager, tournament_id, scheduled[0].id)
        title = match.match_type.replace("_", " ").title()
        console.print(f"[cyan]{title}:[/cyan] {match.team1.name} vs {match.team2.name} - {match.result_summary}")

    tournament = manager.repository.get_tournament(tournament_id)
    if tournament.status == TournamentStatus.COMPLETED:
        console.print(f"\n[bold green]Champions: {names[tournament.champion_id]}[/bold green]")
        console.print(f"[green]Runners-up: {names[tournament.runner_up_id]}[/green]")


@cli.command()
@click.option("--teams", default=4, help="Number of franchise teams (2-8)")
@click.option("--budget", default=settings.AUCTION_BUDGET, help="Budget per team")
@click.option("--squad-size", default=settings.SQUAD_SIZE, help="Players each team may buy")
@click.option("--pool", "pool_size", default=None, type=int, help="Players up for auction (default: a few spare per team)")
@click.option("--seed", default=None, type=int, help="Random seed for a reproducible auction")
def auction(teams: int, budget: int, squad_size: int, pool_size, seed):
    """Auction a generated player pool to the franchises"""
    rng = random.Random(seed)
    repository = InMemoryTournamentRepository()
    team_list, _ = TeamGenerator.create_teams(teams, rng=rng, with_squads=False)
    pool = PlayerGenerator.generate_player_pool(pool_size or teams * (squad_size + POOL_SURPLUS_PER_TEAM), rng=rng)
    tournament = repository.create_tournament(
        "Auction League", team_list, pool, status=TournamentStatus.SETUP,
    )

    engine = AuctionEngine(repository, rng=rng)
    engine.initialize_auction(tournament.id, budget=budget, squad_size=squad_size)
    engine.start_auction(tournament.id)
    console.print(f"[yellow]Auctioning {len(pool)} players to {teams} teams...[/yellow]")
    results = engine.auto_complete(tournament.id)

    names = {p.id: p for p in pool}
    team_names = {t.id: t.name for t in team_list}

    sales = Table(title="Top Buys")
    sales.add_column("Player", style="cyan")
    sales.add_column("Role")
    sales.add_column("Team")
    sales.add_column("Price", justify="right", style="green")
    for result in sorted((r for r in results if r.is_sold), key=lambda r: -r.price)[:10]:
        player = names[result.player_id]
        sales.add_row(player.name, player.role, team_names[result.team_id], f"{result.price:,}")
    console.print(sales)

    purses = Table(title="Purses")
    purses.add_column("Team", style="cyan")
    purses.add_column("Players", justify="right")
    purses.add_column("Spent", justify="right")
    purses.add_column("Remaining", justify="right", style="green")
    for purse in engine.get_auction(tournament.id).purses:
        purses.add_row(team_names[purse.team_id], str(len(purse.players)), f"{purse.spent:,}", f"{purse.remaining:,}")
    console.print(purses)

    unsold = sum(1 for r in results if not r.is_sold)
    console.print(f"[cyan]Sold:[/cyan] {len(results) - unsold}  [cyan]Unsold:[/cyan] {unsold}")


@cli.command()
@click.option("--matches", default=100, help="Number of matches to simulate")
@click.option("--overs", default=settings.DEFAULT_OVERS, help="Overs per innings")
@click.option("--seed", default=None, type=int, help="Random seed")
def benchmark(matches: int, overs: int, seed):
    """Run many matches and summarise the score distribution"""
    tournament, manager = _setup("Benchmark", 2, overs, seed)
    team1, team2 = tournament.teams
    stats = defaultdict(list)

    console.print(f"[yellow]Running {matches} simulations...[/yellow]")

    for _ in track(range(matches), description="Simulating..."):
        match = _play(manager, tournament.id, team1.id, team2.id)
        # Sides stay swapped after the first innings, so the chasers are still batting
        first, second = match.bowling_side, match.batting_side
        stats["scores"].extend([first.score, second.score])
        stats["wickets"].extend([first.wickets, second.wickets])
        stats["chasing_wins"].append(1 if match.winner_id == second.id else 0)

    console.print(Panel("[bold]Simulation Statistics[/bold]"))

    all_scores = stats["scores"]
    console.print(f"[cyan]Average Score:[/cyan] {sum(all_scores) / len(all_scores):.1f}")
    console.print(f"[cyan]Min Score:[/cyan] {min(all_scores)}")
    console.print(f"[cyan]Max Score:[/cyan] {max(all_scores)}")
    console.print(f"[cyan]Average Wickets:[/cyan] {sum(stats['wickets']) / len(stats['wickets']):.1f}")

    chase_win_pct = sum(stats["chasing_wins"]) / len(stats["chasing_wins"]) * 100
    console.print(f"[cyan]Chasing Win %:[/cyan] {chase_win_pct:.1f}%")


if __name__ == "__main__":
    cli()
