"""
Tests for points table and leaderboard aggregation.
"""
from crictourney.engine.state import (
    Match, MatchSide, MatchStatus, TeamInfo, PlayerInfo, BattingEntry, BowlingEntry,
)
from crictourney.engine.statistics import (
    generate_points_table, generate_performance_stats, net_run_rate, sort_standings,
    LEADERBOARD_SIZE,
)

TEAMS = [
    TeamInfo(id="a", name="Alpha", color="#111111", players=["a1", "a2"]),
    TeamInfo(id="b", name="Bravo", color="#222222", players=["b1", "b2"]),
    TeamInfo(id="c", name="Charlie", color="#333333", players=["c1", "c2"]),
]

PLAYERS = [
    PlayerInfo(id=pid, name=f"Player {pid}", team_id=pid[0])
    for pid in ["a1", "a2", "b1", "b2", "c1", "c2"]
]


def create_result(
    team1: str, score1: int, balls1: int, team2: str, score2: int, balls2: int,
    winner_id=None, is_tied=False, status=MatchStatus.COMPLETED, match_id="m",
) -> Match:
    match = Match(
        id=match_id,
        tournament_id="t1",
        team1=MatchSide(id=team1, name=team1, score=score1, balls=balls1, overs=balls1 / 6),
        team2=MatchSide(id=team2, name=team2, score=score2, balls=balls2, overs=balls2 / 6),
    )
    match.status = status
    match.winner_id = winner_id
    match.is_tied = is_tied
    return match


class TestNetRunRate:

    def test_difference_of_rates(self):
        assert net_run_rate(150, 120, 140, 120) == 0.5

    def test_rounded_to_three_places(self):
        assert net_run_rate(100, 70, 90, 66) == round(100 / (70 / 6) - 90 / 11, 3)

    def test_zero_without_balls(self):
        assert net_run_rate(10, 0, 5, 6) == 0.0
        assert net_run_rate(10, 6, 5, 0) == 0.0


class TestPointsTable:

    def test_empty_table_has_a_row_per_team(self):
        table = generate_points_table(TEAMS, [])
        assert set(table) == {"a", "b", "c"}
        assert all(row.played == 0 and row.points == 0 for row in table.values())

    def test_win_and_loss(self):
        table = generate_points_table(TEAMS, [create_result("a", 150, 120, "b", 140, 120, winner_id="a")])
        assert (table["a"].played, table["a"].won, table["a"].points) == (1, 1, 2)
        assert (table["b"].played, table["b"].lost, table["b"].points) == (1, 1, 0)
        assert table["a"].net_run_rate == 0.5
        assert table["b"].net_run_rate == -0.5
        assert table["a"].runs_conceded == 140
        assert table["b"].balls_bowled == 120
        assert table["c"].played == 0

    def test_tie_awards_a_point_each(self):
        table = generate_points_table(TEAMS, [create_result("a", 150, 120, "b", 150, 120, is_tied=True)])
        assert (table["a"].tied, table["a"].points) == (1, 1)
        assert (table["b"].tied, table["b"].points) == (1, 1)
        assert table["a"].no_result == 0

    def test_no_winner_and_no_tie_is_a_no_result(self):
        table = generate_points_table(TEAMS, [create_result("a", 20, 18, "b", 0, 0)])
        assert (table["a"].no_result, table["a"].points, table["a"].tied) == (1, 1, 0)
        assert (table["b"].no_result, table["b"].points) == (1, 1)
        assert table["a"].net_run_rate == 0.0

    def test_unfinished_matches_ignored(self):
        live = create_result("a", 50, 30, "b", 0, 0, status=MatchStatus.LIVE)
        table = generate_points_table(TEAMS, [live])
        assert table["a"].played == 0

    def test_recomputation_is_deterministic(self):
        matches = [
            create_result("a", 150, 120, "b", 140, 120, winner_id="a", match_id="m1"),
            create_result("b", 170, 120, "c", 171, 110, winner_id="c", match_id="m2"),
        ]
        assert generate_points_table(TEAMS, matches) == generate_points_table(TEAMS, matches)

    def test_malformed_record_is_skipped(self):
        good = create_result("a", 150, 120, "b", 140, 120, winner_id="a", match_id="m1")
        unknown_team = create_result("a", 150, 120, "z", 140, 120, winner_id="a", match_id="m2")
        broken = create_result("b", 150, 120, "c", 140, 120, winner_id="b", match_id="m3")
        broken.team2 = None

        table = generate_points_table(TEAMS, [good, unknown_team, broken])

        assert table["a"].played == 1
        assert table["b"].played == 1
        assert table["c"].played == 0

    def test_standings_sorted_by_points_then_nrr(self):
        matches = [
            create_result("a", 150, 120, "b", 140, 120, winner_id="a", match_id="m1"),
            create_result("c", 200, 120, "b", 100, 120, winner_id="c", match_id="m2"),
        ]
        standings = sort_standings(generate_points_table(TEAMS, matches))
        assert [s.row.team_id for s in standings] == ["c", "a", "b"]
        assert [s.position for s in standings] == [1, 2, 3]


def create_scorecard_match(match_id: str, batting: list, bowling: list) -> Match:
    match = create_result("a", 0, 0, "b", 0, 0, winner_id="a", match_id=match_id)
    match.batting_scorecard = [
        BattingEntry(player_id=pid, team_id=pid[0], runs=runs, balls=balls) for pid, runs, balls in batting
    ]
    match.bowling_scorecard = [
        BowlingEntry(player_id=pid, team_id=pid[0], balls=balls, runs=runs, wickets=wickets)
        for pid, balls, runs, wickets in bowling
    ]
    return match


class TestPerformanceStats:

    def test_folds_across_matches(self):
        matches = [
            create_scorecard_match("m1", [("a1", 40, 30)], [("b1", 24, 30, 2)]),
            create_scorecard_match("m2", [("a1", 35, 20)], [("b1", 12, 10, 1)]),
        ]
        stats = generate_performance_stats(TEAMS, PLAYERS, matches)

        top = stats.most_runs[0]
        assert top.player_id == "a1"
        assert top.runs == 75
        assert top.balls == 50
        assert top.strike_rate == 150.0
        assert top.matches == 2
        assert top.team_name == "Alpha"

        bowler = stats.most_wickets[0]
        assert bowler.player_id == "b1"
        assert bowler.wickets == 3
        assert bowler.overs == 6.0
        assert bowler.economy == round(40 / 6, 2)

    def test_qualification_filters(self):
        matches = [
            create_scorecard_match(
                "m1",
                [("a1", 49, 20), ("a2", 50, 40), ("b2", 0, 3)],
                [("b1", 23, 10, 0), ("c1", 24, 30, 0)],
            ),
        ]
        stats = generate_performance_stats(TEAMS, PLAYERS, matches)

        assert [s.player_id for s in stats.most_runs] == ["a2", "a1"]
        assert [s.player_id for s in stats.highest_strike_rate] == ["a2"]
        assert [s.player_id for s in stats.best_economy] == ["c1"]
        assert stats.most_wickets == []

    def test_economy_sorted_ascending(self):
        matches = [
            create_scorecard_match("m1", [], [("b1", 24, 40, 0), ("c1", 24, 20, 0), ("b2", 24, 30, 0)]),
        ]
        stats = generate_performance_stats(TEAMS, PLAYERS, matches)
        assert [s.player_id for s in stats.best_economy] == ["c1", "b2", "b1"]

    def test_batting_and_bowling_count_one_appearance(self):
        matches = [create_scorecard_match("m1", [("a1", 10, 8)], [("a1", 6, 5, 1)])]
        stats = generate_performance_stats(TEAMS, PLAYERS, matches)
        assert stats.most_runs[0].matches == 1

    def test_lists_capped_at_ten(self):
        players = [PlayerInfo(id=f"a{i}", name=f"A{i}", team_id="a") for i in range(15)]
        match = create_scorecard_match("m1", [(f"a{i}", i + 1, 10) for i in range(15)], [])
        stats = generate_performance_stats(TEAMS, players, [match])
        assert len(stats.most_runs) == LEADERBOARD_SIZE
        assert stats.most_runs[0].runs == 15

    def test_unknown_players_ignored(self):
        match = create_scorecard_match("m1", [("zz", 80, 40)], [])
        stats = generate_performance_stats(TEAMS, PLAYERS, [match])
        assert stats.most_runs == []

    def test_malformed_scorecard_skipped(self):
        bad = create_scorecard_match("m1", [("a1", 30, 10)], [])
        bad.batting_scorecard[0].runs = "thirty"
        good = create_scorecard_match("m2", [("a2", 20, 10)], [])

        stats = generate_performance_stats(TEAMS, PLAYERS, [bad, good])

        assert [s.player_id for s in stats.most_runs] == ["a2"]

    def test_deterministic(self):
        matches = [create_scorecard_match("m1", [("a1", 40, 30)], [("b1", 24, 30, 2)])]
        first = generate_performance_stats(TEAMS, PLAYERS, matches)
        second = generate_performance_stats(TEAMS, PLAYERS, matches)
        assert first.to_dict() == second.to_dict()
