#!/usr/bin/env python3
"""
Analyze innings length and score distribution under the fixed outcome table.
"""
import sys
import random
from statistics import mean
from collections import Counter

from crictourney.engine import MatchLifecycleManager
from crictourney.generators import TeamGenerator
from crictourney.repository import InMemoryTournamentRepository


def play_matches(num_matches: int, overs: int, seed=None) -> list[dict]:
    """Play num_matches between two demo teams and collect per-innings rows"""
    rng = random.Random(seed)
    repository = InMemoryTournamentRepository()
    teams, players = TeamGenerator.create_teams(2, rng=rng)
    tournament = repository.create_tournament("Analysis", teams, players, overs=overs)
    manager = MatchLifecycleManager(repository, rng=rng)
    manager.initialize_match_state(tournament.id)

    innings_data = []
    for i in range(num_matches):
        match = manager.create_match(tournament.id, teams[0].id, teams[1].id)
        match = manager.start_match(tournament.id, match.id)
        while not match.is_completed:
            match = manager.simulate_ball()

        # The chasing side is still batting when the match ends
        for innings_num, side in enumerate([match.bowling_side, match.batting_side], 1):
            innings_data.append({
                "match": i + 1,
                "innings": innings_num,
                "runs": side.score,
                "wickets": side.wickets,
                "extras": side.extras,
                "overs": side.overs,
                "all_out": side.wickets == 10,
                "full_overs": side.balls >= overs * 6,
            })

        if (i + 1) % 20 == 0:
            print(f"Completed {i + 1} matches...")

    return innings_data


def run_analysis(num_matches: int = 100, overs: int = 20):
    innings_data = play_matches(num_matches, overs)

    print("\n" + "="*70)
    print("INNINGS LENGTH ANALYSIS")
    print("="*70)

    total_innings = len(innings_data)
    first_innings = [i for i in innings_data if i["innings"] == 1]
    second_innings = [i for i in innings_data if i["innings"] == 2]

    full_count = sum(1 for i in innings_data if i["full_overs"])
    all_out_count = sum(1 for i in innings_data if i["all_out"])

    print(f"\nTotal innings analyzed: {total_innings}")
    print(f"Innings going full {overs} overs: {full_count} ({full_count/total_innings*100:.1f}%)")
    print(f"Innings all out: {all_out_count} ({all_out_count/total_innings*100:.1f}%)")

    for label, rows in [("1ST INNINGS", first_innings), ("2ND INNINGS", second_innings)]:
        print(f"\n{label}:")
        print(f"  Full overs: {sum(1 for i in rows if i['full_overs'])/len(rows)*100:.1f}%")
        print(f"  All out: {sum(1 for i in rows if i['all_out'])/len(rows)*100:.1f}%")
        print(f"  Avg overs: {mean([i['overs'] for i in rows]):.1f}")
        print(f"  Avg wickets: {mean([i['wickets'] for i in rows]):.1f}")
        print(f"  Avg score: {mean([i['runs'] for i in rows]):.1f}")
        print(f"  Avg extras: {mean([i['extras'] for i in rows]):.1f}")

    chase_won_early = sum(1 for i in second_innings if not i["all_out"] and not i["full_overs"])
    print(f"\nChases won before the last ball: {chase_won_early} ({chase_won_early/len(second_innings)*100:.1f}%)")

    print("\n" + "-"*70)
    print("1ST INNINGS WICKETS DISTRIBUTION:")
    print("-"*70)

    wicket_counts = Counter(i["wickets"] for i in first_innings)
    for w in range(11):
        count = wicket_counts.get(w, 0)
        pct = count / len(first_innings) * 100
        bar = "#" * int(pct / 2)
        label = f"{w} wickets" if w < 10 else "10 (all out)"
        print(f"  {label:12}: {count:3} ({pct:5.1f}%) {bar}")

    print("\n" + "-"*70)
    print("1ST INNINGS SCORE DISTRIBUTION:")
    print("-"*70)

    brackets = Counter()
    for i in first_innings:
        low = (i["runs"] // 30) * 30
        brackets[f"{low}-{low + 29}"] += 1
    for bracket in sorted(brackets, key=lambda b: int(b.split("-")[0])):
        count = brackets[bracket]
        pct = count / len(first_innings) * 100
        print(f"  {bracket:>9}: {count:3} ({pct:5.1f}%) {'#' * int(pct / 2)}")

    return innings_data


if __name__ == "__main__":
    num = int(sys.argv[1]) if len(sys.argv) > 1 else 100
    overs = int(sys.argv[2]) if len(sys.argv) > 2 else 20
    run_analysis(num, overs)
