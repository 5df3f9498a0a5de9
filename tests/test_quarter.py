"""
Tests for the quarter simulator and the end-of-quarter substitution policy.
"""

import numpy as np
import pytest

from classes import (
    POSSESSIONS_PER_QUARTER, MINUTES_PER_QUARTER, MAX_STAMINA, MIN_STAMINA,
    GameScore, PlayerInGame, QuarterScore, simulate_quarter,
)


def roster_names(team):
    return sorted(p.name for p in team.players())


def snapshot(teams):
    return [[(p.name, p.stats.points, p.stats.rebounds, p.stats.assists, p.stats.minutes,
              p.stats.personal_fouls, p.stamina) for p in t.players()] for t in teams]


class TestSimulateQuarter:
    """Invariants of a single simulated quarter"""

    def test_uniform_quarter_scenario(self, home_team, away_team, seeded_rng):
        outcome = simulate_quarter((home_team, away_team), GameScore(), 1, 0, seeded_rng)
        total = outcome.score.team1 + outcome.score.team2
        assert len(outcome.log.plays) == POSSESSIONS_PER_QUARTER
        assert 0 <= total <= POSSESSIONS_PER_QUARTER * 3
        assert outcome.log.quarter == 1

    def test_points_are_conserved(self, home_team, away_team, seeded_rng):
        outcome = simulate_quarter((home_team, away_team), GameScore(), 1, 0, seeded_rng)
        team1, team2 = outcome.teams
        assert sum(p.stats.points for p in team1.players()) == outcome.score.team1
        assert sum(p.stats.points for p in team2.players()) == outcome.score.team2

    def test_on_court_minutes_advance_by_one_quarter(self, home_team, away_team, seeded_rng):
        outcome = simulate_quarter((home_team, away_team), GameScore(), 1, 0, seeded_rng)
        for team in outcome.teams:
            # target_minutes is 0 in the fixtures, so nobody is subbed
            assert all(p.stats.minutes == MINUTES_PER_QUARTER for p in team.on_court)
            assert all(p.stats.minutes == 0 for p in team.bench)

    def test_roster_closure_and_stamina_bounds(self, make_team, seeded_rng):
        # high targets keep everyone eligible for substitution
        teams = (make_team("Home", target_minutes=48.0), make_team("Away", target_minutes=48.0))
        before = [roster_names(t) for t in teams]
        score = GameScore()
        lead = 0
        for quarter in range(1, 5):
            outcome = simulate_quarter(teams, score, quarter, lead, seeded_rng)
            teams, lead = outcome.teams, outcome.last_lead_team
            score = score.with_quarter(quarter, outcome.score)
            for team, names in zip(teams, before):
                assert len(team.on_court) == 5
                assert roster_names(team) == names
                assert len(set(map(id, team.players()))) == 10
                assert all(MIN_STAMINA <= p.stamina <= MAX_STAMINA for p in team.players())

    def test_inputs_are_not_mutated(self, home_team, away_team, seeded_rng):
        before = snapshot((home_team, away_team))
        outcome = simulate_quarter((home_team, away_team), GameScore(), 1, 0, seeded_rng)
        assert snapshot((home_team, away_team)) == before
        assert outcome.teams[0] is not home_team
        assert all(a is not b for a, b in zip(outcome.teams[0].players(), home_team.players()))

    def test_same_seed_same_quarter(self, make_team):
        def run():
            teams = (make_team("Home"), make_team("Away"))
            return simulate_quarter(teams, GameScore(), 1, 0, np.random.default_rng(7))

        first, second = run(), run()
        assert first.log == second.log
        assert first.score == second.score
        assert snapshot(first.teams) == snapshot(second.teams)

    def test_offense_alternates(self, home_team, away_team, seeded_rng):
        outcome = simulate_quarter((home_team, away_team), GameScore(), 1, 0, seeded_rng)
        for i, play in enumerate(outcome.log.plays):
            side = "Home" if i % 2 == 0 else "Away"
            shooter = play.split(": ", 1)[1]
            assert shooter.startswith(side)

    def test_lead_seeded_from_previous_quarters(self, home_team, away_team, seeded_rng):
        # team 2 gets 24 possessions: it cannot erase a 200-point deficit
        score = GameScore(q1=QuarterScore(200, 0))
        outcome = simulate_quarter((home_team, away_team), score, 2, 1, seeded_rng)
        assert outcome.log.lead_changes == 0
        assert outcome.last_lead_team == 1

    def test_quarter_number_validated(self, home_team, away_team, seeded_rng):
        with pytest.raises(ValueError, match="Quarter"):
            simulate_quarter((home_team, away_team), GameScore(), 5, 0, seeded_rng)

    def test_tired_starter_is_replaced(self, make_team, make_player, seeded_rng):
        home = make_team("Home")
        away = make_team("Away")
        home.on_court[4] = PlayerInGame(make_player("Home C", "C", target_minutes=48.0), stamina=60.0)
        outcome = simulate_quarter((home, away), GameScore(), 1, 0, seeded_rng)
        team = outcome.teams[0]
        assert team.on_court[4].name == "Home C Reserve"
        assert team.bench[4].name == "Home C"
        assert team.bench[4].stats.minutes == MINUTES_PER_QUARTER


class TestSubstitution:
    """End-of-quarter substitution policy on a team state"""

    def test_bench_recovery_capped(self, home_team):
        home_team.bench[0].stamina = 95.0
        home_team.bench[1].stamina = 50.0
        home_team.substitute()
        assert home_team.bench[0].stamina == MAX_STAMINA
        assert home_team.bench[1].stamina == 65.0

    def test_swap_keeps_slot_and_bench_index(self, make_team, make_player):
        team = make_team("Home")
        team.on_court[2] = PlayerInGame(make_player("Home SF", "SF", target_minutes=36.0), stamina=65.0)
        team.on_court[2].stats.minutes = 12
        swaps = team.substitute()
        assert [(t.name, f.name) for t, f in swaps] == [("Home SF", "Home SF Reserve")]
        assert team.on_court[2].name == "Home SF Reserve"
        assert team.bench[2].name == "Home SF"

    def test_no_swap_once_target_minutes_reached(self, make_team, make_player):
        team = make_team("Home")
        team.on_court[2] = PlayerInGame(make_player("Home SF", "SF", target_minutes=36.0), stamina=65.0)
        team.on_court[2].stats.minutes = 36
        assert team.substitute() == []
        assert team.on_court[2].name == "Home SF"

    def test_no_swap_at_threshold_stamina(self, make_team, make_player):
        team = make_team("Home")
        team.on_court[2] = PlayerInGame(make_player("Home SF", "SF", target_minutes=36.0), stamina=70.0)
        assert team.substitute() == []

    def test_fresh_player_needs_stamina_above_ninety(self, make_team, make_player):
        team = make_team("Home")
        team.on_court[2] = PlayerInGame(make_player("Home SF", "SF", target_minutes=36.0), stamina=50.0)
        team.bench[2].stamina = 75.0  # recovers to exactly 90
        assert team.substitute() == []
        team.bench[2].stamina = 76.0
        assert len(team.substitute()) == 1

    def test_replacement_must_share_position(self, make_team, make_player):
        team = make_team("Home")
        team.on_court[2] = PlayerInGame(make_player("Home SF", "SF", target_minutes=36.0), stamina=50.0)
        team.bench[2] = PlayerInGame(make_player("Home Swing PF", "PF"))
        assert team.substitute() == []

    def test_first_fresh_bench_player_checks_in(self, make_team, make_player):
        team = make_team("Home")
        team.on_court[0] = PlayerInGame(make_player("Home PG", "PG", target_minutes=36.0), stamina=40.0)
        team.bench[0].stamina = 60.0
        team.bench.append(PlayerInGame(make_player("Home PG Third", "PG")))
        team.bench.append(PlayerInGame(make_player("Home PG Fourth", "PG")))
        swaps = team.substitute()
        assert len(swaps) == 1
        assert team.on_court[0].name == "Home PG Third"
        assert team.bench[5].name == "Home PG"
        assert [p.name for p in team.bench].count("Home PG Fourth") == 1
