"""
Shared fixtures: constant-rated players and teams, scripted and seeded random sources.
"""

import numpy as np
import pytest

from classes import POSITIONS, Player, PlayerInGame, PlayerPool, Roster, TeamInGame


class ScriptedRandom:
    """Random source that replays a fixed list of draws."""

    def __init__(self, values):
        self.values = list(values)
        self.calls = 0

    def random(self):
        if not self.values:
            raise AssertionError(f"Scripted draws exhausted after {self.calls} calls")
        self.calls += 1
        return self.values.pop(0)


def build_player(name, position, **overrides):
    """Player with every rating at 50, usage 20, equal shot tendencies."""
    params = dict(
        name=name,
        position=position,
        playmaking=30.0,  # 30 - 1.5 * 20 = 0: never passes
        usage_rate=20.0,
        field_goal_pct=50.0,
        target_minutes=0.0,
        foul_tendency=3.0,
    )
    params.update(overrides)
    return Player(**params)


def build_team_state(prefix, **overrides):
    on_court = [PlayerInGame(build_player(f"{prefix} {pos}", pos, **overrides)) for pos in POSITIONS]
    bench = [PlayerInGame(build_player(f"{prefix} {pos} Reserve", pos, **overrides)) for pos in POSITIONS]
    return TeamInGame(prefix, on_court, bench)


@pytest.fixture
def scripted_rng():
    return ScriptedRandom


@pytest.fixture
def make_player():
    return build_player


@pytest.fixture
def make_team():
    return build_team_state


@pytest.fixture
def home_team():
    return build_team_state("Home")


@pytest.fixture
def away_team():
    return build_team_state("Away")


@pytest.fixture
def seeded_rng():
    return np.random.default_rng(2026)


@pytest.fixture
def uniform_pool():
    players = []
    for prefix in ("Home", "Away"):
        for pos in POSITIONS:
            players.append(build_player(f"{prefix} {pos}", pos))
            players.append(build_player(f"{prefix} {pos} Reserve", pos))
    return PlayerPool(players)


@pytest.fixture
def uniform_rosters():
    def roster(prefix):
        return Roster(
            starters={pos: f"{prefix} {pos}" for pos in POSITIONS},
            bench={pos: f"{prefix} {pos} Reserve" for pos in POSITIONS},
        )
    return roster("Home"), roster("Away")
