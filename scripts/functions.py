################
### PACKAGES ###
################

from classes import (
    Player, PlayerPool, Roster, GameResult, SeriesResult,
    POSITIONS, TIERS, random_index,
)
from dataclasses import fields
from typing import Dict, Iterable, List, Optional, Sequence
import csv
import os
import numpy as np
from faker import Faker

###############
### HELPERS ###
###############

# Rating means by position: attribute ratings, shot tendencies, usage, field goal pct
POSITION_PROFILES = {
    "PG": {
        "ratings": {"inside_scoring": 62, "mid_range": 72, "three_point": 76, "playmaking": 85,
                    "perimeter_defense": 72, "interior_defense": 45, "rebounding": 45,
                    "athleticism": 78, "basketball_iq": 80},
        "shots": (0.25, 0.35, 0.40), "usage": 27.0, "fg_pct": 46.0,
    },
    "SG": {
        "ratings": {"inside_scoring": 66, "mid_range": 78, "three_point": 80, "playmaking": 65,
                    "perimeter_defense": 72, "interior_defense": 48, "rebounding": 50,
                    "athleticism": 78, "basketball_iq": 74},
        "shots": (0.30, 0.35, 0.35), "usage": 28.0, "fg_pct": 46.0,
    },
    "SF": {
        "ratings": {"inside_scoring": 72, "mid_range": 74, "three_point": 72, "playmaking": 62,
                    "perimeter_defense": 72, "interior_defense": 60, "rebounding": 62,
                    "athleticism": 80, "basketball_iq": 74},
        "shots": (0.35, 0.35, 0.30), "usage": 25.0, "fg_pct": 48.0,
    },
    "PF": {
        "ratings": {"inside_scoring": 80, "mid_range": 66, "three_point": 58, "playmaking": 52,
                    "perimeter_defense": 60, "interior_defense": 75, "rebounding": 78,
                    "athleticism": 76, "basketball_iq": 70},
        "shots": (0.55, 0.30, 0.15), "usage": 23.0, "fg_pct": 51.0,
    },
    "C": {
        "ratings": {"inside_scoring": 86, "mid_range": 55, "three_point": 40, "playmaking": 45,
                    "perimeter_defense": 50, "interior_defense": 85, "rebounding": 88,
                    "athleticism": 72, "basketball_iq": 68},
        "shots": (0.75, 0.20, 0.05), "usage": 22.0, "fg_pct": 55.0,
    },
}

# Tier draw weights and rating boost
TIER_WEIGHTS = [0.15, 0.35, 0.50]
TIER_BOOST = {"GOAT": 8.0, "Legend": 4.0, "All-Star": 0.0}
ERAS = ["1960s", "1970s", "1980s", "1990s", "2000s", "2010s", "2020s"]

RATING_SD = 6.0
RATING_MIN, RATING_MAX = 40.0, 99.0

DEFAULT_TEAM_NAMES = ("Showtime Legends", "Modern Era Dominators")


def _clamp(x: float, lo: float, hi: float) -> float:
    return float(max(lo, min(hi, x)))


# Generate unique, title-free person names
def _fake_unique_name(fake: Faker, seen: set) -> str:
    """Return a unique First Last name, adding a numeric suffix on rare collisions."""
    base = f"{fake.first_name_male()} {fake.last_name()}"
    candidate, i = base, 2
    while candidate in seen:
        candidate = f"{base} {i}"
        i += 1
    seen.add(candidate)
    return candidate


def make_rng(seed: Optional[int] = None) -> np.random.Generator:
    """Random source for simulations; pass a seed for reproducible runs."""
    return np.random.default_rng(seed)


###################
### PLAYER POOL ###
###################

def create_player(name: str, position: str, rng: np.random.Generator) -> Player:
    """Draw one fictional player around the position profile, boosted by a random tier."""
    profile = POSITION_PROFILES[position]
    tier = TIERS[int(rng.choice(len(TIERS), p=TIER_WEIGHTS))]
    boost = TIER_BOOST[tier]
    ratings = {
        key: round(_clamp(rng.normal(mean + boost, RATING_SD), RATING_MIN, RATING_MAX), 1)
        for key, mean in profile["ratings"].items()
    }
    inside, mid, three = (round(float(w * rng.uniform(0.7, 1.3)), 2) for w in profile["shots"])
    return Player(
        name=name,
        position=position,
        tier=tier,
        usage_rate=round(_clamp(rng.normal(profile["usage"] + boost / 2, 3.0), 12.0, 38.0), 1),
        field_goal_pct=round(_clamp(rng.normal(profile["fg_pct"] + boost / 4, 3.0), 38.0, 62.0), 1),
        shot_inside=inside,
        shot_mid=mid,
        shot_three=three,
        target_minutes=int(round(_clamp(rng.normal(34.0, 3.0), 24.0, 42.0))),
        foul_tendency=round(_clamp(rng.normal(3.0, 0.8), 1.0, 6.0), 1),
        era=ERAS[int(rng.integers(len(ERAS)))],
        **ratings,
    )


def create_player_pool(players_per_position: int, rng: np.random.Generator) -> PlayerPool:
    """Create a catalog of fictional players with unique Faker names.

    Faker is seeded from rng, so a seeded generator yields the same pool every run.

    Args:
        players_per_position: Players generated for each of the five positions.
        rng: numpy Generator driving names, tiers and ratings.

    Returns:
        PlayerPool ordered by position, then creation order.
    """
    fake = Faker()
    fake.seed_instance(int(rng.integers(1_000_000_000)))
    seen: set = set()
    players = []
    for position in POSITIONS:
        for _ in range(players_per_position):
            players.append(create_player(_fake_unique_name(fake, seen), position, rng))
    return PlayerPool(players)


POOL_FIELDS = [f.name for f in fields(Player)]
_TEXT_FIELDS = {"name", "position", "tier", "era"}


def write_player_pool_csv(pool: PlayerPool, path: str) -> None:
    """Write the catalog, one row per player."""
    with open(path, 'w', newline='') as f:
        w = csv.DictWriter(f, fieldnames=POOL_FIELDS)
        w.writeheader()
        for p in pool:
            w.writerow({name: getattr(p, name) for name in POOL_FIELDS})


def load_player_pool(path: str) -> PlayerPool:
    """Read a catalog written by write_player_pool_csv.

    Missing numeric columns fall back to Player defaults; an unknown position raises ValueError.
    """
    players = []
    with open(path, newline='') as f:
        for line_no, row in enumerate(csv.DictReader(f), start=2):
            if row.get('position') not in POSITIONS:
                raise ValueError(f"{path}:{line_no}: unknown position {row.get('position')!r}")
            kwargs = {}
            for name in POOL_FIELDS:
                value = row.get(name)
                if value is None or value == '':
                    continue
                kwargs[name] = value if name in _TEXT_FIELDS else float(value)
            players.append(Player(**kwargs))
    return PlayerPool(players)


###############
### ROSTERS ###
###############

def draft_roster(pool: PlayerPool, rng, exclude: Iterable[str] = ()) -> Roster:
    """Fill every starter and bench position with a uniformly drawn, unused pool player.

    Args:
        pool: Catalog to draft from.
        rng: Random source exposing random() -> float in [0, 1).
        exclude: Names already taken (e.g. by the other team).

    Raises:
        ValueError: If a position has no player left to draft.
    """
    used = set(exclude)
    slots: Dict[str, Dict[str, str]] = {"starters": {}, "bench": {}}
    for kind in ("starters", "bench"):
        for position in POSITIONS:
            available = pool.by_position(position, exclude=used)
            if not available:
                raise ValueError(f"Not enough {position} players to fill {kind}")
            pick = available[random_index(len(available), rng)]
            slots[kind][position] = pick.name
            used.add(pick.name)
    return Roster(starters=slots["starters"], bench=slots["bench"])


def draft_teams(pool: PlayerPool, rng) -> List[Roster]:
    """Draft two non-overlapping rosters from the pool."""
    first = draft_roster(pool, rng)
    second = draft_roster(pool, rng, exclude=first.names())
    return [first, second]


###########################
### DATA EXPORT HELPERS ###
###########################

BOX_SCORE_FIELDS = ['game_id', 'team', 'player', 'position', 'MIN', 'PTS', 'REB', 'AST', 'PF', 'stamina']
PBP_FIELDS = ['game_id', 'quarter', 'play_number', 'description']
QUARTER_FIELDS = ['game_id', 'quarter', 'team1', 'team2', 'team1_points', 'team2_points', 'star', 'lead_changes']
SERIES_GAME_FIELDS = ['game_id', 'team1', 'team2', 'team1_score', 'team2_score', 'winner',
                      'halftime', 'lead_changes', 'mvp', 'mvp_pts', 'mvp_reb', 'mvp_ast']
SERIES_STAT_FIELDS = ['team', 'player', 'PTS', 'REB', 'AST', 'PF']


def box_score_rows(result: GameResult) -> List[Dict]:
    """One row per player, each team sorted by minutes played (most first)."""
    rows = []
    for team in (result.team1, result.team2):
        for p in sorted(team.players(), key=lambda q: q.stats.minutes, reverse=True):
            rows.append({
                'game_id': result.game_number,
                'team': team.name,
                'player': p.name,
                'position': p.position,
                'MIN': p.stats.minutes,
                'PTS': p.stats.points,
                'REB': p.stats.rebounds,
                'AST': p.stats.assists,
                'PF': p.stats.personal_fouls,
                'stamina': round(p.stamina, 1),
            })
    return rows


def play_by_play_rows(result: GameResult) -> List[Dict]:
    rows = []
    for log in result.play_by_play:
        for i, play in enumerate(log.plays, start=1):
            rows.append({'game_id': result.game_number, 'quarter': log.quarter, 'play_number': i, 'description': play})
    return rows


def quarter_rows(result: GameResult) -> List[Dict]:
    rows = []
    for log in result.play_by_play:
        q = result.quarter_scores.quarter(log.quarter)
        rows.append({
            'game_id': result.game_number,
            'quarter': log.quarter,
            'team1': result.team1.name,
            'team2': result.team2.name,
            'team1_points': q.team1,
            'team2_points': q.team2,
            'star': log.star,
            'lead_changes': log.lead_changes,
        })
    return rows


def series_game_rows(series: SeriesResult) -> List[Dict]:
    rows = []
    for g in series.games:
        t1, t2 = g.quarter_scores.totals()
        rows.append({
            'game_id': g.game_number,
            'team1': g.team1.name,
            'team2': g.team2.name,
            'team1_score': t1,
            'team2_score': t2,
            'winner': g.winner.name,
            'halftime': g.halftime_score,
            'lead_changes': g.lead_changes,
            'mvp': g.mvp.name,
            'mvp_pts': g.mvp.stats.points,
            'mvp_reb': g.mvp.stats.rebounds,
            'mvp_ast': g.mvp.stats.assists,
        })
    return rows


def series_stat_rows(series: SeriesResult) -> List[Dict]:
    rows = []
    for team in (series.winner, series.loser):
        for name, s in team.stats.items():
            rows.append({'team': team.name, 'player': name, 'PTS': s.points,
                         'REB': s.rebounds, 'AST': s.assists, 'PF': s.personal_fouls})
    return rows


def write_csv(rows: Sequence[Dict], path: str, fieldnames: List[str]) -> None:
    os.makedirs(os.path.dirname(path) or '.', exist_ok=True)
    with open(path, 'w', newline='') as f:
        w = csv.DictWriter(f, fieldnames=fieldnames)
        w.writeheader()
        w.writerows(rows)


##########################
### NARRATIVE PAYLOADS ###
##########################

def game_summary(result: GameResult) -> Dict:
    """Plain facts about a finished game for an external narrative writer."""
    mvp = result.mvp
    return {
        'team1': result.team1.name,
        'team2': result.team2.name,
        'final_score': result.score,
        'winner': result.winner.name,
        'mvp': mvp.name,
        'mvp_line': f"{mvp.stats.points} PTS, {mvp.stats.rebounds} REB, {mvp.stats.assists} AST",
        'halftime_score': result.halftime_score,
        'lead_changes': result.lead_changes,
    }


def series_summary(series: SeriesResult) -> Dict:
    """Plain facts about a finished series, with the series MVP's per-game averages."""
    n_games = len(series.games)
    per_game = lambda total: round(total / n_games, 1) if n_games else 0.0
    return {
        'winner': series.winner.name,
        'winner_wins': series.winner.wins,
        'loser': series.loser.name,
        'loser_wins': series.loser.wins,
        'mvp': series.mvp_name,
        'mvp_ppg': per_game(series.mvp_stats.points),
        'mvp_rpg': per_game(series.mvp_stats.rebounds),
        'mvp_apg': per_game(series.mvp_stats.assists),
        'game_scores': [f"G{i}: {g.score}" for i, g in enumerate(series.games, start=1)],
    }
