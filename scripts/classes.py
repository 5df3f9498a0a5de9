################
### PACKAGES ###
################

from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple
import logging

_log = logging.getLogger("legends.sim")

#################
### CONSTANTS ###
#################

# Court positions, in on-court slot order
POSITIONS = ["PG", "SG", "SF", "PF", "C"]
TIERS = ["GOAT", "Legend", "All-Star"]
ATTRIBUTE_KEYS = [
    "inside_scoring", "mid_range", "three_point", "playmaking",
    "perimeter_defense", "interior_defense", "rebounding",
    "athleticism", "basketball_iq",
]

# Game structure
POSSESSIONS_PER_QUARTER = 48
QUARTERS = 4
MINUTES_PER_QUARTER = 12
WINS_TO_CLINCH = 4  # best of seven

# Stamina model
MAX_STAMINA = 100.0
MIN_STAMINA = 0.0
OFFENSE_STAMINA_COST = 2.0
DEFENSE_STAMINA_COST = 1.0
BENCH_RECOVERY = 15.0
SUB_OUT_STAMINA = 70.0   # on-court players below this are candidates to sit
SUB_IN_STAMINA = 90.0    # bench players must be above this to check in

# Possession model
PASS_USAGE_PENALTY = 1.5
RATING_EDGE_SCALE = 0.75
FOUL_SCALE = 2.0

# Shot buckets: tendency key -> attribute key, points
SHOT_TYPES = [
    ("inside", "inside_scoring"),
    ("mid", "mid_range"),
    ("three", "three_point"),
]
SHOT_POINTS = {"inside_scoring": 2, "mid_range": 2, "three_point": 3}

# Award weights (points, rebounds, assists, personal fouls)
MVP_POINTS_WEIGHT = 1.0
MVP_REBOUNDS_WEIGHT = 1.2
MVP_ASSISTS_WEIGHT = 1.5
MVP_FOULS_WEIGHT = 2.0


###############
### HELPERS ###
###############

def weighted_choice(items: Sequence, weights: Sequence[float], rng, fallback: int = 0):
    """Draw one item with probability proportional to its weight.

    A uniform draw over the total weight is walked down the list, subtracting each
    weight in turn; the first item that brings the running value to zero or below
    is selected. Float rounding can leave the value positive after the last item,
    in which case items[fallback] is returned.

    Args:
        items: Candidates, in walk order.
        weights: Non-negative weights aligned with items.
        rng: Random source exposing random() -> float in [0, 1).
        fallback: Index of the item returned when the walk selects nothing.

    Returns:
        The selected item.
    """
    remaining = rng.random() * sum(weights)
    for item, weight in zip(items, weights):
        remaining -= weight
        if remaining <= 0:
            return item
    return items[fallback]


def random_index(n: int, rng) -> int:
    """Uniform index in [0, n)."""
    return min(n - 1, int(rng.random() * n))


def mvp_score(stats) -> float:
    """Composite award score shared by quarter, game and series awards."""
    return (stats.points * MVP_POINTS_WEIGHT
            + stats.rebounds * MVP_REBOUNDS_WEIGHT
            + stats.assists * MVP_ASSISTS_WEIGHT
            - stats.personal_fouls * MVP_FOULS_WEIGHT)


###############
### PLAYERS ###
###############

@dataclass(frozen=True)
class Player:
    """A catalog player. Defined once when the pool is built and never mutated.

    Attributes:
        name: Display name, also the player's identity within a pool.
        position: One of POSITIONS.
        tier: "GOAT", "Legend" or "All-Star".
        inside_scoring .. basketball_iq: Ratings on a 0-100 scale.
        usage_rate: Share of team possessions used (percent), the selection weight on offense.
        field_goal_pct: Career field goal percentage, the base of every shot's make chance.
        shot_inside, shot_mid, shot_three: Relative shot-selection weights (need not sum to 1).
        target_minutes: Soft minutes cap used by the substitution policy.
        foul_tendency: Foul chance per defended shot, in half-percent units.
        era: Free-form era label.
    """
    name: str
    position: str
    tier: str = "All-Star"
    inside_scoring: float = 50.0
    mid_range: float = 50.0
    three_point: float = 50.0
    playmaking: float = 50.0
    perimeter_defense: float = 50.0
    interior_defense: float = 50.0
    rebounding: float = 50.0
    athleticism: float = 50.0
    basketball_iq: float = 50.0
    usage_rate: float = 20.0
    field_goal_pct: float = 45.0
    shot_inside: float = 1.0
    shot_mid: float = 1.0
    shot_three: float = 1.0
    target_minutes: float = 32.0
    foul_tendency: float = 3.0
    era: str = ""

    @property
    def shot_tendencies(self) -> Dict[str, float]:
        return {"inside": self.shot_inside, "mid": self.shot_mid, "three": self.shot_three}

    def attribute(self, key: str) -> float:
        """Return the rating for an attribute key such as 'three_point'."""
        if key not in ATTRIBUTE_KEYS:
            raise KeyError(f"Unknown attribute '{key}'")
        return getattr(self, key)


class PlayerPool:
    """Read-only name -> Player catalog handed to whatever needs player lookups."""
    def __init__(self, players: Iterable[Player]):
        self._players: Dict[str, Player] = {}
        for p in players:
            if p.name in self._players:
                raise ValueError(f"Duplicate player name in pool: {p.name}")
            self._players[p.name] = p

    def get(self, name: str) -> Player:
        try:
            return self._players[name]
        except KeyError:
            raise KeyError(f"Player '{name}' is not in the pool") from None

    def __contains__(self, name: object) -> bool:
        return name in self._players

    def __len__(self) -> int:
        return len(self._players)

    def __iter__(self) -> Iterator[Player]:
        return iter(self._players.values())

    def first(self) -> Optional[Player]:
        return next(iter(self._players.values()), None)

    def by_position(self, position: str, exclude: Iterable[str] = ()) -> List[Player]:
        """Players at a position, skipping any names in exclude."""
        skip = set(exclude)
        return [p for p in self._players.values() if p.position == position and p.name not in skip]


#########################
### GAME PLAYER STATE ###
#########################

@dataclass
class PlayerStats:
    points: int = 0
    rebounds: int = 0
    assists: int = 0
    minutes: int = 0
    personal_fouls: int = 0

    def copy(self) -> "PlayerStats":
        return replace(self)


@dataclass
class SeriesPlayerStats:
    """Cumulative series line. Minutes are not carried across games."""
    points: int = 0
    rebounds: int = 0
    assists: int = 0
    personal_fouls: int = 0

    def add(self, stats: PlayerStats) -> None:
        self.points += stats.points
        self.rebounds += stats.rebounds
        self.assists += stats.assists
        self.personal_fouls += stats.personal_fouls


class PlayerInGame:
    """A pool player plus the mutable state of one game: box-score stats and stamina."""
    def __init__(self, player: Player, stats: Optional[PlayerStats] = None, stamina: float = MAX_STAMINA):
        self.player = player
        self.stats = stats if stats is not None else PlayerStats()
        self.stamina = stamina

    @property
    def name(self) -> str:
        return self.player.name

    @property
    def position(self) -> str:
        return self.player.position

    def spend_stamina(self, amount: float) -> None:
        self.stamina = max(MIN_STAMINA, self.stamina - amount)

    def recover_stamina(self, amount: float) -> None:
        self.stamina = min(MAX_STAMINA, self.stamina + amount)

    def copy(self) -> "PlayerInGame":
        return PlayerInGame(self.player, self.stats.copy(), self.stamina)

    def __repr__(self) -> str:
        return f"PlayerInGame({self.name!r}, {self.position}, stamina={self.stamina:.0f})"


class TeamInGame:
    """A team during a game.

    Attributes:
        name: Team name.
        on_court: Five players, one per slot; slot order drives defensive matching.
        bench: Remaining roster players.
    """
    def __init__(self, name: str, on_court: List[PlayerInGame], bench: List[PlayerInGame]):
        self.name = name
        self.on_court = list(on_court)
        self.bench = list(bench)

    def players(self) -> List[PlayerInGame]:
        return self.on_court + self.bench

    def defender_for(self, position: str, rng) -> PlayerInGame:
        """Same-position on-court player, else a uniformly random one."""
        for p in self.on_court:
            if p.position == position:
                return p
        return self.on_court[random_index(len(self.on_court), rng)]

    def substitute(self) -> List[Tuple[PlayerInGame, PlayerInGame]]:
        """Apply the end-of-quarter substitution policy in place.

        Bench players recover stamina first. Then, in a single pass over the
        on-court slots, a player below SUB_OUT_STAMINA who is still under his
        target minutes is swapped with the first same-position bench player above
        SUB_IN_STAMINA. The fresh player takes the slot; the tired player takes
        the fresh player's bench spot.

        Returns:
            (tired, fresh) pairs in slot order.
        """
        for p in self.bench:
            p.recover_stamina(BENCH_RECOVERY)
        swaps = []
        for i, tired in enumerate(self.on_court):
            if tired.stamina >= SUB_OUT_STAMINA or tired.stats.minutes >= tired.player.target_minutes:
                continue
            for j, fresh in enumerate(self.bench):
                if fresh.position == tired.position and fresh.stamina > SUB_IN_STAMINA:
                    self.on_court[i] = fresh
                    self.bench[j] = tired
                    swaps.append((tired, fresh))
                    break
        return swaps

    def copy(self) -> "TeamInGame":
        return TeamInGame(self.name, [p.copy() for p in self.on_court], [p.copy() for p in self.bench])

    def __repr__(self) -> str:
        return f"TeamInGame({self.name!r}, on_court={[p.name for p in self.on_court]})"


@dataclass
class Roster:
    """Position -> player name for starters and bench, as supplied by the roster source."""
    starters: Dict[str, str]
    bench: Dict[str, str]

    def names(self) -> List[str]:
        return [n for n in list(self.starters.values()) + list(self.bench.values()) if n]


def build_team(name: str, roster: Roster, pool: PlayerPool) -> TeamInGame:
    """Project a roster onto fresh game state (zeroed stats, full stamina)."""
    def project(slots: Dict[str, str]) -> List[PlayerInGame]:
        ordered = [slots.get(pos) for pos in POSITIONS] + [n for pos, n in slots.items() if pos not in POSITIONS]
        return [PlayerInGame(pool.get(n)) for n in ordered if n]
    return TeamInGame(name, project(roster.starters), project(roster.bench))


##############
### SCORES ###
##############

@dataclass
class QuarterScore:
    team1: int = 0
    team2: int = 0

    def add(self, team_index: int, points: int) -> None:
        if team_index == 0:
            self.team1 += points
        else:
            self.team2 += points


@dataclass
class GameScore:
    """Per-quarter scores for one game."""
    q1: QuarterScore = field(default_factory=QuarterScore)
    q2: QuarterScore = field(default_factory=QuarterScore)
    q3: QuarterScore = field(default_factory=QuarterScore)
    q4: QuarterScore = field(default_factory=QuarterScore)

    def quarters(self) -> List[QuarterScore]:
        return [self.q1, self.q2, self.q3, self.q4]

    def quarter(self, number: int) -> QuarterScore:
        if not 1 <= number <= QUARTERS:
            raise ValueError(f"Quarter must be between 1 and {QUARTERS}, got {number}")
        return self.quarters()[number - 1]

    def with_quarter(self, number: int, score: QuarterScore) -> "GameScore":
        self.quarter(number)
        return replace(self, **{f"q{number}": replace(score)})

    def totals(self) -> Tuple[int, int]:
        return sum(q.team1 for q in self.quarters()), sum(q.team2 for q in self.quarters())

    def halftime(self) -> Tuple[int, int]:
        return self.q1.team1 + self.q2.team1, self.q1.team2 + self.q2.team2


@dataclass
class PlayByPlayLog:
    quarter: int
    star: str
    lead_changes: int
    plays: List[str]


class QuarterState:
    """Running accumulators for one quarter: score, plays, per-player points, lead tracking."""
    def __init__(self, totals_before: Tuple[int, int] = (0, 0), last_lead_team: int = 0):
        self.score = QuarterScore()
        self.plays: List[str] = []
        self.player_points: Dict[str, int] = {}
        self.lead_changes = 0
        self.last_lead_team = last_lead_team
        self.totals_before = totals_before

    def running_totals(self) -> Tuple[int, int]:
        return self.totals_before[0] + self.score.team1, self.totals_before[1] + self.score.team2

    def record_score(self, team_index: int, scorer: str, points: int) -> Tuple[int, int]:
        """Credit a made basket and update the leader (1, 2, or 0 when tied).

        A lead change is counted only when a team strictly leads and it is not the
        previously recorded leader; ties leave the recorded leader untouched.
        """
        self.score.add(team_index, points)
        self.player_points[scorer] = self.player_points.get(scorer, 0) + points
        t1, t2 = self.running_totals()
        leader = 1 if t1 > t2 else (2 if t2 > t1 else 0)
        if leader != 0 and leader != self.last_lead_team:
            self.lead_changes += 1
            self.last_lead_team = leader
        return t1, t2

    def star(self) -> str:
        best_name, best_points = None, 0
        for name, points in self.player_points.items():
            if points > best_points:
                best_name, best_points = name, points
        if best_name is None:
            return "Balanced scoring"
        return f"{best_name} ({best_points} pts)"


##########################
### POSSESSION MODEL ###
##########################

def resolve_possession(offense: TeamInGame, defense: TeamInGame, offense_index: int,
                       quarter: QuarterState, rng) -> bool:
    """Resolve one possession into a score or a miss, mutating player and quarter state.

    Args:
        offense: Team with the ball.
        defense: Opponent.
        offense_index: 0 if the offense is team 1, 1 if team 2.
        quarter: Accumulators of the quarter in progress.
        rng: Random source exposing random() -> float in [0, 1).

    Returns:
        True if the possession ended in a made basket.
    """
    ball_handler = weighted_choice(offense.on_court, [p.player.usage_rate for p in offense.on_court], rng)
    defender = defense.defender_for(ball_handler.position, rng)
    ball_handler.spend_stamina(OFFENSE_STAMINA_COST)
    defender.spend_stamina(DEFENSE_STAMINA_COST)

    pass_chance = ball_handler.player.playmaking - ball_handler.player.usage_rate * PASS_USAGE_PENALTY
    assister = None
    if rng.random() * 100 < pass_chance and len(offense.on_court) > 1:
        teammates = [p for p in offense.on_court if p is not ball_handler]
        shooter = teammates[random_index(len(teammates), rng)]
        assister = ball_handler
    else:
        shooter = ball_handler
    shot_defender = defense.defender_for(shooter.position, rng)

    tendencies = shooter.player.shot_tendencies
    shot_type = weighted_choice([attr for _, attr in SHOT_TYPES], [tendencies[key] for key, _ in SHOT_TYPES], rng)
    off_rating = shooter.player.attribute(shot_type) * (shooter.stamina / 100)
    guard_attr = "interior_defense" if shot_type == "inside_scoring" else "perimeter_defense"
    def_rating = shot_defender.player.attribute(guard_attr) * (shot_defender.stamina / 100)
    # Unclamped: chances above 100 always score, below 0 never do
    score_chance = shooter.player.field_goal_pct + (off_rating - def_rating) * RATING_EDGE_SCALE

    if rng.random() * 100 < shot_defender.player.foul_tendency * FOUL_SCALE:
        shot_defender.stats.personal_fouls += 1

    if rng.random() * 100 < score_chance:
        points = SHOT_POINTS[shot_type]
        shooter.stats.points += points
        if assister is not None:
            assister.stats.assists += 1
        t1, t2 = quarter.record_score(offense_index, shooter.name, points)
        assist_note = f" (assist by {assister.name})" if assister is not None else ""
        quarter.plays.append(f"SCORE: {shooter.name} scores {points} points{assist_note}. ({t1}-{t2})")
        return True

    on_court = offense.on_court + defense.on_court
    rebounder = weighted_choice(on_court, [p.player.rebounding * (p.stamina / 100) for p in on_court], rng,
                                fallback=len(on_court) - 1)
    rebounder.stats.rebounds += 1
    quarter.plays.append(f"MISS: {shooter.name}'s shot is off. Rebound by {rebounder.name}.")
    return False


###############
### QUARTER ###
###############

@dataclass
class QuarterOutcome:
    teams: Tuple[TeamInGame, TeamInGame]
    score: QuarterScore
    log: PlayByPlayLog
    last_lead_team: int


def simulate_quarter(teams: Sequence[TeamInGame], score: GameScore, quarter_number: int,
                     last_lead_team: int, rng) -> QuarterOutcome:
    """Simulate one quarter and return new team state; the input teams are left untouched.

    Runs POSSESSIONS_PER_QUARTER possessions with team 1 on offense on even
    possessions, credits every on-court player with a full quarter of minutes,
    then applies each team's substitution policy.

    Args:
        teams: (team1, team2).
        score: Game score before this quarter; seeds the running totals used for lead tracking.
        quarter_number: 1-4.
        last_lead_team: Leader recorded at the end of the previous quarter (0, 1 or 2).
        rng: Random source exposing random() -> float in [0, 1).
    """
    if not 1 <= quarter_number <= QUARTERS:
        raise ValueError(f"Quarter must be between 1 and {QUARTERS}, got {quarter_number}")
    sides = (teams[0].copy(), teams[1].copy())
    state = QuarterState(score.totals(), last_lead_team)

    for i in range(POSSESSIONS_PER_QUARTER):
        offense_index = i % 2
        resolve_possession(sides[offense_index], sides[1 - offense_index], offense_index, state, rng)

    for team in sides:
        for p in team.on_court:
            p.stats.minutes += MINUTES_PER_QUARTER

    for team in sides:
        for tired, fresh in team.substitute():
            _log.debug("Q%d %s: %s in for %s (stamina %.0f)", quarter_number, team.name,
                       fresh.name, tired.name, tired.stamina)

    log = PlayByPlayLog(
        quarter=quarter_number,
        star=state.star(),
        lead_changes=state.lead_changes,
        plays=list(state.plays),
    )
    return QuarterOutcome(sides, state.score, log, state.last_lead_team)


##############
### AWARDS ###
##############

def calculate_game_mvp(players: Iterable[PlayerInGame], pool: Optional[PlayerPool] = None) -> PlayerInGame:
    """Highest mvp_score; the first player seen wins ties.

    With no players at all, returns a zero-stat, zero-stamina entry for the first
    pool player (or a placeholder) so award rendering always has something to show.
    """
    candidates = list(players)
    if not candidates:
        base = pool.first() if pool is not None else None
        if base is None:
            base = Player(name="Unknown", position=POSITIONS[0])
        return PlayerInGame(base, stamina=0.0)
    mvp = candidates[0]
    for p in candidates[1:]:
        if mvp_score(p.stats) > mvp_score(mvp.stats):
            mvp = p
    return mvp


def calculate_series_mvp(series_stats: Dict[str, SeriesPlayerStats]) -> Tuple[str, SeriesPlayerStats]:
    """Series MVP over one team's cumulative lines; ("", zero line) when empty."""
    best: Tuple[str, SeriesPlayerStats] = ("", SeriesPlayerStats())
    best_score = None
    for name, stats in series_stats.items():
        score = mvp_score(stats)
        if best_score is None or score > best_score:
            best, best_score = (name, stats), score
    return best


############
### GAME ###
############

@dataclass
class GameResult:
    game_number: int
    winner: TeamInGame
    score: str
    team1: TeamInGame
    team2: TeamInGame
    halftime_score: str
    lead_changes: int
    mvp: PlayerInGame
    quarter_scores: GameScore
    play_by_play: List[PlayByPlayLog]

    @property
    def loser(self) -> TeamInGame:
        return self.team2 if self.winner is self.team1 else self.team1


class Game:
    """Runs a game between two teams one quarter at a time."""
    def __init__(self, team1: TeamInGame, team2: TeamInGame, rng, game_number: int = 1):
        self.teams: Tuple[TeamInGame, TeamInGame] = (team1, team2)
        self.rng = rng
        self.game_number = game_number
        self.score = GameScore()
        self.play_by_play: List[PlayByPlayLog] = []
        self.last_lead_team = 0
        self.current_quarter = 1

    @property
    def is_finished(self) -> bool:
        return self.current_quarter > QUARTERS

    def simulate_quarter(self) -> PlayByPlayLog:
        """Simulate the next quarter and carry its state forward."""
        if self.is_finished:
            raise ValueError(f"Game {self.game_number} has already played {QUARTERS} quarters")
        outcome = simulate_quarter(self.teams, self.score, self.current_quarter, self.last_lead_team, self.rng)
        self.teams = outcome.teams
        self.score = self.score.with_quarter(self.current_quarter, outcome.score)
        self.play_by_play.append(outcome.log)
        self.last_lead_team = outcome.last_lead_team
        self.current_quarter += 1
        return outcome.log

    def simulate_game(self, pool: Optional[PlayerPool] = None) -> GameResult:
        """Simulate the remaining quarters and return the final result."""
        while not self.is_finished:
            self.simulate_quarter()
        return self.finalize(pool)

    def finalize(self, pool: Optional[PlayerPool] = None) -> GameResult:
        if not self.is_finished:
            raise ValueError(f"Game {self.game_number} is still in quarter {self.current_quarter}")
        team1, team2 = self.teams
        t1, t2 = self.score.totals()
        h1, h2 = self.score.halftime()
        winner = team1 if t1 >= t2 else team2
        mvp = calculate_game_mvp(team1.players() + team2.players(), pool)
        _log.debug("Game %d final: %s %d, %s %d", self.game_number, team1.name, t1, team2.name, t2)
        return GameResult(
            game_number=self.game_number,
            winner=winner,
            score=f"{max(t1, t2)} - {min(t1, t2)}",
            team1=team1,
            team2=team2,
            halftime_score=f"{h1} - {h2}",
            lead_changes=sum(q.lead_changes for q in self.play_by_play),
            mvp=mvp,
            quarter_scores=self.score,
            play_by_play=list(self.play_by_play),
        )


##############
### SERIES ###
##############

class SeriesTeam:
    """A team's side of a series: roster, win count and cumulative player lines."""
    def __init__(self, name: str, roster: Roster):
        self.name = name
        self.roster = roster
        self.wins = 0
        self.stats: Dict[str, SeriesPlayerStats] = {n: SeriesPlayerStats() for n in roster.names()}

    def record(self, team: TeamInGame) -> None:
        for p in team.players():
            if p.name in self.stats:
                self.stats[p.name].add(p.stats)


@dataclass
class SeriesResult:
    winner: SeriesTeam
    loser: SeriesTeam
    games: List[GameResult]
    mvp_name: str
    mvp_stats: SeriesPlayerStats


class Series:
    """Best-of-seven series. Every game starts from the rosters with fresh game state."""
    def __init__(self, team1: SeriesTeam, team2: SeriesTeam, pool: PlayerPool, rng):
        self.team1 = team1
        self.team2 = team2
        self.pool = pool
        self.rng = rng
        self.games: List[GameResult] = []

    @property
    def is_decided(self) -> bool:
        return self.team1.wins >= WINS_TO_CLINCH or self.team2.wins >= WINS_TO_CLINCH

    def play_game(self) -> GameResult:
        if self.is_decided:
            raise ValueError(f"Series already decided ({self.team1.wins}-{self.team2.wins})")
        game_number = self.team1.wins + self.team2.wins + 1
        game = Game(
            build_team(self.team1.name, self.team1.roster, self.pool),
            build_team(self.team2.name, self.team2.roster, self.pool),
            self.rng,
            game_number=game_number,
        )
        result = game.simulate_game(self.pool)
        if result.winner is result.team1:
            self.team1.wins += 1
        else:
            self.team2.wins += 1
        self.team1.record(result.team1)
        self.team2.record(result.team2)
        self.games.append(result)
        return result

    def play(self) -> SeriesResult:
        while not self.is_decided:
            self.play_game()
        return self.result()

    def result(self) -> SeriesResult:
        if not self.is_decided:
            raise ValueError("Series is not decided yet")
        winner, loser = (self.team1, self.team2) if self.team1.wins > self.team2.wins else (self.team2, self.team1)
        mvp_name, mvp_stats = calculate_series_mvp(winner.stats)
        _log.debug("Series to %s %d-%d, MVP %s", winner.name, winner.wins, loser.wins, mvp_name)
        return SeriesResult(winner, loser, list(self.games), mvp_name, mvp_stats)
