################
### PACKAGES ###
################

import argparse
import logging
import os
from functions import (
    make_rng, create_player_pool, draft_teams, write_player_pool_csv, write_csv,
    box_score_rows, quarter_rows, series_game_rows, series_stat_rows, series_summary,
    BOX_SCORE_FIELDS, QUARTER_FIELDS, SERIES_GAME_FIELDS, SERIES_STAT_FIELDS, DEFAULT_TEAM_NAMES,
)
from classes import Series, SeriesTeam, WINS_TO_CLINCH

#####################
### SERIES SCRIPT ###
#####################
# Simulates a best-of-seven series between two drafted rosters.
# Every game starts from the same rosters with fresh stamina and stats.

SEED = 2026
BASE_DATA_DIR = 'data/series'
PLAYERS_PER_POSITION = 8

parser = argparse.ArgumentParser(description="Simulate a best-of-seven Basketball Legends series")
parser.add_argument("--seed", type=int, default=SEED, help="Random seed (pool, rosters and games)")
parser.add_argument("--output-dir", default=BASE_DATA_DIR, help="Directory for CSV outputs")
parser.add_argument("--team1", default=DEFAULT_TEAM_NAMES[0], help="Name of team 1")
parser.add_argument("--team2", default=DEFAULT_TEAM_NAMES[1], help="Name of team 2")
parser.add_argument("-v", "--verbose", action="store_true", help="Log substitutions and results")
args = parser.parse_args()

logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING, format="%(levelname)s: %(message)s")

print("=" * 80)
print(f"SERIES: first to {WINS_TO_CLINCH} wins, seed {args.seed}")
print("=" * 80)
print()

rng = make_rng(args.seed)
os.makedirs(args.output_dir, exist_ok=True)

# Build pool and rosters once for the whole series
pool = create_player_pool(PLAYERS_PER_POSITION, rng)
write_player_pool_csv(pool, os.path.join(args.output_dir, 'rosters.csv'))
roster1, roster2 = draft_teams(pool, rng)

series = Series(SeriesTeam(args.team1, roster1), SeriesTeam(args.team2, roster2), pool, rng)

box_rows = []
q_rows = []
while not series.is_decided:
    result = series.play_game()
    box_rows.extend(box_score_rows(result))
    q_rows.extend(quarter_rows(result))
    print(f"Game {result.game_number}: {result.winner.name} win {result.score} "
          f"| MVP {result.mvp.name} ({result.mvp.stats.points} pts) "
          f"| series {series.team1.wins}-{series.team2.wins}")

outcome = series.result()

write_csv(series_game_rows(outcome), os.path.join(args.output_dir, 'series-results.csv'), SERIES_GAME_FIELDS)
write_csv(series_stat_rows(outcome), os.path.join(args.output_dir, 'series-stats.csv'), SERIES_STAT_FIELDS)
write_csv(box_rows, os.path.join(args.output_dir, 'box-score.csv'), BOX_SCORE_FIELDS)
write_csv(q_rows, os.path.join(args.output_dir, 'quarter-scores.csv'), QUARTER_FIELDS)

summary = series_summary(outcome)
print()
print(f"{summary['winner']} win the series {summary['winner_wins']}-{summary['loser_wins']}")
print(f"Series MVP: {summary['mvp']} ({summary['mvp_ppg']} PPG, {summary['mvp_rpg']} RPG, {summary['mvp_apg']} APG)")
print(f"Scores: {', '.join(summary['game_scores'])}")
print()
print(f"Outputs written under {args.output_dir}/: rosters.csv, series-results.csv, series-stats.csv, "
      f"box-score.csv, quarter-scores.csv")
