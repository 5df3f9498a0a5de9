################
### PACKAGES ###
################

import argparse
import logging
import os
from functions import (
    make_rng, create_player_pool, draft_teams, write_player_pool_csv, write_csv,
    box_score_rows, play_by_play_rows, quarter_rows, game_summary,
    BOX_SCORE_FIELDS, PBP_FIELDS, QUARTER_FIELDS, DEFAULT_TEAM_NAMES,
)
from classes import Game, build_team

###################
### MAIN SCRIPT ###
###################
# Simulates a single game quarter by quarter between two drafted rosters

SEED = 2026
DATA_DIR = 'data'
PLAYERS_PER_POSITION = 8

parser = argparse.ArgumentParser(description="Simulate a single Basketball Legends game")
parser.add_argument("--seed", type=int, default=SEED, help="Random seed (pool, rosters and game)")
parser.add_argument("--output-dir", default=DATA_DIR, help="Directory for CSV outputs")
parser.add_argument("--team1", default=DEFAULT_TEAM_NAMES[0], help="Name of team 1")
parser.add_argument("--team2", default=DEFAULT_TEAM_NAMES[1], help="Name of team 2")
parser.add_argument("-v", "--verbose", action="store_true", help="Log substitutions and results")
args = parser.parse_args()

logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING, format="%(levelname)s: %(message)s")

rng = make_rng(args.seed)

PLAYERS_DIR = os.path.join(args.output_dir, 'players')
GAMES_DIR = os.path.join(args.output_dir, 'games')
for directory in (PLAYERS_DIR, GAMES_DIR):
    os.makedirs(directory, exist_ok=True)

# 1) Build the player pool and export it
pool = create_player_pool(PLAYERS_PER_POSITION, rng)
write_player_pool_csv(pool, os.path.join(PLAYERS_DIR, 'rosters.csv'))

# 2) Draft two non-overlapping rosters
roster1, roster2 = draft_teams(pool, rng)
team1 = build_team(args.team1, roster1, pool)
team2 = build_team(args.team2, roster2, pool)

print(f"{team1.name} vs {team2.name}")
for team in (team1, team2):
    print(f"  {team.name} starters: {', '.join(p.name + ' (' + p.position + ')' for p in team.on_court)}")
print()

# 3) Simulate quarter by quarter
game = Game(team1, team2, rng, game_number=1)
while not game.is_finished:
    log = game.simulate_quarter()
    q = game.score.quarter(log.quarter)
    t1, t2 = game.score.totals()
    print(f"Q{log.quarter}: {q.team1}-{q.team2} (game {t1}-{t2}) | star: {log.star} | lead changes: {log.lead_changes}")

# 4) Finalize and write outputs
result = game.finalize(pool)
write_csv(box_score_rows(result), os.path.join(GAMES_DIR, 'box-score.csv'), BOX_SCORE_FIELDS)
write_csv(play_by_play_rows(result), os.path.join(GAMES_DIR, 'play-by-play.csv'), PBP_FIELDS)
write_csv(quarter_rows(result), os.path.join(GAMES_DIR, 'quarter-scores.csv'), QUARTER_FIELDS)

summary = game_summary(result)
print()
print(f"Final: {summary['winner']} win {summary['final_score']} (halftime {summary['halftime_score']}, "
      f"{summary['lead_changes']} lead changes)")
print(f"MVP: {summary['mvp']} - {summary['mvp_line']}")
print()
print(f"Outputs written under {args.output_dir}/: ")
print("  players/: rosters.csv")
print("  games/: box-score.csv, play-by-play.csv, quarter-scores.csv")
