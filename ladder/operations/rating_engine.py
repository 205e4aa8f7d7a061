"""
Rating Engine - per-game Elo updates and overall rating aggregation

Pure computation over the User records passed in. The functions mutate the
given users in place and return the rating deltas; callers are expected to
hand in private copies and to serialize updates per user (see
MatchOperations).

Key functionality:
- ensure_game_stats(): create a per-game entry at the starting rating
- apply_1v1(): head-to-head update from pre-match ratings of both sides
- apply_multiplayer(): placement update from pairwise comparisons
- recompute_overall(): overall rating as the rounded mean of game ratings
"""

from dataclasses import dataclass
from typing import List, Sequence

from ladder.config import Config
from ladder.constants import EloConstants, MatchConstants
from ladder.data_models.records import GameStats, User
from ladder.utils.elo import EloCalculator, round_half_away_from_zero
from ladder.utils.logger import setup_logger

logger = setup_logger(__name__)


@dataclass
class PlacementEntry:
    """A participant and their finishing position (1 = best)"""
    user: User
    placement: int


def ensure_game_stats(user: User, game: str) -> GameStats:
    """Return the user's stats for a game, creating them at the starting rating"""
    stats = user.game_stats.get(game)
    if stats is None:
        stats = GameStats(rating=Config.STARTING_ELO, wins=0, losses=0)
        user.game_stats[game] = stats
        logger.debug(f"Created {game} stats for user {user.id}")
    return stats


def recompute_overall(user: User) -> None:
    """
    Set the overall rating to the rounded mean of all per-game ratings.

    A user with no game stats keeps the rating it already has.
    """
    game_ratings = [stats.rating for stats in user.game_stats.values()]
    if not game_ratings:
        return
    user.rating = round_half_away_from_zero(sum(game_ratings) / len(game_ratings))


def apply_1v1(winner: User, loser: User, game: str) -> int:
    """
    Apply a head-to-head result to both users.

    Both new ratings are derived from the pre-match ratings, so neither
    update sees the other's result.

    Args:
        winner: User who won (mutated)
        loser: User who lost (mutated)
        game: Game the match was played in

    Returns:
        Winner's per-game rating delta
    """
    winner_stats = ensure_game_stats(winner, game)
    loser_stats = ensure_game_stats(loser, game)

    winner_rating = winner_stats.rating
    loser_rating = loser_stats.rating

    expected_winner = EloCalculator.calculate_expected_score(winner_rating, loser_rating)
    expected_loser = EloCalculator.calculate_expected_score(loser_rating, winner_rating)

    new_winner_rating = EloCalculator.calculate_new_rating(
        winner_rating, expected_winner, EloConstants.WIN_SCORE
    )
    new_loser_rating = EloCalculator.calculate_new_rating(
        loser_rating, expected_loser, EloConstants.LOSS_SCORE
    )

    rating_change = new_winner_rating - winner_rating

    winner_stats.rating = new_winner_rating
    loser_stats.rating = new_loser_rating

    winner_stats.wins += 1
    loser_stats.losses += 1
    winner.total_wins += 1
    loser.total_losses += 1

    recompute_overall(winner)
    recompute_overall(loser)

    logger.debug(
        f"1v1 {game}: {winner.id} {winner_rating}->{new_winner_rating}, "
        f"{loser.id} {loser_rating}->{new_loser_rating}"
    )
    return rating_change


def apply_multiplayer(players: Sequence[PlacementEntry], game: str) -> List[int]:
    """
    Apply a placement result to every participant.

    Each player is compared against every other player using the ratings
    captured before any update. A better (lower) placement counts as a win
    for that pairing. The change is K times the gap between the average
    actual and average expected scores, rounded per player, so the changes
    only sum to zero when all starting ratings are equal.

    Args:
        players: Distinct participants with unique placements (mutated)
        game: Game the match was played in

    Returns:
        Rating changes aligned with the input order
    """
    for entry in players:
        ensure_game_stats(entry.user, game)

    original_ratings = [entry.user.game_stats[game].rating for entry in players]
    opponent_count = len(players) - 1

    rating_changes = []
    for i, entry in enumerate(players):
        total_expected = 0.0
        total_actual = 0.0
        for j, opponent in enumerate(players):
            if i == j:
                continue
            total_expected += EloCalculator.calculate_expected_score(
                original_ratings[i], original_ratings[j]
            )
            if entry.placement < opponent.placement:
                total_actual += EloConstants.WIN_SCORE
            else:
                total_actual += EloConstants.LOSS_SCORE

        rating_changes.append(EloCalculator.calculate_placement_change(
            total_actual / opponent_count, total_expected / opponent_count
        ))

    for entry, original_rating, change in zip(players, original_ratings, rating_changes):
        stats = entry.user.game_stats[game]
        stats.rating = original_rating + change

        if entry.placement == MatchConstants.WINNING_PLACEMENT:
            stats.wins += 1
            entry.user.total_wins += 1
        else:
            stats.losses += 1
            entry.user.total_losses += 1

        recompute_overall(entry.user)

    logger.debug(f"Multiplayer {game}: {len(players)} players, changes {rating_changes}")
    return rating_changes
