"""
Match Operations - recording results and applying rating updates

Pattern for every recorded match:
1. Validate the request (no record is touched on failure)
2. Lock every involved user (and the bound challenge, if any)
3. Read private copies, run the rating engine and the aggregator
4. Persist the updated users and the immutable match record together

The locks make the read-modify-write of a user's ratings exclusive within
this process, so two matches sharing a player cannot lose an update.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence

from ladder.config import Config
from ladder.data_models.records import (
    Challenge, Match, MultiplayerMatch, MultiplayerPlacement, OneVsOneMatch, User
)
from ladder.database.repository import Repository
from ladder.operations.challenge_operations import complete_transition
from ladder.operations.rating_engine import PlacementEntry, apply_1v1, apply_multiplayer
from ladder.services.record_locks import KeyedLockRegistry, challenge_key, user_key
from ladder.utils.clock import Clock
from ladder.utils.elo import EloCalculator
from ladder.utils.exceptions import InvalidArgumentError, NotFoundError
from ladder.utils.logger import setup_logger

logger = setup_logger(__name__)


@dataclass
class MatchRecordResult:
    """Result of recording a match"""
    match: Match
    users: List[User]  # Updated participants, in request order
    challenge: Optional[Challenge] = None  # Completed challenge when one was bound


class MatchOperations:
    """
    Service class for recording 1v1 and multiplayer matches.
    """

    def __init__(self, repository: Repository, clock: Clock, locks: KeyedLockRegistry):
        """
        Args:
            repository: Storage collaborator
            clock: Source of match timestamps
            locks: Shared lock registry (also used by ChallengeOperations)
        """
        self.repository = repository
        self.clock = clock
        self.locks = locks
        self.logger = logger

    async def _load_user(self, user_id: str) -> User:
        user = await self.repository.get_user(user_id)
        if user is None:
            raise NotFoundError("user", user_id)
        return user

    async def record_match(
        self,
        winner_id: str,
        loser_id: str,
        game: str,
        challenge_id: Optional[str] = None
    ) -> MatchRecordResult:
        """
        Record a head-to-head result.

        When challenge_id is given, the challenge must be accepted and must be
        between the same two users for the same game; it is completed as part
        of recording the match.

        Args:
            winner_id: ID of the winning user
            loser_id: ID of the losing user
            game: Game that was played
            challenge_id: Optional accepted challenge this match settles

        Returns:
            MatchRecordResult with the stored match and updated users

        Raises:
            InvalidArgumentError: Missing field, same user twice, or a
                challenge that does not describe this match
            NotFoundError: Unknown user or challenge
            InvalidTransitionError: Bound challenge is not accepted
        """
        game = (game or "").strip()
        if not winner_id or not loser_id or not game:
            raise InvalidArgumentError("Winner, loser, and game are required")

        if winner_id == loser_id:
            self.logger.warning(f"Rejected match with user {winner_id} on both sides")
            raise InvalidArgumentError("Winner and loser must be different users")

        keys = [user_key(winner_id), user_key(loser_id)]
        if challenge_id:
            keys.append(challenge_key(challenge_id))

        async with self.locks.hold(*keys):
            winner = await self._load_user(winner_id)
            loser = await self._load_user(loser_id)

            completed_challenge = None
            if challenge_id:
                completed_challenge = await self._settle_challenge(
                    challenge_id, winner_id, loser_id, game
                )

            winner_rating_before = winner.rating
            loser_rating_before = loser.rating

            rating_change = apply_1v1(winner, loser, game)

            match = OneVsOneMatch(
                game=game,
                winner_id=winner.id,
                winner_name=winner.name,
                winner_rating_before=winner_rating_before,
                winner_rating_after=winner.rating,
                loser_id=loser.id,
                loser_name=loser.name,
                loser_rating_before=loser_rating_before,
                loser_rating_after=loser.rating,
                rating_change=rating_change,
                date=self.clock.now(),
                challenge_id=challenge_id or None,
            )
            stored = await self.repository.save_match_result(
                [winner, loser], match, completed_challenge
            )

        self.logger.info(
            f"Recorded {game} match {stored.id}: {winner.name} beat {loser.name} "
            f"({EloCalculator.format_elo_change(rating_change)})"
        )
        return MatchRecordResult(match=stored, users=[winner, loser], challenge=completed_challenge)

    async def _settle_challenge(
        self,
        challenge_id: str,
        winner_id: str,
        loser_id: str,
        game: str
    ) -> Challenge:
        """Validate a bound challenge against the match and return it completed"""
        challenge = await self.repository.get_challenge(challenge_id)
        if challenge is None:
            raise NotFoundError("challenge", challenge_id)

        if not challenge.involves_pair(winner_id, loser_id):
            raise InvalidArgumentError("Challenge is not between the winner and loser")
        if challenge.game != game:
            raise InvalidArgumentError(
                f"Challenge is for {challenge.game}, match was {game}"
            )

        return complete_transition(challenge, self.clock.now())

    async def record_multiplayer_match(
        self,
        player_ids: Sequence[str],
        game: str
    ) -> MatchRecordResult:
        """
        Record a four-player result.

        Args:
            player_ids: User IDs in finishing order (first place first)
            game: Game that was played

        Returns:
            MatchRecordResult with the stored match and updated users

        Raises:
            InvalidArgumentError: Wrong player count, duplicates, or missing game
            NotFoundError: Any user does not exist
        """
        player_count = Config.MULTIPLAYER_PLAYER_COUNT
        if not isinstance(player_ids, (list, tuple)) or len(player_ids) != player_count:
            raise InvalidArgumentError(
                f"Exactly {player_count} player IDs required in placement order"
            )

        game = (game or "").strip()
        if not game:
            raise InvalidArgumentError("Game is required")

        if not all(player_ids):
            raise InvalidArgumentError("Player IDs are required")

        if len(set(player_ids)) != player_count:
            self.logger.warning(f"Rejected multiplayer match with players {list(player_ids)}")
            raise InvalidArgumentError("All players must be different")

        async with self.locks.hold(*(user_key(pid) for pid in player_ids)):
            users = [await self._load_user(pid) for pid in player_ids]

            entries = [
                PlacementEntry(user=user, placement=index + 1)
                for index, user in enumerate(users)
            ]
            ratings_before = [user.rating for user in users]

            rating_changes = apply_multiplayer(entries, game)

            match = MultiplayerMatch(
                game=game,
                players=tuple(
                    MultiplayerPlacement(
                        user_id=entry.user.id,
                        name=entry.user.name,
                        placement=entry.placement,
                        rating_before=rating_before,
                        rating_after=entry.user.rating,
                        rating_change=change,
                    )
                    for entry, rating_before, change in zip(entries, ratings_before, rating_changes)
                ),
                date=self.clock.now(),
            )
            stored = await self.repository.save_match_result(users, match)

        self.logger.info(
            f"Recorded {game} multiplayer match {stored.id}: "
            + ", ".join(
                f"{p.placement}. {p.name} ({EloCalculator.format_elo_change(p.rating_change)})"
                for p in stored.players
            )
        )
        return MatchRecordResult(match=stored, users=users)

    async def list_matches(self) -> List[Match]:
        """All recorded matches, newest first"""
        return await self.repository.list_matches()
