"""
Challenge Operations - challenge lifecycle management

A challenge is a proposed 1v1 match. It moves through a small state machine:

    pending  -> accepted | declined   (respond)
    accepted -> completed             (complete)

Pending and declined challenges may be deleted; accepted and completed ones
are durable records. Completing a challenge never touches ratings: the match
itself is recorded through MatchOperations, optionally bound to the
challenge so both happen in one step.
"""

import dataclasses
from datetime import datetime
from typing import Dict, FrozenSet, List, Optional

from ladder.constants import ChallengeConstants
from ladder.data_models.records import Challenge, ChallengeStatus
from ladder.database.repository import Repository
from ladder.services.record_locks import KeyedLockRegistry, challenge_key
from ladder.utils.clock import Clock
from ladder.utils.exceptions import (
    ConflictError, InvalidArgumentError, InvalidTransitionError, NotFoundError
)
from ladder.utils.logger import setup_logger

logger = setup_logger(__name__)


ALLOWED_TRANSITIONS: Dict[ChallengeStatus, FrozenSet[ChallengeStatus]] = {
    ChallengeStatus.PENDING: frozenset({ChallengeStatus.ACCEPTED, ChallengeStatus.DECLINED}),
    ChallengeStatus.ACCEPTED: frozenset({ChallengeStatus.COMPLETED}),
    ChallengeStatus.DECLINED: frozenset(),
    ChallengeStatus.COMPLETED: frozenset(),
}

DELETABLE_STATUSES = frozenset({ChallengeStatus.PENDING, ChallengeStatus.DECLINED})

RESPONSE_DECISIONS = {
    ChallengeConstants.DECISION_ACCEPTED: ChallengeStatus.ACCEPTED,
    ChallengeConstants.DECISION_DECLINED: ChallengeStatus.DECLINED,
}


def _transition(challenge: Challenge, target: ChallengeStatus, action: str, now: datetime) -> Challenge:
    if target not in ALLOWED_TRANSITIONS[challenge.status]:
        raise InvalidTransitionError(challenge.id, challenge.status.value, action)
    return dataclasses.replace(challenge, status=target, updated_at=now)


def respond_transition(challenge: Challenge, decision: str, now: datetime) -> Challenge:
    """
    Accept or decline a pending challenge.

    Args:
        challenge: Current challenge (not modified)
        decision: "accepted" or "declined"
        now: Timestamp for updated_at

    Returns:
        Challenge in its new status

    Raises:
        InvalidArgumentError: If decision is not accepted/declined
        InvalidTransitionError: If the challenge is not pending
    """
    target = RESPONSE_DECISIONS.get(decision)
    if target is None:
        raise InvalidArgumentError("Valid status (accepted/declined) is required")
    if challenge.status != ChallengeStatus.PENDING:
        raise InvalidTransitionError(
            challenge.id,
            challenge.status.value,
            "respond to",
            "Challenge has already been responded to"
        )
    return _transition(challenge, target, "respond to", now)


def complete_transition(challenge: Challenge, now: datetime) -> Challenge:
    """Mark an accepted challenge as completed."""
    if challenge.status != ChallengeStatus.ACCEPTED:
        raise InvalidTransitionError(
            challenge.id,
            challenge.status.value,
            "complete",
            "Only accepted challenges can be completed"
        )
    return _transition(challenge, ChallengeStatus.COMPLETED, "complete", now)


def ensure_deletable(challenge: Challenge) -> None:
    """Raise ConflictError unless the challenge is pending or declined."""
    if challenge.status not in DELETABLE_STATUSES:
        raise ConflictError(challenge.id, challenge.status.value)


class ChallengeOperations:
    """
    Service class for challenge-related operations.

    Every transition is a read-check-write on a single challenge, held under
    that challenge's lock so two concurrent responses cannot both succeed.
    """

    def __init__(self, repository: Repository, clock: Clock, locks: KeyedLockRegistry):
        """
        Args:
            repository: Storage collaborator
            clock: Source of timestamps and ids
            locks: Shared lock registry (also used by MatchOperations)
        """
        self.repository = repository
        self.clock = clock
        self.locks = locks
        self.logger = logger

    async def create_challenge(
        self,
        challenger_id: str,
        challenged_id: str,
        game: str,
        message: Optional[str] = None
    ) -> Challenge:
        """
        Create a pending challenge from one user to another.

        Raises:
            InvalidArgumentError: Missing field or self-challenge
            NotFoundError: Either user does not exist
        """
        game = (game or "").strip()
        if not challenger_id or not challenged_id or not game:
            raise InvalidArgumentError("Challenger, challenged user, and game are required")

        if challenger_id == challenged_id:
            self.logger.warning(f"Rejected self-challenge by user {challenger_id}")
            raise InvalidArgumentError("You cannot challenge yourself")

        challenger = await self.repository.get_user(challenger_id)
        if challenger is None:
            raise NotFoundError("user", challenger_id)
        challenged = await self.repository.get_user(challenged_id)
        if challenged is None:
            raise NotFoundError("user", challenged_id)

        now = self.clock.now()
        challenge = Challenge(
            id=self.clock.new_id(),
            challenger_id=challenger.id,
            challenger_name=challenger.name,
            challenged_id=challenged.id,
            challenged_name=challenged.name,
            game=game,
            message=message or "",
            status=ChallengeStatus.PENDING,
            created_at=now,
            updated_at=now,
        )
        await self.repository.save_challenge(challenge)

        self.logger.info(
            f"Created challenge {challenge.id}: {challenger.name} vs {challenged.name} in {game}"
        )
        return challenge

    async def get_challenge(self, challenge_id: str) -> Challenge:
        """Retrieve a challenge, raising NotFoundError if absent"""
        challenge = await self.repository.get_challenge(challenge_id)
        if challenge is None:
            raise NotFoundError("challenge", challenge_id)
        return challenge

    async def list_challenges(self) -> List[Challenge]:
        """All challenges, newest first"""
        return await self.repository.list_challenges()

    async def respond(self, challenge_id: str, decision: str) -> Challenge:
        """Accept or decline a pending challenge"""
        if decision not in RESPONSE_DECISIONS:
            raise InvalidArgumentError("Valid status (accepted/declined) is required")

        async with self.locks.hold(challenge_key(challenge_id)):
            challenge = await self.get_challenge(challenge_id)
            try:
                updated = respond_transition(challenge, decision, self.clock.now())
            except InvalidTransitionError as e:
                self.logger.warning(f"Rejected response to challenge {challenge_id}: {e}")
                raise
            await self.repository.save_challenge(updated)

        self.logger.info(f"Challenge {challenge_id} {updated.status.value}")
        return updated

    async def complete(self, challenge_id: str) -> Challenge:
        """Mark an accepted challenge as completed"""
        async with self.locks.hold(challenge_key(challenge_id)):
            challenge = await self.get_challenge(challenge_id)
            try:
                updated = complete_transition(challenge, self.clock.now())
            except InvalidTransitionError as e:
                self.logger.warning(f"Rejected completion of challenge {challenge_id}: {e}")
                raise
            await self.repository.save_challenge(updated)

        self.logger.info(f"Challenge {challenge_id} completed")
        return updated

    async def delete(self, challenge_id: str) -> None:
        """Delete a pending or declined challenge"""
        async with self.locks.hold(challenge_key(challenge_id)):
            challenge = await self.get_challenge(challenge_id)
            try:
                ensure_deletable(challenge)
            except ConflictError as e:
                self.logger.warning(f"Rejected deletion of challenge {challenge_id}: {e}")
                raise
            await self.repository.delete_challenge(challenge_id)

        self.logger.info(f"Deleted challenge {challenge_id}")
