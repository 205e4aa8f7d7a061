"""
SQLAlchemy-backed Repository.

Maps the record dataclasses onto the ORM rows in ladder.database.models.
Each public method runs in its own transaction; save_match_result writes
the updated users, the match and its participants (and the completed
challenge, when there is one) in a single transaction.
"""

import dataclasses
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from sqlalchemy import select, delete as sql_delete
from sqlalchemy.ext.asyncio import AsyncSession

from ladder.constants import MatchConstants
from ladder.data_models.records import (
    Challenge, GameStats, Match, MultiplayerMatch, MultiplayerPlacement,
    OneVsOneMatch, User
)
from ladder.database.database import Database
from ladder.database.models import (
    ChallengeRow, GameRow, MatchParticipantRow, MatchRow, UserGameStatsRow, UserRow
)
from ladder.database.repository import Repository
from ladder.utils.logger import setup_logger

logger = setup_logger(__name__)


def _as_utc(value: datetime) -> datetime:
    """SQLite drops tzinfo; stored timestamps are always UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SqlAlchemyRepository(Repository):
    def __init__(self, db: Database):
        self.db = db

    # Users
    async def get_user(self, user_id: str) -> Optional[User]:
        async with self.db.get_session() as session:
            row = await session.get(UserRow, user_id)
            return self._user_from_row(row) if row else None

    async def list_users(self) -> List[User]:
        async with self.db.get_session() as session:
            result = await session.execute(select(UserRow))
            return [self._user_from_row(row) for row in result.scalars().all()]

    async def save_user(self, user: User) -> None:
        async with self.db.transaction() as session:
            await self._upsert_user(session, user)

    # Matches
    async def append_match(self, match: Match) -> Match:
        async with self.db.transaction() as session:
            return await self._insert_match(session, match)

    async def save_match_result(
        self,
        users: Sequence[User],
        match: Match,
        challenge: Optional[Challenge] = None,
    ) -> Match:
        async with self.db.transaction() as session:
            for user in users:
                await self._upsert_user(session, user)
            if challenge is not None:
                await self._upsert_challenge(session, challenge)
            stored = await self._insert_match(session, match)
        logger.debug(f"Stored match {stored.id} with {len(users)} user updates")
        return stored

    async def list_matches(self) -> List[Match]:
        async with self.db.get_session() as session:
            result = await session.execute(
                select(MatchRow).order_by(MatchRow.date.desc(), MatchRow.id.desc())
            )
            return [self._match_from_row(row) for row in result.scalars().all()]

    # Challenges
    async def get_challenge(self, challenge_id: str) -> Optional[Challenge]:
        async with self.db.get_session() as session:
            row = await session.get(ChallengeRow, challenge_id)
            return self._challenge_from_row(row) if row else None

    async def list_challenges(self) -> List[Challenge]:
        async with self.db.get_session() as session:
            result = await session.execute(
                select(ChallengeRow).order_by(ChallengeRow.created_at.desc())
            )
            return [self._challenge_from_row(row) for row in result.scalars().all()]

    async def save_challenge(self, challenge: Challenge) -> None:
        async with self.db.transaction() as session:
            await self._upsert_challenge(session, challenge)

    async def delete_challenge(self, challenge_id: str) -> None:
        async with self.db.transaction() as session:
            await session.execute(
                sql_delete(ChallengeRow).where(ChallengeRow.id == challenge_id)
            )

    # Game catalogue
    async def list_games(self) -> List[str]:
        async with self.db.get_session() as session:
            result = await session.execute(select(GameRow.name).order_by(GameRow.id))
            return list(result.scalars().all())

    async def add_game(self, name: str) -> None:
        async with self.db.transaction() as session:
            result = await session.execute(select(GameRow).where(GameRow.name == name))
            if result.scalar_one_or_none() is None:
                session.add(GameRow(name=name))

    async def delete_game(self, name: str) -> None:
        async with self.db.transaction() as session:
            await session.execute(sql_delete(GameRow).where(GameRow.name == name))

    # Row mapping
    async def _upsert_user(self, session: AsyncSession, user: User) -> None:
        row = await session.get(UserRow, user.id)
        if row is None:
            row = UserRow(id=user.id, created_at=user.created_at)
            session.add(row)
            row.game_stats = []

        row.name = user.name
        row.rating = user.rating
        row.total_wins = user.total_wins
        row.total_losses = user.total_losses

        existing = {stats_row.game: stats_row for stats_row in row.game_stats}
        for game, stats in user.game_stats.items():
            stats_row = existing.get(game)
            if stats_row is None:
                stats_row = UserGameStatsRow(game=game)
                row.game_stats.append(stats_row)
            stats_row.rating = stats.rating
            stats_row.wins = stats.wins
            stats_row.losses = stats.losses

    async def _upsert_challenge(self, session: AsyncSession, challenge: Challenge) -> None:
        row = await session.get(ChallengeRow, challenge.id)
        if row is None:
            row = ChallengeRow(id=challenge.id)
            session.add(row)
        row.challenger_id = challenge.challenger_id
        row.challenger_name = challenge.challenger_name
        row.challenged_id = challenge.challenged_id
        row.challenged_name = challenge.challenged_name
        row.game = challenge.game
        row.message = challenge.message
        row.status = challenge.status
        row.created_at = challenge.created_at
        row.updated_at = challenge.updated_at

    async def _insert_match(self, session: AsyncSession, match: Match) -> Match:
        if isinstance(match, OneVsOneMatch):
            row = MatchRow(
                match_type=MatchConstants.MATCH_TYPE_ONE_V_ONE,
                game=match.game,
                rating_change=match.rating_change,
                challenge_id=match.challenge_id,
                date=match.date,
            )
            row.participants = [
                MatchParticipantRow(
                    user_id=match.winner_id,
                    user_name=match.winner_name,
                    placement=1,
                    rating_before=match.winner_rating_before,
                    rating_after=match.winner_rating_after,
                    rating_change=match.rating_change,
                ),
                MatchParticipantRow(
                    user_id=match.loser_id,
                    user_name=match.loser_name,
                    placement=2,
                    rating_before=match.loser_rating_before,
                    rating_after=match.loser_rating_after,
                    rating_change=-match.rating_change,
                ),
            ]
        else:
            row = MatchRow(
                match_type=MatchConstants.MATCH_TYPE_MULTIPLAYER,
                game=match.game,
                date=match.date,
            )
            row.participants = [
                MatchParticipantRow(
                    user_id=player.user_id,
                    user_name=player.name,
                    placement=player.placement,
                    rating_before=player.rating_before,
                    rating_after=player.rating_after,
                    rating_change=player.rating_change,
                )
                for player in match.players
            ]

        session.add(row)
        await session.flush()  # Get match ID
        return dataclasses.replace(match, id=str(row.id))

    @staticmethod
    def _user_from_row(row: UserRow) -> User:
        return User(
            id=row.id,
            name=row.name,
            created_at=_as_utc(row.created_at),
            rating=row.rating,
            total_wins=row.total_wins,
            total_losses=row.total_losses,
            game_stats={
                stats.game: GameStats(rating=stats.rating, wins=stats.wins, losses=stats.losses)
                for stats in row.game_stats
            },
        )

    @staticmethod
    def _challenge_from_row(row: ChallengeRow) -> Challenge:
        return Challenge(
            id=row.id,
            challenger_id=row.challenger_id,
            challenger_name=row.challenger_name,
            challenged_id=row.challenged_id,
            challenged_name=row.challenged_name,
            game=row.game,
            message=row.message or "",
            status=row.status,
            created_at=_as_utc(row.created_at),
            updated_at=_as_utc(row.updated_at),
        )

    @staticmethod
    def _match_from_row(row: MatchRow) -> Match:
        participants = sorted(row.participants, key=lambda p: p.placement)
        if row.match_type == MatchConstants.MATCH_TYPE_ONE_V_ONE:
            winner, loser = participants
            return OneVsOneMatch(
                id=str(row.id),
                game=row.game,
                winner_id=winner.user_id,
                winner_name=winner.user_name,
                winner_rating_before=winner.rating_before,
                winner_rating_after=winner.rating_after,
                loser_id=loser.user_id,
                loser_name=loser.user_name,
                loser_rating_before=loser.rating_before,
                loser_rating_after=loser.rating_after,
                rating_change=row.rating_change,
                date=_as_utc(row.date),
                challenge_id=row.challenge_id,
            )
        return MultiplayerMatch(
            id=str(row.id),
            game=row.game,
            players=tuple(
                MultiplayerPlacement(
                    user_id=p.user_id,
                    name=p.user_name,
                    placement=p.placement,
                    rating_before=p.rating_before,
                    rating_after=p.rating_after,
                    rating_change=p.rating_change,
                )
                for p in participants
            ),
            date=_as_utc(row.date),
        )
