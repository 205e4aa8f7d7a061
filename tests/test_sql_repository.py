"""Tests for the SQLAlchemy-backed repository on a temporary SQLite file."""

import pytest

from ladder.config import Config
from ladder.data_models.records import ChallengeStatus, GameStats, User
from ladder.database.database import Database
from ladder.database.sql_repository import SqlAlchemyRepository
from ladder.main import build_engine, create_engine
from ladder.utils.exceptions import ConflictError


@pytest.fixture
async def db(tmp_path):
    database = Database(f"sqlite+aiosqlite:///{tmp_path / 'ladder.db'}")
    await database.initialize()
    yield database
    await database.close()


@pytest.fixture
def sql_engine(db, clock):
    return create_engine(SqlAlchemyRepository(db), clock)


class TestSqlAlchemyRepository:
    """Tests for row mapping and persistence."""

    async def test_seeds_default_games_once(self, db) -> None:
        repository = SqlAlchemyRepository(db)
        assert await repository.list_games() == Config.get_default_games()

        await db.initialize_default_data()

        assert await repository.list_games() == Config.get_default_games()

    async def test_user_round_trip(self, db, clock) -> None:
        repository = SqlAlchemyRepository(db)
        user = User(id="u1", name="Alice", created_at=clock.now())
        await repository.save_user(user)

        user.rating = 1250
        user.total_wins = 3
        user.total_losses = 1
        user.game_stats["Chess"] = GameStats(rating=1300, wins=3, losses=0)
        user.game_stats["Pool"] = GameStats(rating=1200, wins=0, losses=1)
        await repository.save_user(user)

        assert await repository.get_user("u1") == user
        assert await repository.list_users() == [user]
        assert await repository.get_user("missing") is None

    async def test_game_catalogue(self, db) -> None:
        repository = SqlAlchemyRepository(db)
        await repository.add_game("Darts")
        await repository.add_game("Darts")
        await repository.delete_game("Chess")

        games = await repository.list_games()

        assert games.count("Darts") == 1
        assert "Chess" not in games


class TestEngineOverDatabase:
    """The operations layer behaves the same on the database backend."""

    async def test_one_v_one_match(self, sql_engine, clock) -> None:
        alice = await sql_engine.players.create_user("Alice")
        bob = await sql_engine.players.create_user("Bob")

        result = await sql_engine.matches.record_match(alice.id, bob.id, "Chess")

        assert result.match.rating_change == 16
        assert await sql_engine.matches.list_matches() == [result.match]
        stored = await sql_engine.players.get_user(alice.id)
        assert stored.rating == 1216
        assert stored.game_stats == {"Chess": GameStats(rating=1216, wins=1, losses=0)}

    async def test_multiplayer_match(self, sql_engine) -> None:
        users = [
            await sql_engine.players.create_user(name)
            for name in ("Alice", "Bob", "Carol", "Dave")
        ]

        result = await sql_engine.matches.record_multiplayer_match(
            [u.id for u in users], "Mario Kart"
        )

        history = await sql_engine.matches.list_matches()
        assert history == [result.match]
        assert [p.rating_change for p in history[0].players] == [16, 5, -5, -16]

    async def test_history_newest_first(self, sql_engine) -> None:
        alice = await sql_engine.players.create_user("Alice")
        bob = await sql_engine.players.create_user("Bob")
        first = await sql_engine.matches.record_match(alice.id, bob.id, "Chess")
        second = await sql_engine.matches.record_match(bob.id, alice.id, "Pool")

        history = await sql_engine.matches.list_matches()

        assert [m.id for m in history] == [second.match.id, first.match.id]

    async def test_challenge_lifecycle(self, sql_engine) -> None:
        alice = await sql_engine.players.create_user("Alice")
        bob = await sql_engine.players.create_user("Bob")
        challenge = await sql_engine.challenges.create_challenge(alice.id, bob.id, "Chess", "gg?")
        assert await sql_engine.challenges.get_challenge(challenge.id) == challenge

        await sql_engine.challenges.respond(challenge.id, "accepted")
        result = await sql_engine.matches.record_match(bob.id, alice.id, "Chess", challenge.id)

        stored = await sql_engine.challenges.get_challenge(challenge.id)
        assert stored.status == ChallengeStatus.COMPLETED
        assert result.match.challenge_id == challenge.id
        assert (await sql_engine.matches.list_matches())[0].challenge_id == challenge.id

        with pytest.raises(ConflictError):
            await sql_engine.challenges.delete(challenge.id)

    async def test_delete_pending_challenge(self, sql_engine) -> None:
        alice = await sql_engine.players.create_user("Alice")
        bob = await sql_engine.players.create_user("Bob")
        challenge = await sql_engine.challenges.create_challenge(alice.id, bob.id, "Chess")

        await sql_engine.challenges.delete(challenge.id)

        assert await sql_engine.challenges.list_challenges() == []


class TestBuildEngine:
    """Tests for backend selection from Config."""

    async def test_memory_backend(self, monkeypatch) -> None:
        monkeypatch.setattr(Config, "STORAGE_BACKEND", "memory")

        engine = await build_engine()

        assert engine.db is None
        assert await engine.games.list_games() == Config.get_default_games()
        await engine.close()

    async def test_database_backend(self, monkeypatch, tmp_path) -> None:
        monkeypatch.setattr(Config, "STORAGE_BACKEND", "database")
        monkeypatch.setattr(Config, "DATABASE_URL", f"sqlite:///{tmp_path / 'ladder.db'}")

        engine = await build_engine()
        try:
            assert isinstance(engine.repository, SqlAlchemyRepository)
            user = await engine.players.create_user("Alice")
            assert (await engine.players.get_user(user.id)).name == "Alice"
        finally:
            await engine.close()

    async def test_unknown_backend(self, monkeypatch) -> None:
        monkeypatch.setattr(Config, "STORAGE_BACKEND", "redis")
        with pytest.raises(ValueError):
            await build_engine()

    def test_async_database_url(self, monkeypatch) -> None:
        monkeypatch.setattr(Config, "DATABASE_URL", "sqlite:///data/ladder.db")
        assert Config.get_async_database_url() == "sqlite+aiosqlite:///data/ladder.db"
