"""Tests for PlayerOperations and GameOperations."""

import pytest

from ladder.data_models.records import MultiplayerMatch, OneVsOneMatch
from ladder.utils.exceptions import InvalidArgumentError, NotFoundError


class TestCreateUser:
    """Tests for user creation and renaming."""

    async def test_new_user_defaults(self, engine) -> None:
        user = await engine.players.create_user("  Alice ")

        assert user.name == "Alice"
        assert user.rating == 1200
        assert (user.total_wins, user.total_losses) == (0, 0)
        assert user.game_stats == {}
        assert user.win_rate == 0.0
        assert await engine.players.get_user(user.id) == user

    @pytest.mark.parametrize("name", ["", "   ", None])
    async def test_name_required(self, engine, name) -> None:
        with pytest.raises(InvalidArgumentError):
            await engine.players.create_user(name)

    async def test_duplicate_name_ignores_case(self, engine) -> None:
        await engine.players.create_user("Alice")

        with pytest.raises(InvalidArgumentError) as exc_info:
            await engine.players.create_user("aLiCe ")

        assert exc_info.value.user_message == "User with this name already exists"
        assert len(await engine.players.list_users()) == 1

    async def test_rename(self, engine, make_users) -> None:
        alice, _ = await make_users("Alice", "Bob")

        renamed = await engine.players.rename_user(alice.id, "Alicia")

        assert renamed.name == "Alicia"
        assert (await engine.players.get_user(alice.id)).name == "Alicia"

    async def test_rename_to_own_name_in_other_case(self, engine, make_users) -> None:
        (alice,) = await make_users("Alice")
        renamed = await engine.players.rename_user(alice.id, "ALICE")
        assert renamed.name == "ALICE"

    async def test_rename_to_taken_name(self, engine, make_users) -> None:
        alice, _ = await make_users("Alice", "Bob")
        with pytest.raises(InvalidArgumentError):
            await engine.players.rename_user(alice.id, "bob")

    async def test_rename_keeps_ratings(self, engine, make_users) -> None:
        alice, bob = await make_users("Alice", "Bob")
        await engine.matches.record_match(alice.id, bob.id, "Chess")

        renamed = await engine.players.rename_user(alice.id, "Alicia")

        assert renamed.rating == 1216
        assert renamed.game_stats["Chess"].wins == 1

    async def test_unknown_user(self, engine) -> None:
        with pytest.raises(NotFoundError):
            await engine.players.get_user("missing")
        with pytest.raises(NotFoundError):
            await engine.players.rename_user("missing", "Zed")


class TestStandings:
    """Tests for the leaderboard and per-user stats."""

    async def test_leaderboard_order(self, engine, make_users) -> None:
        alice, bob, carol = await make_users("Alice", "Bob", "Carol")
        await engine.matches.record_match(carol.id, alice.id, "Chess")
        await engine.matches.record_match(carol.id, bob.id, "Pool")
        await engine.matches.record_match(bob.id, alice.id, "Pool")

        ratings = [user.rating for user in await engine.players.list_users()]

        assert ratings == sorted(ratings, reverse=True)
        assert (await engine.players.list_users())[0].id == carol.id

    async def test_user_stats(self, engine, make_users) -> None:
        alice, bob, carol, dave = await make_users("Alice", "Bob", "Carol", "Dave")
        await engine.matches.record_match(alice.id, bob.id, "Chess")
        await engine.matches.record_match(carol.id, dave.id, "Chess")
        await engine.matches.record_multiplayer_match(
            [dave.id, carol.id, bob.id, alice.id], "Mario Kart"
        )

        stats = await engine.players.get_user_stats(alice.id)

        assert stats.user.id == alice.id
        assert len(stats.matches) == 2
        assert isinstance(stats.matches[0], MultiplayerMatch)
        assert isinstance(stats.matches[1], OneVsOneMatch)
        assert stats.user.total_wins == 1
        assert stats.user.total_losses == 1
        assert stats.user.win_rate == 50.0

    async def test_user_stats_unknown(self, engine) -> None:
        with pytest.raises(NotFoundError):
            await engine.players.get_user_stats("missing")


class TestGameCatalogue:
    """Tests for GameOperations."""

    async def test_default_games(self, engine) -> None:
        games = await engine.games.list_games()
        assert "Chess" in games
        assert "Mario Kart" in games

    async def test_add_game(self, engine) -> None:
        name = await engine.games.add_game("  Darts ")
        assert name == "Darts"
        assert (await engine.games.list_games())[-1] == "Darts"

    async def test_add_duplicate(self, engine) -> None:
        with pytest.raises(InvalidArgumentError) as exc_info:
            await engine.games.add_game("Chess")
        assert exc_info.value.user_message == "Game already exists"

    @pytest.mark.parametrize("name", ["", "  ", None])
    async def test_add_empty(self, engine, name) -> None:
        with pytest.raises(InvalidArgumentError):
            await engine.games.add_game(name)

    async def test_delete_game(self, engine) -> None:
        await engine.games.delete_game("Chess")
        await engine.games.delete_game("Chess")
        assert "Chess" not in await engine.games.list_games()

    async def test_catalogue_is_advisory(self, engine, make_users) -> None:
        """Matches may name games outside the catalogue, and deleting keeps stats."""
        alice, bob = await make_users("Alice", "Bob")
        await engine.matches.record_match(alice.id, bob.id, "Croquet")
        await engine.games.delete_game("Croquet")

        stored = await engine.players.get_user(alice.id)
        assert stored.game_stats["Croquet"].rating == 1216
