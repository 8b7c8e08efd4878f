"""Tests for PlaybackControlsView - the Replay / Skip / Stop buttons."""

from unittest.mock import AsyncMock, MagicMock

import discord
import pytest
import pytest_asyncio

from discord_voice_queue.application.services.session_registry import SessionRegistry
from discord_voice_queue.domain.shared.messages import DiscordUIMessages
from discord_voice_queue.infrastructure.discord.views.playback_controls_view import (
    REPLAY_CUSTOM_ID,
    SKIP_CUSTOM_ID,
    STOP_CUSTOM_ID,
    PlaybackControlsView,
)

GUILD_ID = 1


@pytest.fixture
def registry(make_session):
    return SessionRegistry(make_session)


@pytest_asyncio.fixture
async def playing_session(registry, channel, track):
    session = registry.get(GUILD_ID)
    await session.connect(channel(10))
    for title in ("A", "B"):
        await session.enqueue(track(title))
    return session


def _make_interaction(*, voice_channel_id: int | None = 10, guild_id: int | None = GUILD_ID):
    interaction = MagicMock(spec=discord.Interaction)
    interaction.guild_id = guild_id

    user = MagicMock(spec=discord.Member)
    if voice_channel_id is None:
        user.voice = None
    else:
        user.voice = MagicMock()
        user.voice.channel = MagicMock()
        user.voice.channel.id = voice_channel_id
    interaction.user = user

    responded = {"done": False}

    async def _defer(**kwargs):
        responded["done"] = True

    interaction.response = MagicMock()
    interaction.response.is_done.side_effect = lambda: responded["done"]
    interaction.response.defer = AsyncMock(side_effect=_defer)
    interaction.response.send_message = AsyncMock()
    interaction.followup = MagicMock()
    interaction.followup.send = AsyncMock()
    return interaction


def _sent(interaction) -> str:
    if interaction.followup.send.await_count:
        return interaction.followup.send.await_args.args[0]
    return interaction.response.send_message.await_args.args[0]


# =============================================================================
# Construction
# =============================================================================


@pytest.mark.asyncio
async def test_view_is_persistent(registry):
    view = PlaybackControlsView(registry)

    assert view.timeout is None
    assert view.is_persistent()
    assert {item.custom_id for item in view.children} == {
        REPLAY_CUSTOM_ID,
        SKIP_CUSTOM_ID,
        STOP_CUSTOM_ID,
    }


# =============================================================================
# interaction_check
# =============================================================================


class TestInteractionCheck:
    @pytest.mark.asyncio
    async def test_no_session_rejected_without_creating_one(self, registry):
        view = PlaybackControlsView(registry)
        interaction = _make_interaction()

        assert await view.interaction_check(interaction) is False
        assert _sent(interaction) == DiscordUIMessages.STATE_NO_ACTIVE_QUEUE
        assert registry.find(GUILD_ID) is None

    @pytest.mark.asyncio
    async def test_user_outside_bot_channel_rejected(self, registry, playing_session):
        view = PlaybackControlsView(registry)
        interaction = _make_interaction(voice_channel_id=99)

        assert await view.interaction_check(interaction) is False
        assert _sent(interaction) == DiscordUIMessages.STATE_MUST_SHARE_VOICE_BUTTON

    @pytest.mark.asyncio
    async def test_user_in_bot_channel_allowed(self, registry, playing_session):
        view = PlaybackControlsView(registry)

        assert await view.interaction_check(_make_interaction()) is True

    @pytest.mark.asyncio
    async def test_dm_interaction_rejected(self, registry):
        view = PlaybackControlsView(registry)

        assert await view.interaction_check(_make_interaction(guild_id=None)) is False


# =============================================================================
# Buttons
# =============================================================================


class TestButtons:
    @pytest.mark.asyncio
    async def test_replay(self, registry, playing_session, player):
        view = PlaybackControlsView(registry)
        interaction = _make_interaction()

        await view.replay_button.callback(interaction)

        interaction.response.defer.assert_awaited_once_with(ephemeral=True, thinking=True)
        assert _sent(interaction) == DiscordUIMessages.ACTION_REPLAYED
        assert player.played == ["A", "A"]

    @pytest.mark.asyncio
    async def test_replay_failure(self, registry, playing_session, resolver):
        view = PlaybackControlsView(registry)
        resolver.failing.add("A")
        interaction = _make_interaction()

        await view.replay_button.callback(interaction)

        assert _sent(interaction) == DiscordUIMessages.ACTION_REPLAY_FAILED

    @pytest.mark.asyncio
    async def test_replay_with_nothing_playing(self, registry, channel):
        await registry.get(GUILD_ID).connect(channel(10))
        view = PlaybackControlsView(registry)
        interaction = _make_interaction()

        await view.replay_button.callback(interaction)

        interaction.response.defer.assert_not_awaited()
        assert _sent(interaction) == DiscordUIMessages.STATE_NOTHING_TO_REPLAY

    @pytest.mark.asyncio
    async def test_skip(self, registry, playing_session, player):
        view = PlaybackControlsView(registry)
        interaction = _make_interaction()

        await view.skip_button.callback(interaction)
        await player.drain()

        assert _sent(interaction) == DiscordUIMessages.ACTION_SKIPPED_BUTTON
        assert playing_session.current_track.title == "B"

    @pytest.mark.asyncio
    async def test_skip_with_nothing_playing(self, registry, channel):
        await registry.get(GUILD_ID).connect(channel(10))
        view = PlaybackControlsView(registry)
        interaction = _make_interaction()

        await view.skip_button.callback(interaction)

        assert _sent(interaction) == DiscordUIMessages.STATE_NOTHING_TO_SKIP

    @pytest.mark.asyncio
    async def test_stop(self, registry, playing_session, transport):
        view = PlaybackControlsView(registry)
        interaction = _make_interaction()

        await view.stop_button.callback(interaction)

        assert _sent(interaction) == DiscordUIMessages.ACTION_STOPPED_BUTTON
        assert registry.find(GUILD_ID) is None
        assert transport.handles[0].destroyed
        assert playing_session.is_closed


# =============================================================================
# on_error
# =============================================================================


@pytest.mark.asyncio
async def test_on_error_reports_generic_message(registry, caplog):
    view = PlaybackControlsView(registry)
    interaction = _make_interaction()

    await view.on_error(interaction, RuntimeError("kaboom"), view.skip_button)

    assert _sent(interaction) == DiscordUIMessages.ERROR_GENERIC
    assert SKIP_CUSTOM_ID in caplog.text
