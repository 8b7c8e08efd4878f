"""
Unit Tests for MusicCog

Tests for the prefix commands and the voice-state listener:
- .play (guards, resolution, connection failures)
- .queue / .kuyruk
- .next / .skip
- .clear
- .stop
- external disconnects

Sessions are real PlaybackSession objects wired to in-memory collaborators;
Discord objects are mocks.
"""

from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from discord_voice_queue.application.services.session_registry import SessionRegistry
from discord_voice_queue.domain.music.value_objects import SessionState
from discord_voice_queue.domain.shared.messages import DiscordUIMessages
from discord_voice_queue.infrastructure.discord.cogs.music_cog import MusicCog

GUILD_ID = 1
BOT_USER_ID = 4242

# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def registry(make_session):
    return SessionRegistry(make_session)


@pytest.fixture
def container(registry, resolver):
    container = MagicMock()
    container.session_registry = registry
    container.audio_resolver = resolver
    container.controls_view = None
    return container


@pytest.fixture
def bot():
    bot = MagicMock()
    bot.user = MagicMock()
    bot.user.id = BOT_USER_ID
    return bot


@pytest.fixture
def cog(bot, container):
    return MusicCog(bot, container)


def _make_ctx(voice_channel_id: int | None = 10) -> MagicMock:
    ctx = MagicMock()
    ctx.guild = MagicMock()
    ctx.guild.id = GUILD_ID

    author = MagicMock(spec=discord.Member)
    if voice_channel_id is None:
        author.voice = None
    else:
        author.voice = MagicMock()
        author.voice.channel = MagicMock()
        author.voice.channel.id = voice_channel_id
    ctx.author = author

    ctx.message_reply = MagicMock()
    ctx.message_reply.edit = AsyncMock()
    ctx.reply = AsyncMock(return_value=ctx.message_reply)
    ctx.channel = MagicMock()
    ctx.channel.send = AsyncMock()
    return ctx


def _edited(ctx) -> str:
    return ctx.message_reply.edit.await_args.kwargs["content"]


async def _play(cog, ctx, query):
    await MusicCog.play.callback(cog, ctx, query=query)


# =============================================================================
# .play
# =============================================================================


class TestPlayCommand:
    @pytest.mark.asyncio
    async def test_play_connects_and_starts(self, cog, registry, transport):
        ctx = _make_ctx()

        await _play(cog, ctx, "never gonna give you up")

        session = registry.find(GUILD_ID)
        assert session is not None
        assert session.state is SessionState.PLAYING
        assert session.current_track.title == "never gonna give you up"
        assert transport.handles[0].channel_id == 10
        assert ctx.reply.await_args.args[0] == DiscordUIMessages.PLAY_SEARCHING
        assert _edited(ctx) == DiscordUIMessages.PLAY_ADDED.format(title="never gonna give you up")
        ctx.channel.send.assert_awaited_with(
            DiscordUIMessages.NOTIFY_NOW_PLAYING.format(title="never gonna give you up")
        )

    @pytest.mark.asyncio
    async def test_second_play_queues(self, cog, registry):
        ctx = _make_ctx()

        await _play(cog, ctx, "first")
        await _play(cog, ctx, "second")

        session = registry.find(GUILD_ID)
        assert session.current_track.title == "first"
        assert [t.title for t in session.pending_tracks] == ["second"]

    @pytest.mark.asyncio
    async def test_play_requires_voice(self, cog, registry):
        ctx = _make_ctx(voice_channel_id=None)

        await _play(cog, ctx, "song")

        ctx.reply.assert_awaited_once_with(DiscordUIMessages.STATE_NEED_TO_BE_IN_VOICE)
        assert registry.find(GUILD_ID) is None

    @pytest.mark.asyncio
    async def test_play_requires_query(self, cog, registry):
        ctx = _make_ctx()

        await _play(cog, ctx, "   ")

        ctx.reply.assert_awaited_once_with(DiscordUIMessages.PLAY_MISSING_QUERY)
        assert registry.find(GUILD_ID) is None

    @pytest.mark.asyncio
    async def test_play_from_other_channel_rejected(self, cog, registry):
        await _play(cog, _make_ctx(voice_channel_id=20), "first")
        ctx = _make_ctx(voice_channel_id=10)

        await _play(cog, ctx, "second")

        ctx.reply.assert_awaited_once_with(DiscordUIMessages.STATE_MUST_SHARE_VOICE)
        assert registry.find(GUILD_ID).pending_tracks == ()

    @pytest.mark.asyncio
    async def test_play_not_found(self, cog, resolver, registry):
        resolver.not_found.add("zzzz")
        ctx = _make_ctx()

        await _play(cog, ctx, "zzzz")

        assert _edited(ctx) == DiscordUIMessages.PLAY_NOT_FOUND
        assert registry.find(GUILD_ID).state is SessionState.CONNECTED_IDLE

    @pytest.mark.asyncio
    async def test_play_provider_failure(self, cog, resolver):
        resolver.broken.add("song")
        ctx = _make_ctx()

        await _play(cog, ctx, "song")

        assert _edited(ctx) == DiscordUIMessages.PLAY_NOT_FOUND

    @pytest.mark.asyncio
    async def test_play_connect_timeout(self, cog, transport, registry):
        transport.unreachable.add(10)
        ctx = _make_ctx()

        await _play(cog, ctx, "song")

        assert _edited(ctx) == DiscordUIMessages.PLAY_CONNECT_TIMEOUT
        assert registry.find(GUILD_ID).state is SessionState.IDLE

    @pytest.mark.asyncio
    async def test_play_unexpected_error(self, cog, resolver):
        resolver.resolve = AsyncMock(side_effect=ValueError("boom"))
        ctx = _make_ctx()

        await _play(cog, ctx, "song")

        assert _edited(ctx) == DiscordUIMessages.PLAY_FAILED


# =============================================================================
# .queue
# =============================================================================


class TestQueueCommand:
    @pytest.mark.asyncio
    async def test_queue_empty(self, cog):
        ctx = _make_ctx()

        await MusicCog.queue.callback(cog, ctx)

        ctx.reply.assert_awaited_once_with(DiscordUIMessages.QUEUE_EMPTY)

    @pytest.mark.asyncio
    async def test_queue_lists_tracks(self, cog):
        ctx = _make_ctx()
        for query in ("A", "B", "C"):
            await _play(cog, ctx, query)
        ctx.reply.reset_mock()

        await MusicCog.queue.callback(cog, ctx)

        ctx.reply.assert_awaited_once_with("📋 Song Queue:\nNow: A\n1. B\n2. C")


# =============================================================================
# .next / .clear / .stop
# =============================================================================


class TestControlCommands:
    @pytest.mark.asyncio
    async def test_next_with_nothing_playing(self, cog):
        ctx = _make_ctx()

        await MusicCog.next_track.callback(cog, ctx)

        ctx.reply.assert_awaited_once_with(DiscordUIMessages.STATE_NOTHING_PLAYING)

    @pytest.mark.asyncio
    async def test_next_skips(self, cog, registry, player):
        ctx = _make_ctx()
        for query in ("A", "B"):
            await _play(cog, ctx, query)

        await MusicCog.next_track.callback(cog, ctx)
        await player.drain()

        ctx.reply.assert_awaited_with(DiscordUIMessages.ACTION_SKIPPED)
        assert registry.find(GUILD_ID).current_track.title == "B"

    @pytest.mark.asyncio
    async def test_next_from_other_channel_rejected(self, cog, registry):
        await _play(cog, _make_ctx(voice_channel_id=20), "A")
        ctx = _make_ctx(voice_channel_id=10)

        await MusicCog.next_track.callback(cog, ctx)

        ctx.reply.assert_awaited_once_with(DiscordUIMessages.STATE_MUST_SHARE_VOICE)
        assert registry.find(GUILD_ID).current_track.title == "A"

    @pytest.mark.asyncio
    async def test_clear_keeps_current(self, cog, registry):
        ctx = _make_ctx()
        for query in ("A", "B", "C"):
            await _play(cog, ctx, query)

        await MusicCog.clear.callback(cog, ctx)

        session = registry.find(GUILD_ID)
        assert session.pending_tracks == ()
        assert session.current_track.title == "A"
        ctx.reply.assert_awaited_with(DiscordUIMessages.ACTION_CLEARED)

    @pytest.mark.asyncio
    async def test_stop_tears_down_and_unregisters(self, cog, registry, transport):
        ctx = _make_ctx()
        await _play(cog, ctx, "A")

        await MusicCog.stop.callback(cog, ctx)

        assert registry.find(GUILD_ID) is None
        assert transport.handles[0].destroyed
        ctx.reply.assert_awaited_with(DiscordUIMessages.ACTION_STOPPED)

    @pytest.mark.asyncio
    async def test_stop_without_session(self, cog):
        ctx = _make_ctx()

        await MusicCog.stop.callback(cog, ctx)

        ctx.reply.assert_awaited_once_with(DiscordUIMessages.ACTION_STOPPED)


# =============================================================================
# Voice state updates
# =============================================================================


def _voice_state(channel_id: int | None) -> MagicMock:
    state = MagicMock(spec=discord.VoiceState)
    if channel_id is None:
        state.channel = None
    else:
        state.channel = MagicMock()
        state.channel.id = channel_id
    return state


def _member(member_id: int) -> MagicMock:
    member = MagicMock()
    member.id = member_id
    member.guild.id = GUILD_ID
    return member


class TestVoiceStateUpdate:
    @pytest.mark.asyncio
    async def test_bot_kicked_stops_session(self, cog, registry, transport):
        await _play(cog, _make_ctx(), "A")

        await cog.on_voice_state_update(_member(BOT_USER_ID), _voice_state(10), _voice_state(None))

        assert registry.find(GUILD_ID) is None
        assert transport.handles[0].destroyed

    @pytest.mark.asyncio
    async def test_other_members_are_ignored(self, cog, registry):
        await _play(cog, _make_ctx(), "A")

        await cog.on_voice_state_update(_member(7), _voice_state(10), _voice_state(None))

        assert registry.find(GUILD_ID) is not None

    @pytest.mark.asyncio
    async def test_leaving_an_old_channel_is_ignored(self, cog, registry):
        await _play(cog, _make_ctx(), "A")

        await cog.on_voice_state_update(_member(BOT_USER_ID), _voice_state(99), _voice_state(None))

        assert registry.find(GUILD_ID).state is SessionState.PLAYING
