"""Centralized message constants for error messages, log templates, and user feedback."""

from __future__ import annotations


class ErrorMessages:
    """Error messages for exceptions and validation failures."""

    INVALID_LOG_LEVEL = "Invalid log level: {level}. Must be one of {valid_levels}"
    NO_STREAM_URL_FOR_TRACK = "No stream URL found for {title}"
    PLAYER_NOT_CONNECTED = "Audio player is not attached to a voice connection"
    DISCORD_TOKEN_REQUIRED = "DISCORD_TOKEN environment variable is required"
    BOT_NOT_INITIALIZED = "Bot not initialized. Call set_bot() first."
    CONTAINER_NOT_FOUND = "Container not found on bot instance"


class LogTemplates:
    """Log message templates for structured logging.

    Use these with logger.info(), logger.error(), etc. and pass values as parameters
    for proper log formatting and structured logging support.
    """

    # Voice/Transport
    VOICE_CONNECTED = "Connected to voice channel %s in guild %s"
    VOICE_ALREADY_CONNECTED = "Already connected to channel %s in guild %s"
    VOICE_RECONNECTING = "Leaving channel %s to join %s in guild %s"
    VOICE_DISCONNECTED = "Disconnected from voice in guild %s"
    VOICE_CONNECTION_TIMEOUT = "Timeout connecting to channel %s after %ss"
    VOICE_STALE_CLIENT = "Found stale voice client in guild %s, disconnecting first"
    VOICE_DESTROY_FAILED = "Failed to destroy voice connection in guild %s"
    VOICE_EXTERNAL_DISCONNECT = "Bot was disconnected from channel %s in guild %s, stopping session"

    # Player
    PLAYER_STARTED = "Player started playback #%s (%s)"
    PLAYER_STOPPED = "Player stopped playback #%s (flush=%s)"
    PLAYER_ENDED = "Playback #%s ended (error: %s)"
    PLAYER_REPLACED = "Dropping end event of replaced playback #%s"
    PLAYER_LISTENER_ERROR = "Error in player listener for playback #%s"
    PLAYER_NO_LISTENER = "No listener set for playback #%s"
    PLAYER_CONNECTION_LOST = "Playback #%s ended with the voice connection gone"

    # Session / state machine
    SESSION_CREATED = "Created playback session for guild %s"
    SESSION_REMOVED = "Removed playback session for guild %s"
    SESSION_STOPPED = "Stopped playback session for guild %s"
    SESSION_STOP_ALL = "Stopping %d playback session(s)"
    SESSION_STALE_RESULT = "Discarding stale %s result in guild %s"
    ADVANCE_COALESCED = "Advance already in flight in guild %s, coalescing request"
    ADVANCE_NO_TRANSPORT = "No voice connection in guild %s, %d track(s) waiting"
    ADVANCE_FAILURE_CAP = "Stopped advancing after %d consecutive failures in guild %s"
    TRACK_STARTED = "Started playing '%s' in guild %s"
    TRACK_FAILED = "Failed to play '%s' in guild %s"
    TRACK_SKIPPED = "Skip requested for '%s' in guild %s"
    TRACK_REPLAYED = "Replaying '%s' in guild %s"
    TRACK_REPLAY_FAILED = "Failed to replay '%s' in guild %s"
    QUEUE_ENQUEUED = "Enqueued '%s' at position %s in guild %s"
    QUEUE_CLEARED = "Cleared %s tracks from queue in guild %s"
    QUEUE_EMPTY = "Queue empty in guild %s"
    PLAYER_EVENT_STALE = "Ignoring %s event for stale playback #%s in guild %s"
    PLAYER_ERROR = "Player reported an error in guild %s: %s"
    NOTIFY_FAILED = "Failed to send notification in guild %s"

    # Resolution
    YTDLP_RESOLVING_URL = "Resolving URL %s"
    YTDLP_NOT_A_VIDEO = "Not a single video, searching instead: %s"
    YTDLP_SEARCHING = "Searching for %r"
    YTDLP_NO_RESULTS = "No results for %r"
    YTDLP_NO_URL_IN_INFO_DICT = "No URL found in info dict"
    YTDLP_NO_STREAM_URL = "No stream URL found for %s"
    YTDLP_FAILED_EXTRACT_INFO = "Failed to extract info from %s"

    # Commands
    COMMAND_PLAY_FAILED = "Play command failed in guild %s"
    COMMAND_ERROR = "Command error in '%s': %s"
    BUTTON_ERROR = "Button interaction '%s' failed in guild %s"
    ERROR_MESSAGE_SEND_FAILED = "Failed to send error message to user"

    # Application Lifecycle
    BOT_STARTING = "Starting Discord voice queue bot in {environment} mode"
    BOT_SETUP = "Setting up bot..."
    BOT_SETUP_COMPLETE = "Bot setup complete"
    STARTUP_PLAYBACK_SETTINGS = (
        "Prefix %r, volume %s, voice connect timeout %ss, consecutive failure cap %s"
    )
    LOGGING_CONFIG_FALLBACK = "Could not load %s, using basic logging config"
    BOT_STOPPED = "Bot stopped successfully"
    BOT_KEYBOARD_INTERRUPT = "Received keyboard interrupt, shutting down..."
    BOT_FATAL_ERROR = "Fatal error: %s"
    BOT_SHUTTING_DOWN = "Shutting down bot..."
    BOT_SHUTDOWN_COMPLETE = "Bot shutdown complete"
    BOT_SHUTDOWN_TIMEOUT = "Graceful shutdown did not finish within %ss"
    BOT_SIGNAL_RECEIVED = "Received %s, stopping sessions and disconnecting"
    BOT_SIGNAL_UNSUPPORTED = "Cannot install a handler for %s on this event loop"
    BOT_SESSIONS_STOP_ERROR = "Error stopping sessions during shutdown: %s"
    BOT_READY = "Bot ready as %s (%s)"
    BOT_CONNECTED_GUILDS = "Connected to %s guilds"
    BOT_COG_LOADED = "Loaded cog: %s"


class DiscordUIMessages:
    """User-facing Discord messages and responses.

    These strings are shown directly to users in Discord.
    Keep them concise, friendly, and include appropriate emoji.
    """

    # Session notifications (sent to the session's text channel)
    NOTIFY_NOW_PLAYING = "🎵 Now playing: {title}"
    NOTIFY_QUEUE_EMPTY = "📭 No more songs in the queue!"
    NOTIFY_TRACK_FAILED = '❌ Could not play "{title}", trying the next one.'
    NOTIFY_PLAYER_ERROR = "❌ The player hit an error, moving to the next song."
    NOTIFY_FAILURE_CAP = (
        "⚠️ {count} songs in a row failed to play. Playback paused; "
        "`.play` another song to resume the queue."
    )

    # Play command
    PLAY_SEARCHING = "🔎 Searching..."
    PLAY_ADDED = "📝 Added to queue: {title}"
    PLAY_NOT_FOUND = "❌ Song not found!"
    PLAY_FAILED = "❌ Something went wrong while adding the song."
    PLAY_CONNECT_TIMEOUT = "❌ Could not join your voice channel in time."
    PLAY_MISSING_QUERY = "Please give a song name or YouTube URL!"

    # Queue listing
    QUEUE_HEADER = "📋 Song Queue:"
    QUEUE_NOW = "Now: {title}"
    QUEUE_ENTRY = "{index}. {title}"
    QUEUE_EMPTY = "📭 The queue is empty!"

    # Actions
    ACTION_SKIPPED = "⏭️ Skipping to the next song..."
    ACTION_SKIPPED_BUTTON = "⏭ Song skipped."
    ACTION_REPLAYED = "🔄 Song restarted."
    ACTION_REPLAY_FAILED = "❌ Could not restart the song."
    ACTION_CLEARED = "🧹 Queue cleared!"
    ACTION_STOPPED = "⏹ Music stopped!"
    ACTION_STOPPED_BUTTON = "⏹ Music stopped and queue cleared."

    # State
    STATE_NOTHING_PLAYING = "▶️ Nothing is playing right now!"
    STATE_NOTHING_TO_SKIP = "There is no active song to skip."
    STATE_NOTHING_TO_REPLAY = "There is no song to restart right now."
    STATE_NO_ACTIVE_QUEUE = "There is no active music queue."
    STATE_NEED_TO_BE_IN_VOICE = "You need to be in a voice channel!"
    STATE_MUST_SHARE_VOICE = "You must be in the same voice channel as the bot to control it."
    STATE_MUST_SHARE_VOICE_BUTTON = "You must be in the same voice channel to use this button."

    # Errors
    ERROR_GENERIC = "❌ Something went wrong while handling that."

    # Buttons
    BUTTON_REPLAY = "🔄 Replay"
    BUTTON_SKIP = "⏭ Skip"
    BUTTON_STOP = "⏹ Stop"
