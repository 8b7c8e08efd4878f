"""AudioResolver implementation using yt-dlp for URL resolution and search."""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Any, Final, cast

from yt_dlp import YoutubeDL
from yt_dlp.utils import YoutubeDLError

from discord_voice_queue.application.interfaces.audio_resolver import AudioResolver
from discord_voice_queue.config.settings import AudioSettings
from discord_voice_queue.domain.music.entities import Track
from discord_voice_queue.domain.music.value_objects import StreamSource
from discord_voice_queue.domain.shared.exceptions import PlaybackFailure, ResolutionFailure
from discord_voice_queue.domain.shared.messages import ErrorMessages, LogTemplates
from discord_voice_queue.infrastructure.audio.models import (
    AudioFormatInfo,
    YtDlpOpts,
    YtDlpTrackInfo,
)

logger = logging.getLogger(__name__)

DEFAULT_FORMAT: Final[str] = "bestaudio[protocol^=http]/bestaudio/best"
LOG_URL_TRUNCATE: Final[int] = 60
MAX_TITLE_LENGTH: Final[int] = 500

URL_PATTERNS: Final[list[re.Pattern[str]]] = [
    re.compile(r"^https?://"),
    re.compile(r"^www\."),
]

_HTTP_URL: Final[re.Pattern[str]] = re.compile(r"^https?://")


class YtDlpResolver(AudioResolver):
    """Resolves queries with yt-dlp: URLs are looked up directly, anything else is
    a YouTube search taking the first hit.

    yt-dlp is synchronous, so every extraction runs in a worker thread.
    """

    def __init__(self, settings: AudioSettings | None = None) -> None:
        self._settings = settings or AudioSettings()
        self._base_opts = YtDlpOpts(format=self._settings.ytdlp_format or DEFAULT_FORMAT)

    def _get_opts(self, **overrides: Any) -> YtDlpOpts:
        if overrides:
            return self._base_opts.model_copy(update=overrides)
        return self._base_opts

    def is_url(self, query: str) -> bool:
        return any(p.match(query.strip()) for p in URL_PATTERNS)

    # ── Resolution ──────────────────────────────────────────────────

    async def resolve(self, query: str) -> Track | None:
        query = query.strip()
        try:
            if self.is_url(query):
                info = await asyncio.to_thread(self._extract_info_sync, _normalize_url(query))
                if info is None:
                    info = await asyncio.to_thread(self._search_sync, query)
            else:
                info = await asyncio.to_thread(self._search_sync, query)
        except YoutubeDLError as exc:
            logger.warning(LogTemplates.YTDLP_FAILED_EXTRACT_INFO, query[:LOG_URL_TRUNCATE])
            raise ResolutionFailure(query) from exc

        if info is None:
            logger.info(LogTemplates.YTDLP_NO_RESULTS, query)
            return None
        return self._info_to_track(info)

    def _info_to_track(self, info: YtDlpTrackInfo) -> Track | None:
        url = self._extract_webpage_url(info)
        if not url:
            logger.warning(LogTemplates.YTDLP_NO_URL_IN_INFO_DICT)
            return None
        return Track(url=url, title=info.title[:MAX_TITLE_LENGTH])

    @staticmethod
    def _extract_webpage_url(info: YtDlpTrackInfo) -> str | None:
        for candidate in (info.webpage_url, info.original_url, info.url):
            if candidate and _HTTP_URL.match(candidate):
                return candidate
        return None

    def _extract_info_sync(self, url: str) -> YtDlpTrackInfo | None:
        """Look up a single video. Playlists and other non-video pages yield ``None``."""
        logger.debug(LogTemplates.YTDLP_RESOLVING_URL, url[:LOG_URL_TRUNCATE])
        opts = self._get_opts(extract_flat="in_playlist")
        with YoutubeDL(params=cast(Any, opts.model_dump())) as ydl:
            data = ydl.extract_info(url, download=False)
        if not isinstance(data, dict):
            return None
        if data.get("_type", "video") != "video" or "entries" in data:
            logger.info(LogTemplates.YTDLP_NOT_A_VIDEO, url[:LOG_URL_TRUNCATE])
            return None
        return YtDlpTrackInfo.model_validate(data)

    def _search_sync(self, query: str) -> YtDlpTrackInfo | None:
        logger.debug(LogTemplates.YTDLP_SEARCHING, query)
        opts = self._get_opts(extract_flat="in_playlist")
        with YoutubeDL(params=cast(Any, opts.model_dump())) as ydl:
            data = ydl.extract_info(f"ytsearch1:{query}", download=False)

        if not isinstance(data, dict):
            return None
        entries = data.get("entries") or []
        if not isinstance(entries, list):
            return None
        for entry in entries:
            if isinstance(entry, dict):
                return YtDlpTrackInfo.model_validate(entry)
        return None

    # ── Streams ─────────────────────────────────────────────────────

    async def open_stream(self, track: Track) -> StreamSource:
        try:
            info = await asyncio.to_thread(self._extract_stream_sync, track.url)
        except YoutubeDLError as exc:
            logger.warning(LogTemplates.YTDLP_FAILED_EXTRACT_INFO, track.url[:LOG_URL_TRUNCATE])
            raise PlaybackFailure(track.title) from exc

        if info is None:
            raise PlaybackFailure(track.title)

        stream = self._select_stream(info)
        if stream is None:
            logger.warning(LogTemplates.YTDLP_NO_STREAM_URL, track.title)
            raise PlaybackFailure(
                track.title, ErrorMessages.NO_STREAM_URL_FOR_TRACK.format(title=track.title)
            )

        url, headers = stream
        return StreamSource(url=url, title=track.title, http_headers=headers)

    def _extract_stream_sync(self, url: str) -> YtDlpTrackInfo | None:
        with YoutubeDL(params=cast(Any, self._get_opts().model_dump())) as ydl:
            data = ydl.extract_info(url, download=False)
        if not isinstance(data, dict):
            return None
        return YtDlpTrackInfo.model_validate(data)

    @staticmethod
    def _select_stream(info: YtDlpTrackInfo) -> tuple[str, dict[str, str]] | None:
        if info.url:
            return info.url, dict(info.http_headers)
        fmt = _best_audio_format(info.formats)
        if fmt is None or fmt.url is None:
            return None
        return fmt.url, dict(fmt.http_headers or info.http_headers)


def _best_audio_format(formats: list[AudioFormatInfo]) -> AudioFormatInfo | None:
    # yt-dlp lists formats worst to best.
    audio_formats = [f for f in formats if f.acodec != "none" and f.url]
    if audio_formats:
        return audio_formats[-1]
    return None


def _normalize_url(query: str) -> str:
    if query.startswith("www."):
        return f"https://{query}"
    return query
