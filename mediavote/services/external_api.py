"""TMDB client used to snapshot media display data."""

from dataclasses import dataclass
from typing import Any
import httpx
import logging

from mediavote.config import get_settings
from mediavote.models.deletion import MediaType

logger = logging.getLogger(__name__)

UNKNOWN_TITLE = "Unknown"


@dataclass
class MediaInfo:
    """Movie or TV show information from TMDB."""
    tmdb_id: int
    title: str
    poster_path: str | None
    year: int | None


def _year(date: str | None) -> int | None:
    return int(date[:4]) if date and len(date) >= 4 else None


class TMDBClient:
    """Client for The Movie Database API."""

    def __init__(self, api_key: str | None = None, base_url: str | None = None):
        settings = get_settings()
        self.api_key = api_key or settings.tmdb_api_key
        self.base_url = base_url or settings.tmdb_base_url
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=10.0,
                params={"api_key": self.api_key},
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _fetch(self, path: str) -> dict[str, Any] | None:
        if not self.api_key:
            logger.warning("TMDB API key not configured")
            return None

        try:
            client = await self._get_client()
            response = await client.get(path)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPError as e:
            logger.error(f"TMDB request {path} failed: {e}")
            return None

    async def get_movie(self, tmdb_id: int) -> MediaInfo | None:
        """Get movie details by TMDB ID."""
        movie = await self._fetch(f"/movie/{tmdb_id}")
        if movie is None:
            return None
        return MediaInfo(
            tmdb_id=movie["id"],
            title=movie.get("title") or movie.get("original_title") or UNKNOWN_TITLE,
            poster_path=movie.get("poster_path"),
            year=_year(movie.get("release_date")),
        )

    async def get_tv_show(self, tmdb_id: int) -> MediaInfo | None:
        """Get TV show details by TMDB ID."""
        show = await self._fetch(f"/tv/{tmdb_id}")
        if show is None:
            return None
        return MediaInfo(
            tmdb_id=show["id"],
            title=show.get("name") or show.get("original_name") or UNKNOWN_TITLE,
            poster_path=show.get("poster_path"),
            year=_year(show.get("first_air_date")),
        )

    async def media_snapshot(self, tmdb_id: int, media_type: MediaType) -> tuple[str, str | None]:
        """Title and poster path to store on a deletion request.

        Falls back to an "Unknown" title when TMDB has nothing.
        """
        if media_type == MediaType.MOVIE:
            info = await self.get_movie(tmdb_id)
        else:
            info = await self.get_tv_show(tmdb_id)

        if info is None:
            return UNKNOWN_TITLE, None
        return info.title, info.poster_path
