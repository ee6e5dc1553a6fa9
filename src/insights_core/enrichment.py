"""Best-effort catalog enrichment of aggregated rankings."""

import logging
from collections.abc import Iterable

import httpx

from insights_core.aggregation.schemas import EnrichmentPayload, InsightsDocument
from insights_core.spotify.client import SpotifyClient
from insights_core.spotify.constants import (
    ALBUMS_BATCH_LIMIT,
    ARTISTS_BATCH_LIMIT,
    TRACKS_BATCH_LIMIT,
)
from insights_core.spotify.exceptions import SpotifyClientError
from insights_core.spotify.tokens import SpotifyTokenProvider

logger = logging.getLogger(__name__)

_TRACK_URI_PREFIX = "spotify:track:"


def _chunks(items: list[str], size: int) -> Iterable[list[str]]:
    for i in range(0, len(items), size):
        yield items[i : i + size]


def _id_from_uri(uri: str | None) -> str | None:
    """'spotify:album:XYZ' -> 'XYZ'."""
    if not uri:
        return None
    parts = uri.split(":")
    return parts[2] if len(parts) == 3 and parts[2] else None


class EnrichmentFetcher:
    """Fetches Spotify metadata for the tracks, albums, and artists a document ranks.

    Tracks come from the URIs attached to track rankings. Albums and artists
    have no URI in the export, so their IDs are taken from the fetched tracks
    whose album or artist name appears in the album/artist rankings.

    A failing batch is logged and skipped. Token refresh failure raises
    ``EnrichmentError``; callers treat that as "no enrichment".
    """

    def __init__(self, tokens: SpotifyTokenProvider) -> None:
        self._tokens = tokens

    @property
    def enabled(self) -> bool:
        return self._tokens.configured

    async def enrich(self, document: InsightsDocument) -> EnrichmentPayload | None:
        """Return enrichment for ``document``, or None when enrichment is disabled."""
        if not self.enabled:
            logger.info("Spotify credentials not configured, skipping enrichment")
            return None

        track_ids = self._ranked_track_ids(document)
        if not track_ids:
            logger.info("No ranked tracks carry a Spotify ID, nothing to enrich")
            return EnrichmentPayload()

        client = SpotifyClient(await self._tokens.get_token())
        payload = EnrichmentPayload()
        album_names = {r.album for r in document.top_albums_by_play_count + document.top_albums_by_minutes_played}
        artist_names = {
            r.artist
            for r in (
                document.top_artists_by_play_count
                + document.top_artists_by_minutes_played
                + document.top_artists_by_year
                + document.top_artists_by_year_and_minutes_played
            )
        }
        album_names.discard("")
        artist_names.discard("")

        album_ids: dict[str, None] = {}
        artist_ids: dict[str, None] = {}

        for chunk in _chunks(track_ids, TRACKS_BATCH_LIMIT):
            try:
                response = await client.get_tracks(chunk)
            except (SpotifyClientError, httpx.HTTPError) as exc:
                logger.warning("Skipping track batch of %d: %s", len(chunk), exc)
                continue
            for track in response.tracks:
                if track is None or not track.id:
                    continue
                payload.tracks[track.id] = track
                if track.album and track.album.name in album_names:
                    album_id = track.album.id or _id_from_uri(track.album.uri)
                    if album_id:
                        album_ids[album_id] = None
                for artist in track.artists:
                    if artist.name in artist_names:
                        artist_id = artist.id or _id_from_uri(artist.uri)
                        if artist_id:
                            artist_ids[artist_id] = None

        for chunk in _chunks(list(album_ids), ALBUMS_BATCH_LIMIT):
            try:
                albums = await client.get_albums(chunk)
            except (SpotifyClientError, httpx.HTTPError) as exc:
                logger.warning("Skipping album batch of %d: %s", len(chunk), exc)
                continue
            for album in albums.albums:
                if album is not None and album.id:
                    payload.albums[album.id] = album

        for chunk in _chunks(list(artist_ids), ARTISTS_BATCH_LIMIT):
            try:
                artists = await client.get_artists(chunk)
            except (SpotifyClientError, httpx.HTTPError) as exc:
                logger.warning("Skipping artist batch of %d: %s", len(chunk), exc)
                continue
            for artist in artists.artists:
                if artist is not None and artist.id:
                    payload.artists[artist.id] = artist

        logger.info(
            "Enrichment fetched %d tracks, %d albums, %d artists",
            len(payload.tracks),
            len(payload.albums),
            len(payload.artists),
        )
        return payload

    @staticmethod
    def _ranked_track_ids(document: InsightsDocument) -> list[str]:
        """Distinct track IDs from every track ranking, in first-seen order."""
        seen: dict[str, None] = {}
        rankings = (
            document.top_tracks_by_play_count
            + document.top_tracks_by_minutes_played
            + document.top_tracks_by_year_month_play_count
            + document.top_tracks_by_year_month_minutes_played
        )
        for row in rankings:
            for uri in row.track_uris:
                if uri.startswith(_TRACK_URI_PREFIX):
                    track_id = uri.removeprefix(_TRACK_URI_PREFIX)
                    if track_id:
                        seen[track_id] = None
        return list(seen)
