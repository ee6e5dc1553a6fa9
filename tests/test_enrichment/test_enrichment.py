"""Tests for best-effort catalog enrichment."""

import httpx
import pytest
import respx

from insights_core.aggregation.schemas import (
    AlbumPlayCount,
    ArtistPlayCount,
    InsightsDocument,
    TrackMinutes,
    TrackPlayCount,
)
from insights_core.enrichment import EnrichmentFetcher
from insights_core.errors import EnrichmentError
from insights_core.spotify.constants import ALBUMS_URL, ARTISTS_URL, SPOTIFY_TOKEN_URL, TRACKS_URL
from insights_core.spotify.tokens import SpotifyTokenProvider


def _document() -> InsightsDocument:
    return InsightsDocument(
        top_tracks_by_play_count=[
            TrackPlayCount(track="Song A", total_plays=3, track_uris=["spotify:track:tA"]),
            TrackPlayCount(track="Song B", total_plays=1, track_uris=["spotify:track:tB", "spotify:episode:e1"]),
        ],
        top_tracks_by_minutes_played=[
            TrackMinutes(track="Song A", minutes_played=2.0, track_uris=["spotify:track:tA"]),
        ],
        top_artists_by_play_count=[ArtistPlayCount(artist="Queen", total_plays=3)],
        top_albums_by_play_count=[AlbumPlayCount(album="Opera", total_plays=3)],
    )


def _tracks_payload() -> dict[str, object]:
    return {
        "tracks": [
            {
                "id": "tA",
                "name": "Song A",
                "artists": [{"id": "arQ", "name": "Queen"}],
                "album": {"id": "alO", "name": "Opera"},
            },
            {
                "id": "tB",
                "name": "Song B",
                "artists": [{"id": "arX", "name": "Unranked"}],
                "album": {"id": "alX", "name": "Other"},
            },
        ]
    }


def _mock_token() -> respx.Route:
    return respx.post(SPOTIFY_TOKEN_URL).mock(
        return_value=httpx.Response(200, json={"access_token": "tok", "expires_in": 3600})
    )


@respx.mock
async def test_enrich_fetches_ranked_entities() -> None:
    _mock_token()
    tracks_route = respx.get(TRACKS_URL).mock(return_value=httpx.Response(200, json=_tracks_payload()))
    albums_route = respx.get(ALBUMS_URL).mock(
        return_value=httpx.Response(200, json={"albums": [{"id": "alO", "name": "Opera", "label": "EMI"}]})
    )
    artists_route = respx.get(ARTISTS_URL).mock(
        return_value=httpx.Response(200, json={"artists": [{"id": "arQ", "name": "Queen", "genres": ["rock"]}]})
    )

    payload = await EnrichmentFetcher(SpotifyTokenProvider("cid", "secret")).enrich(_document())

    assert payload is not None
    assert set(payload.tracks) == {"tA", "tB"}
    assert set(payload.albums) == {"alO"}
    assert set(payload.artists) == {"arQ"}
    assert payload.artists["arQ"].genres == ["rock"]
    assert tracks_route.calls[0].request.url.params["ids"] == "tA,tB"
    assert albums_route.calls[0].request.url.params["ids"] == "alO"
    assert artists_route.calls[0].request.url.params["ids"] == "arQ"


@respx.mock
async def test_failed_batch_is_skipped() -> None:
    _mock_token()
    respx.get(TRACKS_URL).mock(return_value=httpx.Response(200, json=_tracks_payload()))
    respx.get(ALBUMS_URL).mock(return_value=httpx.Response(500))
    respx.get(ARTISTS_URL).mock(
        return_value=httpx.Response(200, json={"artists": [{"id": "arQ", "name": "Queen"}]})
    )

    payload = await EnrichmentFetcher(SpotifyTokenProvider("cid", "secret")).enrich(_document())

    assert payload is not None
    assert payload.albums == {}
    assert set(payload.artists) == {"arQ"}
    assert set(payload.tracks) == {"tA", "tB"}


@respx.mock
async def test_tracks_fetched_in_batches_of_fifty() -> None:
    _mock_token()
    route = respx.get(TRACKS_URL).mock(return_value=httpx.Response(200, json={"tracks": []}))
    document = InsightsDocument(
        top_tracks_by_play_count=[
            TrackPlayCount(track=f"T{i}", total_plays=1, track_uris=[f"spotify:track:id{i}"]) for i in range(120)
        ]
    )

    await EnrichmentFetcher(SpotifyTokenProvider("cid", "secret")).enrich(document)

    sizes = [len(call.request.url.params["ids"].split(",")) for call in route.calls]
    assert sizes == [50, 50, 20]


async def test_unconfigured_returns_none() -> None:
    fetcher = EnrichmentFetcher(SpotifyTokenProvider("", ""))
    assert not fetcher.enabled
    assert await fetcher.enrich(_document()) is None


@respx.mock
async def test_token_failure_raises() -> None:
    respx.post(SPOTIFY_TOKEN_URL).mock(return_value=httpx.Response(401))
    with pytest.raises(EnrichmentError):
        await EnrichmentFetcher(SpotifyTokenProvider("cid", "secret")).enrich(_document())


async def test_document_without_track_ids_makes_no_requests() -> None:
    document = InsightsDocument(
        top_tracks_by_play_count=[TrackPlayCount(track="Pod", total_plays=2, track_uris=["spotify:episode:e1"])],
        top_artists_by_play_count=[ArtistPlayCount(artist="Queen", total_plays=3)],
    )
    with respx.mock(assert_all_called=False) as router:
        token_route = router.post(SPOTIFY_TOKEN_URL).mock(
            return_value=httpx.Response(200, json={"access_token": "tok", "expires_in": 3600})
        )
        tracks_route = router.get(TRACKS_URL)

        payload = await EnrichmentFetcher(SpotifyTokenProvider("cid", "secret")).enrich(document)

    assert payload is not None
    assert payload.tracks == {}
    assert not token_route.called
    assert not tracks_route.called


@respx.mock
async def test_unreadable_batch_body_is_skipped() -> None:
    _mock_token()
    respx.get(TRACKS_URL).mock(return_value=httpx.Response(200, text="<html>gateway</html>"))

    payload = await EnrichmentFetcher(SpotifyTokenProvider("cid", "secret")).enrich(_document())

    assert payload is not None
    assert payload.tracks == {}
    assert payload.albums == {}
    assert payload.artists == {}
