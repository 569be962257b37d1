"""Tests for feed source normalization."""

import pytest
from helpers import MockBackend

from gather_client.errors import NetworkError, ResolutionError, ServerError, ValidationError
from gather_client.schemas import (
    DiscoveredFeedCandidate,
    DiscoverSource,
    RedditSource,
    RssSource,
    YouTubeResolution,
    YouTubeSource,
)
from gather_client.services import FeedNormalizer, extract_youtube_identifier, normalize_reddit

CHANNEL_ID = "UCabcdefghijklmnopqrstuv"
CHANNEL_FEED = f"https://www.youtube.com/feeds/videos.xml?channel_id={CHANNEL_ID}"


class TestReddit:
    """Test subreddit normalization."""

    def test_builds_listing_url_and_title(self):
        payload = normalize_reddit("technology", "new")
        assert payload.url == "https://www.reddit.com/r/technology/new.rss"
        assert payload.title == "r/technology (new)"

    def test_prefix_is_stripped(self):
        assert normalize_reddit("r/technology", "new") == normalize_reddit("technology", "new")

    def test_whitespace_is_trimmed(self):
        assert normalize_reddit("  r/python ", "top").url == "https://www.reddit.com/r/python/top.rss"

    def test_unknown_sort_rejected(self):
        with pytest.raises(ValidationError):
            normalize_reddit("technology", "best")

    def test_empty_name_rejected(self):
        with pytest.raises(ValidationError):
            normalize_reddit("r/ ", "hot")


class TestYouTubeExtraction:
    """Test YouTube identifier extraction."""

    def test_channel_url(self):
        identifier = extract_youtube_identifier(f"https://www.youtube.com/channel/{CHANNEL_ID}")
        assert identifier.value == CHANNEL_ID
        assert identifier.is_channel_id

    def test_bare_channel_id_passes_through(self):
        identifier = extract_youtube_identifier(f"  {CHANNEL_ID} ")
        assert identifier.value == CHANNEL_ID
        assert identifier.is_channel_id

    def test_handle_url(self):
        identifier = extract_youtube_identifier("https://www.youtube.com/@somechannel")
        assert identifier.value == "somechannel"
        assert identifier.kind == "handle"

    @pytest.mark.parametrize(
        ("reference", "kind", "value"),
        [
            ("https://youtube.com/c/SomeName", "custom", "SomeName"),
            ("https://www.youtube.com/user/legacy-user", "user", "legacy-user"),
            ("@bare_handle", "handle", "bare_handle"),
            ("plainname", "handle", "plainname"),
        ],
    )
    def test_other_shapes(self, reference, kind, value):
        identifier = extract_youtube_identifier(reference)
        assert (identifier.kind, identifier.value) == (kind, value)

    def test_channel_pattern_wins_over_later_patterns(self):
        identifier = extract_youtube_identifier(
            f"https://www.youtube.com/channel/{CHANNEL_ID}?from=youtube.com/@other"
        )
        assert identifier.value == CHANNEL_ID

    def test_empty_reference_rejected(self):
        with pytest.raises(ValidationError):
            extract_youtube_identifier("   ")


class TestFeedNormalizer:
    """Test polymorphic normalization through the backend collaborator."""

    @pytest.mark.asyncio
    async def test_rss_passes_url_with_placeholder_title(self, backend: MockBackend):
        payload = await FeedNormalizer(backend).normalize(RssSource(url="https://example.com/feed.xml"))
        assert payload.url == "https://example.com/feed.xml"
        assert payload.title == "Loading..."

    @pytest.mark.asyncio
    async def test_empty_rss_url_rejected_before_request(self, backend: MockBackend):
        with pytest.raises(ValidationError):
            await FeedNormalizer(backend).normalize(RssSource(url="  "))
        assert backend.calls == []

    @pytest.mark.asyncio
    async def test_reddit_source(self, backend: MockBackend):
        payload = await FeedNormalizer(backend).normalize(
            RedditSource(subreddit="r/technology", sort="new")
        )
        assert payload.url == "https://www.reddit.com/r/technology/new.rss"

    @pytest.mark.asyncio
    async def test_youtube_channel_id_needs_no_round_trip(self, backend: MockBackend):
        payload = await FeedNormalizer(backend).normalize(YouTubeSource(reference=CHANNEL_ID))
        assert payload.url == CHANNEL_FEED
        assert backend.count("resolve_youtube") == 0

    @pytest.mark.asyncio
    async def test_youtube_handle_resolved_by_backend(self, backend: MockBackend):
        backend.resolution = YouTubeResolution(rss_url=CHANNEL_FEED, channel_id=CHANNEL_ID)

        payload = await FeedNormalizer(backend).normalize(
            YouTubeSource(reference=" https://www.youtube.com/@somechannel ")
        )

        assert payload.url == CHANNEL_FEED
        assert backend.calls == [("resolve_youtube", ("https://www.youtube.com/@somechannel",))]

    @pytest.mark.asyncio
    async def test_youtube_resolution_failure_is_distinct(self, backend: MockBackend):
        backend.fail("resolve_youtube", ServerError(400, "Bad Request"))

        with pytest.raises(ResolutionError) as exc_info:
            await FeedNormalizer(backend).normalize(YouTubeSource(reference="@missing"))

        assert isinstance(exc_info.value.__cause__, ServerError)

    @pytest.mark.asyncio
    async def test_youtube_empty_resolution_is_not_guessed(self, backend: MockBackend):
        backend.resolution = None

        with pytest.raises(ResolutionError):
            await FeedNormalizer(backend).normalize(YouTubeSource(reference="@missing"))

    @pytest.mark.asyncio
    async def test_discover_candidate_relayed_unchanged(self, backend: MockBackend):
        candidate = DiscoveredFeedCandidate(url="https://blog.example.com/atom.xml", title="Blog", type="atom")

        payload = await FeedNormalizer(backend).normalize(DiscoverSource(candidate=candidate))

        assert (payload.url, payload.title) == ("https://blog.example.com/atom.xml", "Blog")
        assert backend.calls == []


class TestDiscovery:
    """Test website discovery."""

    @pytest.mark.asyncio
    async def test_returns_candidates(self, backend: MockBackend):
        backend.candidates = [
            DiscoveredFeedCandidate(url="https://example.com/rss", title="RSS", type="rss"),
            DiscoveredFeedCandidate(url="https://example.com/atom", title="Atom", type="atom"),
        ]

        candidates = await FeedNormalizer(backend).discover(" https://example.com ")

        assert [c.type for c in candidates] == ["rss", "atom"]
        assert backend.calls == [("discover", ("https://example.com",))]

    @pytest.mark.asyncio
    async def test_no_candidates_is_empty_list(self, backend: MockBackend):
        assert await FeedNormalizer(backend).discover("https://example.com") == []

    @pytest.mark.asyncio
    async def test_failure_raises_resolution_error(self, backend: MockBackend):
        backend.fail("discover", NetworkError("offline"))

        with pytest.raises(ResolutionError):
            await FeedNormalizer(backend).discover("https://example.com")
