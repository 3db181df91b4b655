"""Tests for the Minimax client."""

import pytest

from clipforge.core.exceptions import NotFound, UnknownProviderError, UnsupportedOperation
from clipforge.services.providers.base import ListOptions, ProviderName
from clipforge.services.providers.minimax import (
    MINIMAX_VOICE_LIST_URL,
    MinimaxClient,
    detect_gender,
    detect_language,
    normalize_minimax,
)


@pytest.fixture
def voice_list() -> dict:
    """Raw Minimax voice list response."""
    return {
        "system_voice": [
            {
                "voice_id": "English_Graceful_Lady",
                "voice_name": "Graceful Lady",
                "description": ["A graceful female voice", "calm"],
                "created_time": "2024-01-01",
            },
            {
                "voice_id": "Chinese (Mandarin)_Reliable_Executive",
                "voice_name": "Reliable Executive",
                "description": ["A steady male voice"],
            },
        ]
    }


@pytest.mark.unit
class TestMinimaxDetection:
    """Tests for language and gender inference."""

    @pytest.mark.parametrize(
        "voice_id,expected",
        [
            ("English_Graceful_Lady", "English"),
            ("Chinese (Mandarin)_Reliable_Executive", "Chinese"),
            ("mandarin_news", "Chinese"),
            ("Japanese_Whisper", "Japanese"),
            ("custom_voice_01", "Not specified"),
        ],
    )
    def test_detect_language(self, voice_id, expected):
        """Test keyword-based language detection."""
        assert detect_language(voice_id) == expected

    def test_female_is_not_male(self):
        """Test "female" never matches as "male"."""
        assert detect_gender(["A graceful female voice"]) == "Female"

    def test_male(self):
        """Test male detection."""
        assert detect_gender("A steady male voice") == "Male"

    def test_word_fallbacks(self):
        """Test girl/boy style words."""
        assert detect_gender(["cheerful girl"]) == "Female"
        assert detect_gender(["young boy"]) == "Male"

    def test_ambiguous(self):
        """Test both or neither gives Not specified."""
        assert detect_gender(["male and female duet"]) == "Not specified"
        assert detect_gender(None) == "Not specified"


@pytest.mark.unit
class TestMinimaxNormalization:
    """Tests for normalize_minimax."""

    def test_normalize(self, voice_list):
        """Test field mapping."""
        asset = normalize_minimax(voice_list["system_voice"][0])

        assert asset.provider == ProviderName.MINIMAX
        assert asset.native_id == "English_Graceful_Lady"
        assert asset.display_name == "Graceful Lady"
        assert asset.language == "English"
        assert asset.gender == "Female"
        assert asset.preview_url == ""
        assert asset.description == "A graceful female voice, calm"
        assert asset.extras["created_time"] == "2024-01-01"

    def test_display_name_defaults_to_id(self):
        """Test voice id is used when no name is given."""
        asset = normalize_minimax({"voice_id": "English_Narrator"})
        assert asset.display_name == "English_Narrator"


@pytest.mark.unit
class TestMinimaxClient:
    """Tests for MinimaxClient."""

    def test_capabilities(self, mock_http_client):
        """Test Minimax declares no previews."""
        client = MinimaxClient(mock_http_client)
        assert client.supports_preview is False
        assert client.supports_demo is False
        assert client.supports_credits is False

    @pytest.mark.asyncio
    async def test_fetch_raw_picks_entry(self, mock_http_client, make_response, voice_list):
        """Test detail is served from the voice list."""
        mock_http_client.request.return_value = make_response(200, voice_list)
        client = MinimaxClient(mock_http_client)

        raw = await client.fetch_raw("English_Graceful_Lady", "mm-key")

        assert raw["voice_name"] == "Graceful Lady"
        args, kwargs = mock_http_client.request.call_args
        assert args == ("GET", MINIMAX_VOICE_LIST_URL)
        assert kwargs["headers"]["Authorization"] == "Bearer mm-key"

    @pytest.mark.asyncio
    async def test_fetch_raw_missing_voice(self, mock_http_client, make_response, voice_list):
        """Test absent voice raises NotFound."""
        mock_http_client.request.return_value = make_response(200, voice_list)
        client = MinimaxClient(mock_http_client)

        with pytest.raises(NotFound) as exc_info:
            await client.fetch_raw("Nope", "mm-key")
        assert exc_info.value.native_id == "Nope"

    @pytest.mark.asyncio
    async def test_list_language_filter(self, mock_http_client, make_response, voice_list):
        """Test listing filters on detected language."""
        mock_http_client.request.return_value = make_response(200, voice_list)
        client = MinimaxClient(mock_http_client)

        page = await client.list_assets("mm-key", ListOptions(language="chinese"))

        assert [asset.display_name for asset in page.items] == ["Reliable Executive"]

    @pytest.mark.asyncio
    async def test_system_voice_not_a_list(self, mock_http_client, make_response):
        """Test a system_voice field of the wrong type is classified."""
        mock_http_client.request.return_value = make_response(200, {"system_voice": {"a": 1}})
        client = MinimaxClient(mock_http_client)

        with pytest.raises(UnknownProviderError):
            await client.fetch_raw("English_Graceful_Lady", "mm-key")

    @pytest.mark.asyncio
    async def test_search_tolerates_non_string_names(self, mock_http_client, make_response):
        """Test search does not fail on a numeric voice name."""
        mock_http_client.request.return_value = make_response(
            200, {"system_voice": [{"voice_id": "English_A", "voice_name": 42}]}
        )
        client = MinimaxClient(mock_http_client)

        page = await client.list_raw("mm-key", ListOptions(search="42"))

        assert len(page.items) == 1

    @pytest.mark.asyncio
    async def test_credits_unsupported(self, mock_http_client):
        """Test Minimax has no balance lookup and makes no call."""
        client = MinimaxClient(mock_http_client)

        with pytest.raises(UnsupportedOperation):
            await client.fetch_credits("mm-key")
        mock_http_client.request.assert_not_called()
