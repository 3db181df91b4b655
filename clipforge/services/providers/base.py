"""Provider client contract and normalized asset schema.

Every third-party provider (TTS voice catalogs, image model catalogs) is
reached through an object satisfying the ProviderClient protocol. Clients
return raw provider payloads; turning a payload into a ProviderAsset is a
pure per-provider function so that the proxy path and the direct path share
exactly the same normalization, preview-URL priority included.
"""

import enum
import math
from collections.abc import Callable
from typing import Any, Protocol, TypeVar, runtime_checkable
from urllib.parse import urlparse

import httpx
from pydantic import BaseModel, ConfigDict, Field, field_validator

from clipforge.core.exceptions import (
    NotFound,
    ProviderUnavailable,
    RateLimited,
    TransportFailure,
    Unauthorized,
    UnknownProviderError,
)
from clipforge.core.logging import get_logger
from clipforge.infrastructure.http_client import HTTPClient

logger = get_logger(__name__)

NOT_SPECIFIED = "Not specified"

NormalizedT = TypeVar("NormalizedT")


class ProviderName(str, enum.Enum):
    """Closed set of supported providers."""

    FISH_AUDIO = "Fish-Audio"
    ELEVENLABS = "ElevenLabs"
    MINIMAX = "Minimax"
    RUNWARE = "Runware"

    @property
    def slug(self) -> str:
        """URL-safe identifier used by the proxy routes."""
        return self.value.lower()

    @classmethod
    def from_slug(cls, slug: str) -> "ProviderName":
        """Look up a provider by its slug.

        Raises:
            ValueError: If no provider has this slug
        """
        for provider in cls:
            if provider.slug == slug:
                return provider
        raise ValueError(f"Unsupported provider: {slug}")


# ============================================
# Normalized schema
# ============================================


def absolute_url(value: Any) -> str:
    """Return value if it is an absolute http(s) URL, else an empty string."""
    if not isinstance(value, str) or not value:
        return ""
    parsed = urlparse(value)
    if parsed.scheme in ("http", "https") and parsed.netloc:
        return value
    return ""


class ProviderAsset(BaseModel):
    """Normalized, provider-agnostic voice or model record.

    Instances are immutable. A refresh produces a new value because preview
    URLs of some providers expire between calls.

    Attributes:
        native_id: Provider-native id
        display_name: Human-readable name
        provider: Owning provider
        language: Language label
        gender: Gender label for voices, category label for models
        preview_url: Absolute preview URL or empty when unavailable
        description: Free-text description
        extras: Provider-specific fields (popularity, raw payload, ...)
    """

    model_config = ConfigDict(frozen=True)

    native_id: str
    display_name: str = ""
    provider: ProviderName
    language: str = NOT_SPECIFIED
    gender: str = NOT_SPECIFIED
    preview_url: str = ""
    description: str = ""
    extras: dict[str, Any] = Field(default_factory=dict)

    @field_validator("preview_url")
    @classmethod
    def validate_preview_url(cls, v: str) -> str:
        """Preview URLs must be absolute when present."""
        if v and not absolute_url(v):
            raise ValueError(f"preview_url must be an absolute URL: {v!r}")
        return v

    @property
    def has_preview(self) -> bool:
        """Whether a preview URL is present."""
        return bool(self.preview_url)

    def without_preview(self) -> "ProviderAsset":
        """Copy of this asset with the preview URL dropped."""
        return self.model_copy(update={"preview_url": ""})


class ListOptions(BaseModel):
    """Options for listing a provider catalog."""

    page: int = Field(default=1, ge=1, description="1-based page number")
    page_size: int = Field(default=20, ge=1, le=100, description="Items per page")
    search: str | None = Field(default=None, description="Free-text search term")
    language: str | None = Field(default=None, description="Language filter")
    show_legacy: bool = Field(default=False, description="Include legacy voices")


class PageInfo(BaseModel):
    """Pagination details of a listing."""

    total: int = 0
    page: int = 1
    page_size: int = 20
    total_pages: int = 0

    @classmethod
    def from_total(cls, total: int, page: int, page_size: int) -> "PageInfo":
        """Build page info, deriving the page count from the total."""
        total_pages = math.ceil(total / page_size) if page_size else 0
        return cls(total=total, page=page, page_size=page_size, total_pages=total_pages)


class AssetPage(BaseModel):
    """One page of normalized assets."""

    items: list[ProviderAsset]
    page_info: PageInfo


class RawPage(BaseModel):
    """One page of raw provider payloads."""

    items: list[dict[str, Any]]
    page_info: PageInfo

    def normalized(self, normalize: Callable[[dict[str, Any]], ProviderAsset]) -> AssetPage:
        """Apply a normalizer to every item."""
        return AssetPage(items=[normalize(item) for item in self.items], page_info=self.page_info)


def paginate_locally(items: list[dict[str, Any]], options: ListOptions) -> RawPage:
    """Slice a full catalog into the requested page.

    Used for providers whose list endpoints return everything at once.
    """
    start = (options.page - 1) * options.page_size
    return RawPage(
        items=items[start : start + options.page_size],
        page_info=PageInfo.from_total(len(items), options.page, options.page_size),
    )


class CreditUnit(str, enum.Enum):
    """Unit of an account balance."""

    DOLLARS = "dollars"
    CHARACTERS = "characters"
    CREDITS = "credits"


class ProviderCredits(BaseModel):
    """Remaining account balance on a provider.

    Attributes:
        provider: Owning provider
        balance: Remaining amount in ``unit``
        unit: What the balance counts
        limit: Plan allowance, when the provider reports one
        extras: Raw balance payload
    """

    model_config = ConfigDict(frozen=True)

    provider: ProviderName
    balance: float
    unit: CreditUnit
    limit: float | None = None
    extras: dict[str, Any] = Field(default_factory=dict)


def parse_amount(value: Any) -> float:
    """Read a numeric balance field; a missing field counts as zero.

    Raises:
        ValueError: If value is neither a number nor a numeric string
    """
    if value is None or value == "":
        return 0.0
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise ValueError(f"not a numeric amount: {value!r}")
    return float(value)


# ============================================
# Client contract
# ============================================


@runtime_checkable
class ProviderClient(Protocol):
    """Contract implemented once per provider.

    Attributes:
        provider: Provider served by this client
        cacheable: Whether preview URLs may be persisted
        supports_preview: Whether the provider offers audio/image previews
        supports_demo: Whether the provider has a public demo credential
        supports_credits: Whether the provider reports an account balance
    """

    provider: ProviderName
    cacheable: bool
    supports_preview: bool
    supports_demo: bool
    supports_credits: bool

    async def fetch_raw(self, native_id: str, credential: str) -> dict[str, Any]:
        """Fetch the raw payload of one asset."""
        ...

    async def list_raw(self, credential: str, options: ListOptions) -> RawPage:
        """Fetch one page of raw payloads."""
        ...

    def normalize(self, raw: dict[str, Any]) -> ProviderAsset:
        """Convert a raw payload into a ProviderAsset."""
        ...

    async def fetch_detail(self, native_id: str, credential: str) -> ProviderAsset:
        """Fetch and normalize one asset."""
        ...

    async def list_assets(self, credential: str, options: ListOptions | None = None) -> AssetPage:
        """Fetch and normalize one page of assets."""
        ...

    async def fetch_credits_raw(self, credential: str) -> dict[str, Any]:
        """Fetch the raw account balance payload."""
        ...

    def normalize_credits(self, raw: dict[str, Any]) -> ProviderCredits:
        """Convert a raw balance payload into ProviderCredits."""
        ...

    async def fetch_credits(self, credential: str) -> ProviderCredits:
        """Fetch and normalize the account balance."""
        ...


# ============================================
# Shared transport
# ============================================


def _parse_retry_after(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def classify_response(
    provider: str,
    response: httpx.Response,
    native_id: str | None = None,
) -> Any:
    """Turn a provider HTTP response into a payload or a classified error.

    Only a 2xx status counts as success; a body on an error status is kept
    for diagnostics only.

    Args:
        provider: Provider identifier for error context
        response: HTTP response
        native_id: Requested asset id, attached to NotFound

    Returns:
        Decoded JSON body

    Raises:
        Unauthorized: On 401/403
        NotFound: On 404
        RateLimited: On 429
        ProviderUnavailable: On 5xx
        UnknownProviderError: On any other status or an undecodable body
    """
    status = response.status_code
    if 200 <= status < 300:
        try:
            return response.json()
        except ValueError as e:
            raise UnknownProviderError(provider, status, response.text) from e

    if status in (401, 403):
        raise Unauthorized(provider, status_code=status)
    if status == 404:
        raise NotFound(provider, native_id)
    if status == 429:
        retry_after = _parse_retry_after(response.headers.get("Retry-After"))
        raise RateLimited(provider, retry_after=retry_after)
    if status >= 500:
        raise ProviderUnavailable(provider, status_code=status)
    raise UnknownProviderError(provider, status, response.text)


# ============================================
# Payload shape checks
# ============================================


def expect_object(provider: str, data: Any) -> dict[str, Any]:
    """Return data if it is a JSON object.

    Raises:
        UnknownProviderError: Otherwise
    """
    if not isinstance(data, dict):
        raise UnknownProviderError(
            provider, None, f"expected a JSON object, got {type(data).__name__}"
        )
    return data


def expect_object_list(provider: str, value: Any) -> list[dict[str, Any]]:
    """Return value as a list of JSON objects; a missing list is empty.

    Raises:
        UnknownProviderError: If value is not a list of objects
    """
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(item, dict) for item in value):
        raise UnknownProviderError(provider, None, f"expected a list of objects: {value!r}")
    return value


def expect_count(value: Any, default: int) -> int:
    """A non-negative integer count, or default when the provider sent none."""
    if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
        return value
    return default


def normalize_payload(
    provider: ProviderName,
    normalizer: Callable[[dict[str, Any]], NormalizedT],
    raw: Any,
) -> NormalizedT:
    """Run a pure normalizer, classifying payloads it cannot read.

    Raises:
        UnknownProviderError: If raw is not an object or the normalizer
            rejects it (wrong field types, invalid preview URL, ...)
    """
    payload = expect_object(provider.value, raw)
    try:
        return normalizer(payload)
    except (TypeError, ValueError, AttributeError) as e:
        logger.warning(
            "Provider payload could not be normalized",
            provider=provider.value,
            error_type=type(e).__name__,
            error=str(e),
        )
        raise UnknownProviderError(provider.value, None, str(e)) from e


class ProviderTransport:
    """Request helper shared by provider clients through composition.

    Wraps the pooled HTTPClient, maps network failures and timeouts to
    TransportFailure and classifies every response.
    """

    def __init__(self, http_client: HTTPClient, provider: ProviderName) -> None:
        self._http = http_client
        self.provider = provider

    async def request(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        params: dict[str, Any] | None = None,
        json: Any = None,
        native_id: str | None = None,
    ) -> Any:
        """Send a request and return the decoded, classified payload.

        Raises:
            TransportFailure: On network errors or timeouts
            ProviderError: Any classified HTTP failure
        """
        try:
            response = await self._http.request(
                method, url, headers=headers, params=params, json=json
            )
        except httpx.TimeoutException as e:
            logger.warning("Provider request timed out", provider=self.provider.value, url=url)
            raise TransportFailure(self.provider.value, "timeout", endpoint=url) from e
        except httpx.HTTPError as e:
            logger.warning(
                "Provider request failed", provider=self.provider.value, url=url, error=str(e)
            )
            raise TransportFailure(
                self.provider.value, str(e) or type(e).__name__, endpoint=url
            ) from e

        logger.debug(
            "Provider response received",
            provider=self.provider.value,
            url=url,
            status=response.status_code,
        )
        return classify_response(self.provider.value, response, native_id=native_id)

    async def request_object(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        params: dict[str, Any] | None = None,
        json: Any = None,
        native_id: str | None = None,
    ) -> dict[str, Any]:
        """Like request, for endpoints whose body is a JSON object.

        Raises:
            UnknownProviderError: If the 2xx body is not an object
        """
        data = await self.request(
            method, url, headers=headers, params=params, json=json, native_id=native_id
        )
        return expect_object(self.provider.value, data)


__all__ = [
    "NOT_SPECIFIED",
    "AssetPage",
    "CreditUnit",
    "ListOptions",
    "PageInfo",
    "ProviderAsset",
    "ProviderClient",
    "ProviderCredits",
    "ProviderName",
    "ProviderTransport",
    "RawPage",
    "absolute_url",
    "classify_response",
    "expect_count",
    "expect_object",
    "expect_object_list",
    "normalize_payload",
    "paginate_locally",
    "parse_amount",
]
