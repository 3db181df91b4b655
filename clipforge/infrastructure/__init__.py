"""Infrastructure layer components.

This module provides shared infrastructure such as the pooled HTTP client
used by provider clients and the proxy client.
"""

from clipforge.infrastructure.http_client import HTTPClient

__all__ = ["HTTPClient"]
