"""Shared service core: the async HTTP plumbing behind every binding.

WHY: Authentication, query encoding, path encoding and error mapping are
identical across Watson services and belong in one place.

RULES:
- All REST calls go through WatsonService._request() or _send()
- Authentication is HTTP basic auth from config or constructor arguments
"""

from watson_client.api.service import (
    MissingParameterError,
    WatsonAPIError,
    WatsonService,
    build_query,
)

__all__ = ["MissingParameterError", "WatsonAPIError", "WatsonService", "build_query"]
