"""Shared async HTTP core for every Watson service binding.

WHY: All Watson REST bindings do the same thing: turn method arguments into
a path, a query string, headers and a body, send the request with basic
auth, and hand the decoded JSON back. Centralizing that here keeps the
per-service modules down to one small method per API operation.

HOW: WatsonService wraps httpx.AsyncClient. It is an async context manager:
enter it to open an authenticated client, exit to close the connection
pool. Subclasses call _request() with a path built by _path() and a dict of
query parameters; build_query() encodes those the way the Watson APIs
expect. Non-2xx responses become WatsonAPIError.

RULES:
- Always use the async context manager (async with Service(...) as svc:)
- version=<date> is the first query parameter when the service has one
- None query values are dropped, booleans become "true"/"false",
  lists are joined with ","
- Path segments are fully percent-encoded (including "/")
- Required parameters are checked before any request is built
"""

from __future__ import annotations

import base64
import logging
from typing import Any
from urllib.parse import quote

import httpx

from watson_client import __version__
from watson_client.config import (
    WATSON_CONNECT_TIMEOUT_S,
    WATSON_TIMEOUT_S,
    load_credentials,
    service_url,
)

logger = logging.getLogger(__name__)

USER_AGENT = "watson-client-python/{}".format(__version__)

_UNAUTHORIZED_MESSAGE = "Unauthorized: Access is denied due to invalid credentials"
_OPT_OUT_HEADER = "X-Watson-Learning-Opt-Out"


class MissingParameterError(ValueError):
    """Raised when a required parameter is None or empty.

    WHY: A request without its path parameters would hit the wrong URL, so
    the check happens before anything is sent.

    RULES:
    - parameters lists every missing name, in call order
    """

    def __init__(self, parameters: list[str]) -> None:
        self.parameters = parameters
        super().__init__("Missing required parameters: {}".format(", ".join(parameters)))


class WatsonAPIError(Exception):
    """Raised when a Watson service returns a non-2xx response.

    WHY: Callers need a typed exception to tell service errors apart from
    network errors or local validation failures.

    HOW: Built from the httpx response by from_response(). The message comes
    from the JSON body's "error", "description" or "message" field, falling
    back to the raw response text.

    RULES:
    - Always carries status_code and message
    - body holds the decoded JSON error document, or None
    - A 401 without a message gets the standard "Unauthorized" text
    """

    def __init__(
        self,
        status_code: int,
        message: str,
        code_description: str | None = None,
        body: Any = None,
    ) -> None:
        self.status_code = status_code
        self.message = message
        self.code_description = code_description
        self.body = body
        super().__init__(f"Watson API error {status_code}: {message}")

    @classmethod
    def from_response(cls, resp: httpx.Response) -> WatsonAPIError:
        try:
            body = resp.json()
        except ValueError:
            body = None

        message = None
        code_description = None
        if isinstance(body, dict):
            message = body.get("error") or body.get("description") or body.get("message")
            code_description = body.get("code_description")

        if not message:
            if resp.status_code == 401:
                message = _UNAUTHORIZED_MESSAGE
            else:
                message = resp.text or resp.reason_phrase

        return cls(resp.status_code, str(message), code_description, body)


def build_query(params: dict[str, Any] | None, version_date: str | None = None) -> dict[str, str]:
    """Encode query parameters the way the Watson APIs expect.

    RULES:
    - version comes first when version_date is set
    - Insertion order of params is preserved
    - None values are dropped
    - True/False become "true"/"false"
    - Lists and tuples are joined with "," (e.g. keywords=a,b,c)
    """
    query: dict[str, str] = {}
    if version_date:
        query["version"] = version_date

    for key, value in (params or {}).items():
        if value is None:
            continue
        if isinstance(value, bool):
            query[key] = "true" if value else "false"
        elif isinstance(value, (list, tuple)):
            query[key] = ",".join(str(v) for v in value)
        else:
            query[key] = str(value)
    return query


def compact(**fields: Any) -> dict[str, Any]:
    """Return a JSON body containing only the fields that are not None."""
    return {key: value for key, value in fields.items() if value is not None}


class WatsonService:
    """Base class for the Watson service bindings.

    WHY: Provides auth, default headers, version-date handling, query and
    path encoding, and error mapping so the service subclasses only describe
    their operations.

    HOW: Wraps httpx.AsyncClient with HTTP basic auth. Subclasses set
    CREDENTIALS_PREFIX (for config fallbacks) and, when the API is dated,
    REQUIRES_VERSION_DATE plus a VERSION_DATE_HINT for the error message.

    RULES:
    - username/password default to config.load_credentials(prefix)
    - url defaults to config.service_url(prefix), trailing "/" stripped
    - learning_opt_out adds X-Watson-Learning-Opt-Out: 1 to every request;
      the same header passed in headers (any case) sets learning_opt_out
    - transport is handed to httpx (tests pass an httpx.MockTransport)
    """

    CREDENTIALS_PREFIX = ""
    REQUIRES_VERSION_DATE = False
    VERSION_DATE_HINT = ""

    def __init__(
        self,
        username: str | None = None,
        password: str | None = None,
        url: str | None = None,
        version_date: str | None = None,
        headers: dict[str, str] | None = None,
        learning_opt_out: bool = False,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if self.REQUIRES_VERSION_DATE and not version_date:
            raise ValueError(
                "Argument error: version_date was not specified, use {}".format(
                    self.VERSION_DATE_HINT
                )
            )

        if not (username and password):
            username, password = load_credentials(self.CREDENTIALS_PREFIX)

        self.url = (url or service_url(self.CREDENTIALS_PREFIX)).rstrip("/")
        self.version_date = version_date
        self._username = username
        self._password = password
        self._timeout = timeout or WATSON_TIMEOUT_S
        self._transport = transport

        self._headers = {
            "Accept": "application/json",
            "User-Agent": USER_AGENT,
        }
        custom_headers = dict(headers or {})
        header_opt_out = any(
            key.lower() == _OPT_OUT_HEADER.lower() and str(value).lower() in ("1", "true")
            for key, value in custom_headers.items()
        )
        self.learning_opt_out = bool(learning_opt_out or header_opt_out)
        if learning_opt_out and not header_opt_out:
            self._headers[_OPT_OUT_HEADER] = "1"
        self._headers.update(custom_headers)

        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self):
        self._client = httpx.AsyncClient(
            base_url=self.url,
            auth=httpx.BasicAuth(self._username, self._password),
            headers=self._headers,
            timeout=httpx.Timeout(self._timeout, connect=WATSON_CONNECT_TIMEOUT_S),
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        if self._client:
            await self._client.aclose()
            self._client = None

    def _ensure_client(self) -> httpx.AsyncClient:
        """Return the active httpx client, raising if not in context manager."""
        if self._client is None:
            raise RuntimeError(
                "{0} must be used as an async context manager: "
                "async with {0}(...) as service: ...".format(type(self).__name__)
            )
        return self._client

    @property
    def authorization_header(self) -> str:
        """Basic auth header value, for connections httpx does not make."""
        credentials = "{}:{}".format(self._username, self._password).encode("utf-8")
        return "Basic " + base64.b64encode(credentials).decode("ascii")

    # ------------------------------------------------------------------
    # Request helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _require(**params: Any) -> None:
        missing = [name for name, value in params.items() if value is None or value == ""]
        if missing:
            raise MissingParameterError(missing)

    @staticmethod
    def _path(*segments: Any) -> str:
        """Join path segments, percent-encoding every reserved character."""
        return "/" + "/".join(quote(str(segment), safe="") for segment in segments)

    async def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json: Any = None,
        content: Any = None,
        files: Any = None,
        data: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """Send one request and return the decoded response.

        RULES:
        - JSON responses are decoded, empty bodies return None,
          anything else returns the response text
        - Raises WatsonAPIError on non-2xx responses
        """
        resp = await self._send(method, path, params, json, content, files, data, headers)
        return self._decode(resp)

    async def _send(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json: Any = None,
        content: Any = None,
        files: Any = None,
        data: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Send one request and return the raw response after the status check."""
        client = self._ensure_client()
        query = build_query(params, self.version_date)

        logger.debug("%s %s%s", method, self.url, path)
        resp = await client.request(
            method,
            path,
            params=query,
            json=json,
            content=content,
            files=files,
            data=data,
            headers=headers,
        )

        if not resp.is_success:
            error = WatsonAPIError.from_response(resp)
            logger.debug("%s %s failed: %s", method, path, error)
            raise error
        return resp

    @staticmethod
    def _decode(resp: httpx.Response) -> Any:
        if not resp.content:
            return None
        if "json" in resp.headers.get("content-type", ""):
            return resp.json()
        return resp.text
