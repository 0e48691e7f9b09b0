"""Retrieval of JSON response bodies over HTTP."""

import httpx

from ingest_jsonapi.config.settings import HTTPSettings
from ingest_jsonapi.core.errors import FetchError
from ingest_jsonapi.core.http_client import HTTPClientFactory
from ingest_jsonapi.core.logging import get_logger
from ingest_jsonapi.utils.headers import parse_extra_header


logger = get_logger(__name__)


class HTTPFetcher:
    """Issues single GET requests and returns the decoded response body.

    Each call opens its own client and closes it before returning, so a
    fetcher can be shared across threads.
    """

    def __init__(self, settings: HTTPSettings | None = None) -> None:
        self.settings = settings or HTTPSettings()

    def fetch(self, url: str, extra_header: str | None = None) -> str:
        """GET ``url`` and return the response body as text.

        Args:
            url: Fully built request URL
            extra_header: Optional ``"Name: Value"`` header; ignored when it
                has no ``:`` separator

        Raises:
            FetchError: On a non-2xx status or a transport failure
        """
        headers: dict[str, str] = {}
        parsed = parse_extra_header(extra_header)
        if parsed is not None:
            name, value = parsed
            headers[name] = value
        elif extra_header:
            logger.debug("json_api_extra_header_ignored", extra_header=extra_header)

        try:
            with HTTPClientFactory.managed_client(settings=self.settings) as client:
                response = client.get(url, headers=headers)
                status = response.status_code
                if not 200 <= status < 300:
                    logger.info(
                        "json_api_unexpected_status", url=url, status_code=status
                    )
                    raise FetchError.unexpected_status(status, url=url)
                body = response.text
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning(
                "json_api_fetch_failed",
                url=url,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise FetchError.network_failure(e, url=url) from e

        logger.debug(
            "json_api_response_fetched",
            url=url,
            status_code=status,
            body_length=len(body),
        )
        return body
