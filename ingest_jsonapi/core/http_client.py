"""HTTP client creation for outbound JSON API requests.

Clients are short-lived: every fetch opens one, sends a single request and
closes it again. Timeouts are always explicit.
"""

import os
import ssl
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import httpx

from ingest_jsonapi.config.settings import HTTPSettings
from ingest_jsonapi.core.logging import get_logger


logger = get_logger(__name__)


class HTTPClientFactory:
    """Factory for creating configured HTTP clients."""

    @staticmethod
    def create_client(
        *,
        settings: HTTPSettings | None = None,
        verify: ssl.SSLContext | bool = True,
        **kwargs: Any,
    ) -> httpx.Client:
        """Create an HTTP client from the HTTP settings.

        Args:
            settings: HTTP settings, defaults are used when omitted
            verify: SSL verification (True/False or an SSL context)
            **kwargs: Additional httpx.Client arguments

        Returns:
            Configured httpx.Client instance
        """
        settings = settings or HTTPSettings()
        proxy = _get_proxy_url()

        if verify is True:
            verify = _get_ssl_context()

        timeout = httpx.Timeout(
            connect=settings.timeout_connect,
            read=settings.timeout_read,
            write=settings.timeout_read,
            pool=settings.timeout_connect,
        )

        transport = httpx.HTTPTransport(verify=verify, proxy=proxy)

        headers: dict[str, str] = {}
        if settings.user_agent:
            headers["user-agent"] = settings.user_agent
        if "headers" in kwargs:
            headers.update(kwargs.pop("headers"))

        return httpx.Client(
            timeout=timeout,
            transport=transport,
            follow_redirects=settings.follow_redirects,
            headers=headers,
            **kwargs,
        )

    @staticmethod
    @contextmanager
    def managed_client(
        settings: HTTPSettings | None = None, **kwargs: Any
    ) -> Generator[httpx.Client, None, None]:
        """Create an HTTP client that is closed when the block exits.

        Example:
            with HTTPClientFactory.managed_client() as client:
                response = client.get("https://api.example.com")
        """
        client = HTTPClientFactory.create_client(settings=settings, **kwargs)
        try:
            yield client
        finally:
            client.close()


def _get_proxy_url() -> str | None:
    """Get proxy URL from environment variables."""
    https_proxy = os.environ.get("HTTPS_PROXY") or os.environ.get("https_proxy")
    all_proxy = os.environ.get("ALL_PROXY")
    http_proxy = os.environ.get("HTTP_PROXY") or os.environ.get("http_proxy")

    proxy_url = https_proxy or all_proxy or http_proxy

    if proxy_url:
        logger.debug("proxy_configured", proxy_url=proxy_url)

    return proxy_url


def _get_ssl_context() -> ssl.SSLContext | bool:
    """Get SSL verification configuration from environment variables.

    Returns:
        - An SSL context loading a custom CA bundle
        - True for default verification
        - False to disable verification (insecure)
    """
    ca_bundle = os.environ.get("REQUESTS_CA_BUNDLE") or os.environ.get("SSL_CERT_FILE")
    ssl_verify = os.environ.get("SSL_VERIFY", "true").lower()

    if ca_bundle and Path(ca_bundle).exists():
        logger.info("ssl_ca_bundle_configured", ca_bundle_path=ca_bundle)
        return ssl.create_default_context(cafile=ca_bundle)
    elif ssl_verify in ("false", "0", "no"):
        logger.warning(
            "ssl_verification_disabled",
            ssl_verify_value=ssl_verify,
            security_warning=True,
        )
        return False
    else:
        return True
