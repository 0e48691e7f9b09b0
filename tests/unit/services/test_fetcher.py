"""Unit tests for the HTTP fetcher."""

import httpx
import pytest
from pytest_httpx import HTTPXMock

from ingest_jsonapi.core.errors import FetchError, FetchErrorKind
from ingest_jsonapi.services.fetcher import HTTPFetcher


URL = "http://example.test/json/1.2.3.4"


@pytest.mark.unit
class TestHTTPFetcher:
    """GET requests, header injection and status classification."""

    def test_returns_body_text(self, fetcher: HTTPFetcher, httpx_mock: HTTPXMock):
        httpx_mock.add_response(url=URL, text='{"a": 1}')

        assert fetcher.fetch(URL) == '{"a": 1}'
        request = httpx_mock.get_request()
        assert request is not None
        assert request.method == "GET"

    def test_decodes_utf8_body(self, fetcher: HTTPFetcher, httpx_mock: HTTPXMock):
        httpx_mock.add_response(
            url=URL,
            content='{"city": "Zürich"}'.encode(),
            headers={"content-type": "application/json; charset=utf-8"},
        )

        assert fetcher.fetch(URL) == '{"city": "Zürich"}'

    def test_extra_header_attached(self, fetcher: HTTPFetcher, httpx_mock: HTTPXMock):
        httpx_mock.add_response(url=URL, text="{}")

        fetcher.fetch(URL, "Authorization: Basic ABC123==")

        request = httpx_mock.get_request()
        assert request is not None
        assert request.headers["Authorization"] == "Basic ABC123=="

    def test_header_value_keeps_colons(self, fetcher: HTTPFetcher, httpx_mock: HTTPXMock):
        httpx_mock.add_response(url=URL, text="{}")

        fetcher.fetch(URL, "X-Forwarded-Url :  http://a:8080/x ")

        request = httpx_mock.get_request()
        assert request is not None
        assert request.headers["X-Forwarded-Url"] == "http://a:8080/x"

    def test_malformed_header_ignored(self, fetcher: HTTPFetcher, httpx_mock: HTTPXMock):
        httpx_mock.add_response(url=URL, text="{}")

        assert fetcher.fetch(URL, "Authorization Basic ABC123==") == "{}"

        request = httpx_mock.get_request()
        assert request is not None
        assert "Authorization" not in request.headers

    @pytest.mark.parametrize("status", [200, 201, 204, 299])
    def test_success_statuses(self, fetcher: HTTPFetcher, httpx_mock: HTTPXMock, status):
        httpx_mock.add_response(url=URL, status_code=status, text="{}" if status != 204 else "")

        fetcher.fetch(URL)

    @pytest.mark.parametrize("status", [301, 404, 500, 503])
    def test_unexpected_status(self, fetcher: HTTPFetcher, httpx_mock: HTTPXMock, status):
        httpx_mock.add_response(url=URL, status_code=status)

        with pytest.raises(FetchError) as exc_info:
            fetcher.fetch(URL)

        assert exc_info.value.kind is FetchErrorKind.UNEXPECTED_STATUS
        assert exc_info.value.status == status
        assert str(status) in str(exc_info.value)
        assert exc_info.value.url == URL

    def test_404_message(self, fetcher: HTTPFetcher, httpx_mock: HTTPXMock):
        httpx_mock.add_response(url=URL, status_code=404)

        with pytest.raises(FetchError, match="^Unexpected response status: 404$"):
            fetcher.fetch(URL)

    @pytest.mark.parametrize(
        "exception",
        [
            httpx.ConnectError("Connection refused"),
            httpx.ReadTimeout("timed out"),
            httpx.ConnectTimeout("timed out"),
        ],
    )
    def test_network_failure(self, fetcher: HTTPFetcher, httpx_mock: HTTPXMock, exception):
        httpx_mock.add_exception(exception, url=URL)

        with pytest.raises(FetchError) as exc_info:
            fetcher.fetch(URL)

        assert exc_info.value.kind is FetchErrorKind.NETWORK_FAILURE
        assert exc_info.value.cause is exception
        assert exc_info.value.status is None
