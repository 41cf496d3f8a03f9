"""Unit tests for the remote template source."""

from unittest.mock import MagicMock

import pytest
import requests

from v5build.templates.remote import (
    USER_AGENT,
    MalformedResponseError,
    TemplateFetchError,
    TemplateSource,
)


def make_response(json_data=None, chunks=(), headers=None, error=None):
    response = MagicMock()
    if error is not None:
        response.raise_for_status.side_effect = error
    if isinstance(json_data, Exception):
        response.json.side_effect = json_data
    else:
        response.json.return_value = json_data
    response.iter_content.return_value = list(chunks)
    response.headers = headers or {}
    return response


@pytest.fixture
def session():
    session = MagicMock()
    session.headers = {}
    return session


class TestTemplateSource:
    """Test cases for TemplateSource."""

    def test_urls(self, session):
        """Test the commits API and archive URLs for the template branch."""
        source = TemplateSource(session=session)

        assert source.commits_url == "https://api.github.com/repos/vexide/vexide-template/commits/main?per-page=1"
        assert source.archive_url == "https://github.com/vexide/vexide-template/archive/refs/heads/main.tar.gz"
        assert session.headers["User-Agent"] == USER_AGENT

    def test_fetch_current_sha(self, session):
        """Test the sha is read from the commits API response."""
        session.get.return_value = make_response({"sha": "0123abcd", "commit": {}})

        assert TemplateSource(session=session).fetch_current_sha() == "0123abcd"

    def test_fetch_current_sha_missing_sha(self, session):
        """Test a response without a string sha is malformed."""
        session.get.return_value = make_response({"message": "API rate limit exceeded"})

        with pytest.raises(MalformedResponseError):
            TemplateSource(session=session).fetch_current_sha()

    def test_fetch_current_sha_not_json(self, session):
        """Test a non-JSON response is malformed."""
        session.get.return_value = make_response(ValueError("no json"))

        with pytest.raises(MalformedResponseError):
            TemplateSource(session=session).fetch_current_sha()

    def test_fetch_current_sha_http_error(self, session):
        """Test HTTP errors become TemplateFetchError."""
        session.get.return_value = make_response(error=requests.HTTPError("403"))

        with pytest.raises(TemplateFetchError):
            TemplateSource(session=session).fetch_current_sha()

    def test_fetch_archive(self, session):
        """Test the archive is assembled from streamed chunks."""
        session.get.return_value = make_response(chunks=[b"abc", b"", b"def"], headers={"content-length": "6"})

        data = TemplateSource(session=session, show_progress=False).fetch_archive()

        assert data == b"abcdef"
        assert session.get.call_args.kwargs["stream"] is True

    def test_fetch_archive_connection_error(self, session):
        """Test transport errors become TemplateFetchError."""
        session.get.side_effect = requests.ConnectionError("no route to host")

        with pytest.raises(TemplateFetchError, match="Failed to download"):
            TemplateSource(session=session, show_progress=False).fetch_archive()

    def test_fetch_template_with_sha(self, session):
        """Test a fresh template carries the current sha."""
        session.get.side_effect = [
            make_response(chunks=[b"archive"]),
            make_response({"sha": "feedbeef"}),
        ]

        template = TemplateSource(session=session, show_progress=False).fetch_template()

        assert template.data == b"archive"
        assert template.sha == "feedbeef"

    def test_fetch_template_sha_failure(self, session):
        """Test a fresh template without a known sha is still returned."""
        session.get.side_effect = [
            make_response(chunks=[b"archive"]),
            requests.ConnectionError("dropped"),
        ]

        template = TemplateSource(session=session, show_progress=False).fetch_template()

        assert template.data == b"archive"
        assert template.sha is None
