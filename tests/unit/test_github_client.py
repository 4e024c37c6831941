"""Unit tests for GitHubClient.

Tests GitHub API integration: release parsing, error mapping, pagination
and asset streaming.
"""

import pytest
import requests
from unittest.mock import MagicMock, patch

from release_monitor.exceptions import (
    SourceAuthError,
    SourceMalformedError,
    SourceNotFoundError,
    SourceRateLimitError,
    SourceRejectedError,
    SourceUnavailableError,
)
from release_monitor.updater.github_client import (
    GitHubClient,
    GitHubRelease,
    ReleaseAsset,
)


def make_response(status_code=200, json_data=None, text="", headers=None, links=None):
    """Create a mock requests response."""
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = json_data
    response.text = text
    response.headers = headers or {}
    response.links = links or {}
    return response


class TestReleaseAsset:
    """Tests for ReleaseAsset dataclass."""

    def test_from_api_response_prefers_api_url(self):
        """Test the API URL is used for downloads when present."""
        data = {
            "name": "app.tar.gz",
            "url": "https://api.github.com/repos/acme/widget/releases/assets/1",
            "browser_download_url": "https://github.com/acme/widget/releases/download/v1/app.tar.gz",
            "size": 1024,
            "content_type": "application/gzip",
        }
        asset = ReleaseAsset.from_api_response(data)

        assert asset.name == "app.tar.gz"
        assert asset.download_url == "https://api.github.com/repos/acme/widget/releases/assets/1"
        assert asset.size == 1024
        assert asset.content_type == "application/gzip"

    def test_from_api_response_falls_back_to_browser_url(self):
        """Test browser_download_url is used when url is absent."""
        asset = ReleaseAsset.from_api_response({
            "name": "app.zip",
            "browser_download_url": "https://example.com/app.zip",
        })
        assert asset.download_url == "https://example.com/app.zip"
        assert asset.size == 0

    def test_from_api_response_missing_name(self):
        """Test an asset without a name is malformed."""
        with pytest.raises(SourceMalformedError):
            ReleaseAsset.from_api_response({"url": "https://example.com/x"})

    def test_from_api_response_missing_url(self):
        """Test an asset without any download URL is malformed."""
        with pytest.raises(SourceMalformedError):
            ReleaseAsset.from_api_response({"name": "app.zip"})

    def test_from_api_response_not_object(self):
        """Test a non-object asset entry is malformed."""
        with pytest.raises(SourceMalformedError):
            ReleaseAsset.from_api_response(["app.zip"])


class TestGitHubRelease:
    """Tests for GitHubRelease dataclass."""

    def test_from_api_response(self, release_payload):
        """Test creating GitHubRelease from API response."""
        release = GitHubRelease.from_api_response(
            release_payload("v1.0.0", ["app.tar.gz", "app.zip"])
        )

        assert release.tag_name == "v1.0.0"
        assert release.name == "Release v1.0.0"
        assert release.draft is False
        assert [a.name for a in release.assets] == ["app.tar.gz", "app.zip"]

    def test_published_at_parsing(self, release_payload):
        """Test published_at date parsing."""
        release = GitHubRelease.from_api_response(release_payload("v1.0.0"))
        assert release.published_at is not None
        assert release.published_at.year == 2024
        assert release.published_at.month == 1
        assert release.published_at.day == 15

    def test_invalid_published_at_ignored(self, release_payload):
        """Test an unparsable date is dropped rather than failing."""
        data = release_payload("v1.0.0")
        data["published_at"] = "yesterday"
        release = GitHubRelease.from_api_response(data)
        assert release.published_at is None

    def test_get_asset(self, release_payload):
        """Test get_asset method."""
        release = GitHubRelease.from_api_response(release_payload("v1.0.0", ["app.zip"]))

        assert release.get_asset("app.zip").name == "app.zip"
        assert release.get_asset("nonexistent.txt") is None

    def test_missing_tag_name(self):
        """Test a release without tag_name is malformed."""
        with pytest.raises(SourceMalformedError):
            GitHubRelease.from_api_response({"name": "No tag", "assets": []})

    def test_assets_not_a_list(self, release_payload):
        """Test a release whose assets is not a list is malformed."""
        data = release_payload("v1.0.0")
        data["assets"] = {"name": "app.zip"}
        with pytest.raises(SourceMalformedError):
            GitHubRelease.from_api_response(data)

    def test_null_assets(self, release_payload):
        """Test null assets is treated as no assets."""
        data = release_payload("v1.0.0")
        data["assets"] = None
        assert GitHubRelease.from_api_response(data).assets == []


class TestGitHubClient:
    """Tests for GitHubClient."""

    @pytest.fixture
    def client(self):
        """Create a GitHubClient instance."""
        return GitHubClient("acme", "widget", token="secret-token", timeout=10)

    def test_session_headers(self, client):
        """Test the bearer credential and API media type are sent."""
        assert client._session.headers["Authorization"] == "Bearer secret-token"
        assert client._session.headers["Accept"] == "application/vnd.github+json"

    def test_no_token_no_authorization_header(self):
        """Test anonymous clients send no Authorization header."""
        client = GitHubClient("acme", "widget")
        assert "Authorization" not in client._session.headers

    def test_releases_url(self):
        """Test the releases URL honours a custom API base."""
        client = GitHubClient("acme", "widget", api_url="https://ghe.example.com/api/v3/")
        assert client.releases_url == "https://ghe.example.com/api/v3/repos/acme/widget/releases"

    def test_list_releases_success(self, client, release_payload):
        """Test successful list_releases."""
        response = make_response(json_data=[
            release_payload("v1.1.0"),
            release_payload("v1.0.0"),
        ])

        with patch.object(client._session, "get", return_value=response) as mock_get:
            releases = client.list_releases()

        assert [r.tag_name for r in releases] == ["v1.1.0", "v1.0.0"]
        args, kwargs = mock_get.call_args
        assert args[0] == client.releases_url
        assert kwargs["params"] == {"per_page": 100}
        assert kwargs["timeout"] == 10

    def test_list_releases_filters_drafts(self, client, release_payload):
        """Test that list_releases filters out drafts."""
        response = make_response(json_data=[
            release_payload("v1.1.0"),
            release_payload("v1.2.0", draft=True),
        ])

        with patch.object(client._session, "get", return_value=response):
            releases = client.list_releases()

        assert [r.tag_name for r in releases] == ["v1.1.0"]

    def test_list_releases_follows_pagination(self, client, release_payload):
        """Test that list_releases follows Link rel=next."""
        next_url = f"{client.releases_url}?per_page=100&page=2"
        first = make_response(
            json_data=[release_payload("v1.1.0")],
            links={"next": {"url": next_url, "rel": "next"}},
        )
        second = make_response(json_data=[release_payload("v1.0.0")])

        with patch.object(client._session, "get", side_effect=[first, second]) as mock_get:
            releases = client.list_releases()

        assert [r.tag_name for r in releases] == ["v1.1.0", "v1.0.0"]
        assert mock_get.call_count == 2
        args, kwargs = mock_get.call_args
        assert args[0] == next_url
        assert kwargs["params"] is None

    def test_list_releases_max_pages(self, client, release_payload):
        """Test pagination stops at max_pages."""
        page = make_response(
            json_data=[release_payload("v1.0.0")],
            links={"next": {"url": f"{client.releases_url}?page=2"}},
        )

        with patch.object(client._session, "get", return_value=page) as mock_get:
            releases = client.list_releases(max_pages=3)

        assert mock_get.call_count == 3
        assert len(releases) == 3

    def test_list_releases_warns_when_truncated(self, client, release_payload, caplog):
        """Test hitting the page limit with more pages left is logged as a warning."""
        page = make_response(
            json_data=[release_payload("v1.0.0")],
            links={"next": {"url": f"{client.releases_url}?page=2"}},
        )

        with patch.object(client._session, "get", return_value=page):
            with caplog.at_level("WARNING", logger="release_monitor"):
                client.list_releases(max_pages=2)

        assert "Stopped listing releases after 2 pages" in caplog.text

    def test_list_releases_no_warning_on_last_page(self, client, release_payload, caplog):
        """Test a listing that ends within the page limit logs no warning."""
        page = make_response(json_data=[release_payload("v1.0.0")])

        with patch.object(client._session, "get", return_value=page):
            with caplog.at_level("WARNING", logger="release_monitor"):
                client.list_releases(max_pages=1)

        assert "Stopped listing releases" not in caplog.text

    def test_list_releases_not_a_list(self, client):
        """Test a non-list payload is malformed."""
        response = make_response(json_data={"message": "unexpected"})

        with patch.object(client._session, "get", return_value=response):
            with pytest.raises(SourceMalformedError):
                client.list_releases()

    def test_list_releases_invalid_json(self, client):
        """Test a body that is not JSON is malformed."""
        response = make_response()
        response.json.side_effect = ValueError("No JSON object could be decoded")

        with patch.object(client._session, "get", return_value=response):
            with pytest.raises(SourceMalformedError):
                client.list_releases()

    def test_list_releases_empty(self, client):
        """Test an empty release list."""
        with patch.object(client._session, "get", return_value=make_response(json_data=[])):
            assert client.list_releases() == []

    @pytest.mark.parametrize("status_code", [401, 403])
    def test_auth_rejected(self, client, status_code):
        """Test authentication failures raise SourceAuthError."""
        response = make_response(status_code=status_code, text="Bad credentials")

        with patch.object(client._session, "get", return_value=response):
            with pytest.raises(SourceAuthError) as exc_info:
                client.list_releases()

        assert exc_info.value.status_code == status_code
        assert isinstance(exc_info.value, SourceRejectedError)

    def test_rate_limited_by_header(self, client):
        """Test 403 with exhausted rate limit raises SourceRateLimitError."""
        response = make_response(
            status_code=403,
            text="Forbidden",
            headers={"X-RateLimit-Remaining": "0"},
        )

        with patch.object(client._session, "get", return_value=response):
            with pytest.raises(SourceRateLimitError):
                client.list_releases()

    def test_rate_limited_by_message(self, client):
        """Test 403 mentioning the rate limit raises SourceRateLimitError."""
        response = make_response(status_code=403, text="API rate limit exceeded")

        with patch.object(client._session, "get", return_value=response):
            with pytest.raises(SourceRateLimitError):
                client.list_releases()

    def test_too_many_requests(self, client):
        """Test 429 raises SourceRateLimitError."""
        with patch.object(client._session, "get", return_value=make_response(status_code=429)):
            with pytest.raises(SourceRateLimitError):
                client.list_releases()

    def test_not_found(self, client):
        """Test 404 raises SourceNotFoundError."""
        with patch.object(client._session, "get", return_value=make_response(status_code=404)):
            with pytest.raises(SourceNotFoundError):
                client.list_releases()

    def test_server_error(self, client):
        """Test other statuses raise SourceRejectedError."""
        response = make_response(status_code=502, text="Bad gateway")

        with patch.object(client._session, "get", return_value=response):
            with pytest.raises(SourceRejectedError) as exc_info:
                client.list_releases()

        assert exc_info.value.status_code == 502

    def test_connection_error(self, client):
        """Test connection failures raise SourceUnavailableError."""
        with patch.object(
            client._session,
            "get",
            side_effect=requests.exceptions.ConnectionError("Network error"),
        ):
            with pytest.raises(SourceUnavailableError):
                client.list_releases()

    def test_timeout(self, client):
        """Test timeouts raise SourceUnavailableError."""
        with patch.object(
            client._session,
            "get",
            side_effect=requests.exceptions.Timeout("Request timed out"),
        ):
            with pytest.raises(SourceUnavailableError):
                client.list_releases()

    def test_ssl_error(self, client):
        """Test TLS failures raise SourceUnavailableError."""
        with patch.object(
            client._session,
            "get",
            side_effect=requests.exceptions.SSLError("certificate verify failed"),
        ):
            with pytest.raises(SourceUnavailableError):
                client.list_releases()

    def test_get_release_by_tag_success(self, client, release_payload):
        """Test successful get_release_by_tag."""
        response = make_response(json_data=release_payload("v1.0.0", ["app.zip"]))

        with patch.object(client._session, "get", return_value=response) as mock_get:
            release = client.get_release_by_tag("v1.0.0")

        assert release.tag_name == "v1.0.0"
        assert mock_get.call_args[0][0] == f"{client.releases_url}/tags/v1.0.0"

    def test_get_release_by_tag_quotes_tag(self, client, release_payload):
        """Test tags with special characters are URL-quoted."""
        response = make_response(json_data=release_payload("release/1.0"))

        with patch.object(client._session, "get", return_value=response) as mock_get:
            client.get_release_by_tag("release/1.0")

        assert mock_get.call_args[0][0] == f"{client.releases_url}/tags/release%2F1.0"

    def test_get_release_by_tag_not_found(self, client):
        """Test get_release_by_tag with non-existent tag."""
        with patch.object(client._session, "get", return_value=make_response(status_code=404)):
            with pytest.raises(SourceNotFoundError):
                client.get_release_by_tag("nonexistent")

    def test_download_asset_success(self, client, tmp_path):
        """Test successful asset download to a file."""
        asset = ReleaseAsset(name="app.zip", download_url="https://example.com/app.zip", size=12)
        response = make_response(headers={"content-length": "12"})
        response.iter_content = MagicMock(return_value=[b"test ", b"content"])
        destination = tmp_path / "app.zip"

        with patch.object(client._session, "get", return_value=response) as mock_get:
            written = client.download_asset(asset, destination)

        assert written == 12
        assert destination.read_bytes() == b"test content"
        args, kwargs = mock_get.call_args
        assert args[0] == "https://example.com/app.zip"
        assert kwargs["headers"] == {"Accept": "application/octet-stream"}
        assert kwargs["stream"] is True

    def test_download_asset_multiple_chunks(self, client, tmp_path):
        """Test chunks are written in order and counted."""
        asset = ReleaseAsset(name="app.zip", download_url="https://example.com/app.zip")
        response = make_response(headers={"content-length": "12"})
        response.iter_content = MagicMock(return_value=[b"chunk1", b"chunk2"])

        with patch.object(client._session, "get", return_value=response):
            written = client.download_asset(asset, tmp_path / "app.zip")

        assert written == 12
        assert (tmp_path / "app.zip").read_bytes() == b"chunk1chunk2"

    def test_download_asset_rejected(self, client, tmp_path):
        """Test a rejected asset request writes nothing."""
        asset = ReleaseAsset(name="app.zip", download_url="https://example.com/app.zip")
        destination = tmp_path / "app.zip"

        with patch.object(client._session, "get", return_value=make_response(status_code=403)):
            with pytest.raises(SourceAuthError):
                client.download_asset(asset, destination)

        assert not destination.exists()

    def test_download_asset_stream_broken(self, client, tmp_path):
        """Test a stream that breaks mid-transfer raises SourceUnavailableError."""
        asset = ReleaseAsset(name="app.zip", download_url="https://example.com/app.zip")
        response = make_response()
        response.iter_content = MagicMock(
            side_effect=requests.exceptions.ChunkedEncodingError("connection reset")
        )

        with patch.object(client._session, "get", return_value=response):
            with pytest.raises(SourceUnavailableError):
                client.download_asset(asset, tmp_path / "app.zip")

    def test_context_manager(self):
        """Test GitHubClient as context manager closes the session."""
        with patch.object(GitHubClient, "close") as mock_close:
            with GitHubClient("acme", "widget") as client:
                assert client._session is not None
        mock_close.assert_called_once()

    def test_close(self, client):
        """Test closing the client closes the session."""
        with patch.object(client._session, "close") as mock_close:
            client.close()
        mock_close.assert_called_once()
