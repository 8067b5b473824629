"""Tests for MCP tools."""

import pytest
from pydantic import ValidationError

from shiori_share.config import Settings
from shiori_share.errors import (
    ConnectionFailedError,
    InvalidCredentialsError,
    NotConfiguredError,
)
from shiori_share.tools import (
    NO_URL_MESSAGE,
    CheckConnectionParams,
    ConnectionStatus,
    SaveBookmarkParams,
    SaveBookmarkResult,
    ShareDefaults,
    check_connection,
    list_suggested_tags,
    prepare_share,
    save_bookmark,
)


class TestPrepareShareTool:
    """Test the prepareShare tool."""

    @pytest.mark.asyncio
    async def test_prepare_share(self, mock_client, settings):
        """Test defaults are returned and a tag refresh is started."""
        tool_func = prepare_share(mock_client, settings)

        result = await tool_func()

        assert isinstance(result, ShareDefaults)
        assert result.configured is True
        assert result.create_archive is True
        assert result.make_public is False
        assert result.suggested_tags == ["python", "web"]
        mock_client.schedule_popular_tags_refresh.assert_called_once_with()

    @pytest.mark.asyncio
    async def test_prepare_share_not_configured(self, mock_client, settings):
        """Test no refresh is attempted without credentials."""
        mock_client.is_configured.return_value = False

        result = await prepare_share(mock_client, settings)()

        assert result.configured is False
        mock_client.schedule_popular_tags_refresh.assert_not_called()


class TestSaveBookmarkTool:
    """Test the saveBookmark tool."""

    @pytest.mark.asyncio
    async def test_save_bookmark(self, mock_client, settings):
        """Test a successful save uses the configured defaults."""
        tool_func = save_bookmark(mock_client, settings)
        params = SaveBookmarkParams(
            url="https://example.com/python-testing",
            title="Python Testing",
            keywords="python, testing",
        )

        result = await tool_func(params)

        assert isinstance(result, SaveBookmarkResult)
        assert result.saved is True
        assert result.bookmark.id == 42
        assert result.error is None
        mock_client.add_bookmark.assert_called_once_with(
            url="https://example.com/python-testing",
            title="Python Testing",
            description=None,
            keywords="python, testing",
            create_archive=True,
            make_public=False,
        )

    @pytest.mark.asyncio
    async def test_save_bookmark_explicit_flags(self, mock_client, tmp_path):
        """Test explicit flags override the settings defaults."""
        settings = Settings(
            state_dir=tmp_path, default_create_archive=True, default_make_public=False
        )
        params = SaveBookmarkParams(
            url="https://example.com", create_archive=False, make_public=True
        )

        await save_bookmark(mock_client, settings)(params)

        kwargs = mock_client.add_bookmark.call_args.kwargs
        assert kwargs["create_archive"] is False
        assert kwargs["make_public"] is True

    @pytest.mark.asyncio
    async def test_save_bookmark_no_url(self, mock_client, settings):
        """Test content without a URL is rejected before calling the server."""
        params = SaveBookmarkParams(url="just some shared text")

        result = await save_bookmark(mock_client, settings)(params)

        assert result.saved is False
        assert result.error.message == NO_URL_MESSAGE
        assert result.error.retryable is False
        mock_client.add_bookmark.assert_not_called()

    @pytest.mark.asyncio
    async def test_save_bookmark_retryable_error(self, mock_client, settings):
        """Test a retryable failure is reported with its flag."""
        mock_client.add_bookmark.side_effect = ConnectionFailedError(
            OSError("Network is unreachable")
        )

        result = await save_bookmark(mock_client, settings)(
            SaveBookmarkParams(url="https://example.com")
        )

        assert result.saved is False
        assert result.error.error_type == "ConnectionFailedError"
        assert result.error.retryable is True
        assert result.error.message == "Connection failed: Network is unreachable"

    @pytest.mark.asyncio
    async def test_save_bookmark_not_configured(self, mock_client, settings):
        """Test configuration problems are not retryable."""
        mock_client.add_bookmark.side_effect = NotConfiguredError()

        result = await save_bookmark(mock_client, settings)(
            SaveBookmarkParams(url="https://example.com")
        )

        assert result.error.error_type == "NotConfiguredError"
        assert result.error.retryable is False

    @pytest.mark.asyncio
    async def test_unexpected_errors_propagate(self, mock_client, settings):
        """Test only classified errors are turned into results."""
        mock_client.add_bookmark.side_effect = RuntimeError("bug")

        with pytest.raises(RuntimeError):
            await save_bookmark(mock_client, settings)(
                SaveBookmarkParams(url="https://example.com")
            )


class TestListSuggestedTagsTool:
    """Test the listSuggestedTags tool."""

    @pytest.mark.asyncio
    async def test_list_suggested_tags(self, mock_client):
        result = await list_suggested_tags(mock_client)()
        assert result == ["python", "web"]


class TestCheckConnectionTool:
    """Test the checkConnection tool."""

    @pytest.mark.asyncio
    async def test_check_connection(self, mock_client):
        """Test a successful login is reported."""
        params = CheckConnectionParams(
            server_url="shiori.example.com", username="alice", password="s3cret"
        )

        result = await check_connection(mock_client)(params)

        assert isinstance(result, ConnectionStatus)
        assert result.ok is True
        mock_client.check_connection.assert_called_once_with(
            server_url="shiori.example.com", username="alice", password="s3cret"
        )

    @pytest.mark.asyncio
    async def test_check_connection_failure(self, mock_client):
        """Test a failed login returns the error message."""
        mock_client.check_connection.side_effect = InvalidCredentialsError()
        params = CheckConnectionParams(
            server_url="shiori.example.com", username="alice", password="wrong"
        )

        result = await check_connection(mock_client)(params)

        assert result.ok is False
        assert result.message == "Invalid username or password"
        assert result.error.error_type == "InvalidCredentialsError"

    def test_params_hide_password(self):
        params = CheckConnectionParams(
            server_url="shiori.example.com", username="alice", password="s3cret"
        )
        assert "s3cret" not in repr(params)

    def test_params_require_fields(self):
        with pytest.raises(ValidationError):
            CheckConnectionParams(server_url="shiori.example.com")
