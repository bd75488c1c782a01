"""Tests for UserService login and logout."""

import pytest

from webmarker.domain.models import LoginUserDto


@pytest.mark.asyncio
async def test_login_returns_token_and_authorizes_requests(container, backend):
    token = await container.user_service.login(
        LoginUserDto(email="user@example.com", password="secret")
    )

    assert token == "token-123"
    assert container.user_service.is_logged_in()

    await container.bookmark_service.get_bookmarks()
    request = backend.calls("GET", "/bookmarks")[0]
    assert request.headers["Authorization"] == "Bearer token-123"


@pytest.mark.asyncio
async def test_login_with_wrong_password_returns_empty_token(container, caplog):
    token = await container.user_service.login(
        LoginUserDto(email="user@example.com", password="wrong")
    )

    assert token == ""
    assert not container.user_service.is_logged_in()
    assert "user_login_failed" in caplog.text


@pytest.mark.asyncio
async def test_logout_clears_token_and_state(container, backend):
    await container.user_service.login(LoginUserDto(email="user@example.com", password="secret"))
    container.actions.add_tag("private")

    container.user_service.logout()

    assert not container.user_service.is_logged_in()
    assert container.store.get_state().tags == ()
    await container.tag_service.get_tags()
    assert "Authorization" not in backend.calls("GET", "/tags")[0].headers
