"""Tests for the sign-in form."""

import pytest

from webmarker.domain.events import LoggedIn
from webmarker.domain.exceptions import ValidationFailure


@pytest.fixture
def logins(container):
    received = []

    async def on_login(event):
        received.append(event)

    container.events.subscribe(LoggedIn, on_login)
    return received


@pytest.mark.asyncio
async def test_invalid_input_never_reaches_backend(container, backend, logins):
    form = container.sign_in_form()
    form.email = "not-an-email"

    assert await form.submit() is False

    assert form.was_validated is True
    assert form.invalid_fields == ["email", "password"]
    assert backend.requests == []
    assert logins == []


def test_validate_raises_with_field_names(container):
    form = container.sign_in_form()
    form.email = "user@example.com"

    with pytest.raises(ValidationFailure) as exc_info:
        form.validate()

    assert exc_info.value.fields == ["password"]


@pytest.mark.asyncio
async def test_successful_login_publishes_event(container, logins):
    form = container.sign_in_form()
    form.email = " user@example.com "
    form.password = "secret"

    assert await form.submit() is True

    assert form.loading is False
    assert form.invalid_fields == []
    [event] = logins
    assert event.email == "user@example.com"
    assert container.user_service.is_logged_in()


@pytest.mark.asyncio
async def test_rejected_credentials(container, logins):
    form = container.sign_in_form()
    form.email = "user@example.com"
    form.password = "nope"

    assert await form.submit() is False
    assert logins == []
    assert form.loading is False
