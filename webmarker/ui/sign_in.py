"""Headless state of the sign-in form."""

from __future__ import annotations

import re
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from webmarker.domain.events import LoggedIn
from webmarker.domain.exceptions import ValidationFailure
from webmarker.domain.models import LoginUserDto

if TYPE_CHECKING:
    from webmarker.infrastructure.messaging.event_bus import EventBus
    from webmarker.services.user_service import UserService


EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class SignInForm:
    """Validates credentials locally and logs in through the user service.

    Invalid input marks the offending fields and blocks submission; it never
    reaches the store or the backend.
    """

    def __init__(self, user_service: UserService, events: EventBus) -> None:
        self.user_service = user_service
        self.events = events
        self.email = ""
        self.password = ""
        self.loading = False
        self.was_validated = False
        self.invalid_fields: list[str] = []

    def validate(self) -> LoginUserDto:
        """Return the credentials, or raise ValidationFailure naming the bad fields."""
        invalid: list[str] = []
        if not EMAIL_PATTERN.match(self.email.strip()):
            invalid.append("email")
        if not self.password:
            invalid.append("password")
        if invalid:
            raise ValidationFailure("Sign-in form is invalid", fields=invalid)
        return LoginUserDto(email=self.email.strip(), password=self.password)

    async def submit(self) -> bool:
        """Validate and log in.

        Returns:
            True when the backend returned a token.
        """
        try:
            credentials = self.validate()
        except ValidationFailure as exc:
            self.was_validated = True
            self.invalid_fields = exc.fields
            return False

        self.invalid_fields = []
        self.loading = True
        try:
            token = await self.user_service.login(credentials)
        finally:
            self.loading = False

        if not token:
            return False
        await self.events.publish(LoggedIn(occurred_at=datetime.now(UTC), email=credentials.email))
        return True
