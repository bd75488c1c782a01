"""Credentials sent to the login endpoint."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class LoginUserDto(BaseModel):
    model_config = ConfigDict(frozen=True)

    email: str
    password: str
