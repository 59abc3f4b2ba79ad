from typing import Literal

from .base import Settings as BaseSettings


class Settings(BaseSettings):
    """Settings to use while developing on a local machine."""

    ENVIRONMENT: Literal["local", "staging", "production"] = "local"
    DATABASE_ECHO: bool = True
