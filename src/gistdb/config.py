from typing import List

from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str = Field("sqlite:///gistdb.db", description="SQLAlchemy database URL")
    sql_echo: bool = Field(False, description="Log emitted SQL statements")
    page_size: int = Field(10, description="Rows per page for paged listings")
    reserved_usernames: List[str] = Field(
        [
            "assets",
            "register",
            "login",
            "logout",
            "settings",
            "admin-panel",
            "all",
            "search",
            "init",
            "healthcheck",
            "metrics",
        ],
        description="Usernames that collide with application routes",
    )


settings = Settings()
