"""UI and logging configuration models."""

from typing import Literal

from pydantic import BaseModel, Field


class LoggingConfig(BaseModel):
    """Configuration for logging behavior."""

    mode: Literal["classic", "minimal"] = Field(
        default="classic",
        description="Console log style; minimal only shows warnings unless verbose",
    )

    suppress_modules: list[str] = Field(
        default=["tree_sitter", "markdown_it"],
        description="External library modules to suppress debug logs from in non-verbose mode",
    )
