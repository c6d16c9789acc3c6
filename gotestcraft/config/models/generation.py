"""Scaffold generation configuration models."""

from pydantic import BaseModel, Field, field_validator


class GenerationConfig(BaseModel):
    """Configuration for scaffold generation behavior."""

    test_file_suffix: str = Field(
        default="_test.go",
        description="Suffix replacing '.go' to form the companion test file name",
    )

    fresh_test_name: bool = Field(
        default=True,
        description="Append a numeric suffix when the test function name is already taken",
    )

    indent: str = Field(
        default="\t",
        description="Indentation unit of the rendered scaffold",
    )

    @field_validator("test_file_suffix")
    @classmethod
    def validate_suffix(cls, v: str) -> str:
        """Go only compiles test files ending in _test.go."""
        if not v.endswith("_test.go"):
            raise ValueError("test_file_suffix must end with '_test.go'")
        return v

    @field_validator("indent")
    @classmethod
    def validate_indent(cls, v: str) -> str:
        if not v or v.strip(" \t"):
            raise ValueError("indent must be a non-empty run of spaces or tabs")
        return v


class ImportsConfig(BaseModel):
    """Configuration for import merging into existing test files."""

    local_prefix: str = Field(
        default="",
        description="Import path prefix grouped after third-party imports (like goimports -local)",
    )
