"""Document change models returned by scaffold generation."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class TextEdit(BaseModel):
    """Replace the byte range [start, end) of a document with new_text."""

    start: int = Field(default=0, ge=0)
    end: int = Field(default=0, ge=0)
    new_text: str = Field(..., description="Replacement text")

    @model_validator(mode="after")
    def _validate_range(self) -> "TextEdit":
        if self.start > self.end:
            raise ValueError("edit start must not be after edit end")
        return self

    model_config = ConfigDict(frozen=True)


class DocumentChange(BaseModel):
    """Either the creation of a file or an ordered list of edits to one."""

    kind: Literal["create", "edit"]
    path: Path
    edits: list[TextEdit] = Field(default_factory=list)

    @classmethod
    def create(cls, path: Path) -> "DocumentChange":
        return cls(kind="create", path=path)

    @classmethod
    def edit(cls, path: Path, edits: list[TextEdit]) -> "DocumentChange":
        return cls(kind="edit", path=path, edits=edits)

    model_config = ConfigDict(frozen=True)


class ImportFix(BaseModel):
    """A request to add an import to a file; name is empty when not renamed."""

    path: str
    name: str = ""

    model_config = ConfigDict(frozen=True)
