"""
Domain models for the gotestcraft system.

This module contains the render-context models using Pydantic for
validation. They are request-scoped: built fresh for every invocation from
read-only package data and discarded once the edit set is produced.
"""

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ScaffoldField(BaseModel):
    """
    A rendered parameter or result slot.

    ``name`` is the test-case field an input parameter references; ``value``
    is the literal expression passed instead. Exactly one of them is set for
    arguments. Results only carry a name.
    """

    name: str = Field(default="", description="Field or variable name")
    type: str = Field(..., description="Qualified Go type string")
    value: str = Field(default="", description="Literal argument expression")

    @model_validator(mode="after")
    def _validate_name_or_value(self) -> "ScaffoldField":
        if self.name and self.value:
            raise ValueError("name and value are mutually exclusive")
        if not self.name and not self.value:
            raise ValueError("one of name or value must be set")
        return self

    model_config = ConfigDict(frozen=True)


class Function(BaseModel):
    """A callable signature with resolved, already-qualified type strings."""

    name: str = Field(..., description="Function, method or constructor name")
    args: list[ScaffoldField] = Field(default_factory=list)
    results: list[ScaffoldField] = Field(default_factory=list)
    variadic: bool = Field(
        default=False, description="Whether the final argument is variadic"
    )

    model_config = ConfigDict(frozen=True)


class Receiver(BaseModel):
    """Receiver variable of a method under test, plus its constructor."""

    var: ScaffoldField = Field(..., description="Receiver variable name and type")
    constructor: Function | None = Field(
        default=None,
        description="Constructor call for the receiver; None when none qualified",
    )

    model_config = ConfigDict(frozen=True)


class TestInfo(BaseModel):
    """Root render context for one generated test function."""

    __test__ = False

    testing_package_name: str = Field(
        ..., description="Local name used to reference package testing"
    )
    package_name: str = Field(
        default="",
        description="Qualifier of the package under test; empty for white-box tests",
    )
    test_func_name: str = Field(..., description="Name of the generated test")
    func: Function = Field(..., description="Function or method under test")
    receiver: Receiver | None = Field(
        default=None, description="Receiver information; None for functions"
    )

    model_config = ConfigDict(frozen=True)


class ImportInfo(BaseModel):
    """Local name of an imported package and whether it was explicitly aliased."""

    name: str
    renamed: bool = False

    model_config = ConfigDict(frozen=True)
