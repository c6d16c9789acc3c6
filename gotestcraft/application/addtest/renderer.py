"""
Scaffold rendering for table-driven Go tests.

The scaffold is assembled as an explicit list of indented lines by
GoSourceBuilder, so that indentation and conditional sections follow the
render context rather than text concatenation order. Rendering is a pure
function of TestInfo.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from ...domain.errors import RenderError
from ...domain.models import Function, ScaffoldField, TestInfo


class GoSourceBuilder:
    """Collects (indent level, text) nodes and renders them as Go source."""

    def __init__(self, indent: str = "\t") -> None:
        self._indent = indent
        self._level = 0
        self._nodes: list[tuple[int, str]] = []

    def line(self, text: str = "") -> None:
        self._nodes.append((self._level, text))

    @contextmanager
    def block(self, opener: str, closer: str = "}") -> Iterator[None]:
        """Emit opener, indent everything added inside, then emit closer."""
        self.line(opener)
        with self.indented():
            yield
        self.line(closer)

    @contextmanager
    def indented(self) -> Iterator[None]:
        self._level += 1
        try:
            yield
        finally:
            self._level -= 1

    def render(self) -> str:
        return "".join(
            (self._indent * level + text if text else "") + "\n"
            for level, text in self._nodes
        )


def field_names(fields: list[ScaffoldField]) -> str:
    return ", ".join(f.name for f in fields)


def call_args(fn: Function) -> str:
    """Arguments of a call to fn: test-case fields or literal values."""
    args = []
    for i, arg in enumerate(fn.args):
        if arg.name:
            expr = "tt." + arg.name
            if fn.variadic and i == len(fn.args) - 1:
                expr += "..."
        else:
            expr = arg.value
        args.append(expr)
    return ", ".join(args)


def want_field(index: int) -> str:
    return "want" if index == 0 else f"want{index + 1}"


class ScaffoldRenderer:
    """Render a TestInfo as a table-driven test function."""

    def __init__(self, indent: str = "\t") -> None:
        self._indent = indent

    def render(self, info: TestInfo) -> str:
        """
        Render the test function, preceded by an empty line.

        Raises:
            RenderError: If the render context is inconsistent
        """
        self._validate(info)
        b = GoSourceBuilder(self._indent)
        testing = info.testing_package_name

        b.line()
        with b.block(f"func {info.test_func_name}(t *{testing}.T) {{"):
            self._test_cases(b, info)
            with b.block("for _, tt := range tests {"):
                with b.block(f"t.Run(tt.name, func(t *{testing}.T) {{", "})"):
                    self._receiver(b, info)
                    self._call(b, info)
                    self._error_check(b, info)
                    self._comparisons(b, info)
        return b.render()

    def _validate(self, info: TestInfo) -> None:
        if not info.test_func_name:
            raise RenderError("missing test function name")
        if not info.testing_package_name:
            raise RenderError("missing local name for package testing")
        for f in info.func.results:
            if not f.name:
                raise RenderError(f"unnamed result in {info.func.name}")
        if info.receiver is not None and info.receiver.constructor is not None:
            ctor = info.receiver.constructor
            if not ctor.results:
                raise RenderError(f"constructor {ctor.name} returns no values")
            if ctor.results[0].name != info.receiver.var.name:
                raise RenderError(
                    f"constructor {ctor.name} does not bind receiver {info.receiver.var.name}"
                )

    def _test_cases(self, b: GoSourceBuilder, info: TestInfo) -> None:
        with b.block("tests := []struct {", "}{"):
            b.line("name string // description of this test case")
            if info.receiver is not None and info.receiver.constructor is not None:
                self._named_inputs(
                    b,
                    info.receiver.constructor.args,
                    "// Named input parameters for receiver constructor.",
                )
            self._named_inputs(
                b, info.func.args, "// Named input parameters for target function."
            )
            for i, res in enumerate(info.func.results):
                if res.name == "gotErr":
                    b.line("wantErr bool")
                else:
                    b.line(f"{want_field(i)} {res.type}")
        with b.indented():
            b.line("// TODO: Add test cases.")
        b.line("}")

    def _named_inputs(
        self, b: GoSourceBuilder, args: list[ScaffoldField], comment: str
    ) -> None:
        named = [a for a in args if a.name]
        if not named:
            return
        b.line(comment)
        for arg in named:
            b.line(f"{arg.name} {arg.type}")

    def _receiver(self, b: GoSourceBuilder, info: TestInfo) -> None:
        recv = info.receiver
        if recv is None:
            return
        ctor = recv.constructor
        if ctor is None:
            b.line("// TODO: construct the receiver type.")
            b.line(f"var {recv.var.name} {recv.var.type}")
            return

        qualifier = f"{info.package_name}." if info.package_name else ""
        b.line(f"{field_names(ctor.results)} := {qualifier}{ctor.name}({call_args(ctor)})")
        if ctor.results[-1].type == "error":
            with b.block("if err != nil {"):
                b.line('t.Fatalf("could not construct receiver type: %v", err)')

    def _call(self, b: GoSourceBuilder, info: TestInfo) -> None:
        fn = info.func
        got = f"{field_names(fn.results)} := " if fn.results else ""
        if info.receiver is not None:
            target = f"{info.receiver.var.name}."
        elif info.package_name:
            target = f"{info.package_name}."
        else:
            target = ""
        b.line(f"{got}{target}{fn.name}({call_args(fn)})")

    def _error_check(self, b: GoSourceBuilder, info: TestInfo) -> None:
        fn = info.func
        if not fn.results or fn.results[-1].name != "gotErr":
            return
        with b.block("if gotErr != nil {"):
            with b.block("if !tt.wantErr {"):
                b.line(f't.Errorf("{fn.name}() failed: %v", gotErr)')
            b.line("return")
        with b.block("if tt.wantErr {"):
            b.line(f't.Fatal("{fn.name}() succeeded unexpectedly")')

    def _comparisons(self, b: GoSourceBuilder, info: TestInfo) -> None:
        fn = info.func
        compared = [(i, r) for i, r in enumerate(fn.results) if r.name != "gotErr"]
        if not compared:
            return
        b.line("// TODO: update the condition below to compare got with tt.want.")
        for i, res in compared:
            with b.block("if true {"):
                b.line(
                    f't.Errorf("{fn.name}() = %v, want %v", {res.name}, tt.{want_field(i)})'
                )
