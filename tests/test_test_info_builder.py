"""Tests for render context assembly."""

import pytest

from gotestcraft.application.addtest.qualifier import Qualifier
from gotestcraft.application.addtest.test_info_builder import TestInfoBuilder
from gotestcraft.domain.errors import ResolutionError
from gotestcraft.domain.gotypes import (
    ERROR_TYPE,
    Basic,
    Func,
    Named,
    Package,
    Pointer,
    Signature,
    Struct,
    Var,
)
from gotestcraft.domain.models import ImportInfo, ScaffoldField
from tests.conftest import INT, MATHX, package_view

CONTEXT = Named("Context", Package("context", "context"))
POINT = Named("Point", MATHX, underlying=Struct())


def builder(view, xtest=True, test_imports=None):
    qf = Qualifier(view.package, xtest, file_imports={}, test_imports=test_imports)
    return TestInfoBuilder(view, qf, xtest), qf


class TestFunctions:
    def test_add_fields(self, add_view, add_func):
        b, qf = builder(add_view)
        info = b.build(add_func, "TestAdd")

        assert info.testing_package_name == "testing"
        assert info.package_name == "mathx"
        assert [(f.name, f.type) for f in info.func.args] == [("a", "int"), ("b", "int")]
        assert [(f.name, f.type) for f in info.func.results] == [
            ("got", "int"),
            ("gotErr", "error"),
        ]
        assert info.receiver is None
        assert qf.extra_imports == {
            "testing": ImportInfo(name="testing"),
            MATHX.path: ImportInfo(name="mathx"),
        }

    def test_white_box_is_unqualified(self, add_view, add_func):
        b, qf = builder(add_view, xtest=False, test_imports={"testing": ImportInfo(name="testing")})
        info = b.build(add_func, "TestAdd")
        assert info.package_name == ""
        assert qf.extra_imports == {}

    def test_context_unnamed_and_blank_parameters(self, add_view):
        fn = Func(
            "Draw",
            MATHX,
            Signature(
                params=(
                    Var("ctx", CONTEXT),
                    Var("", INT),
                    Var("_", POINT),
                    Var("label", Basic("string")),
                ),
            ),
        )
        b, qf = builder(add_view)
        args = b.build(fn, "TestDraw").func.args
        assert args == [
            ScaffoldField(type="context.Context", value="context.Background()"),
            ScaffoldField(type="int", value="0"),
            ScaffoldField(type="mathx.Point", value="mathx.Point{}"),
            ScaffoldField(name="label", type="string"),
        ]
        assert "context" in qf.extra_imports

    def test_context_only_special_in_first_position(self, add_view):
        fn = Func("Run", MATHX, Signature(params=(Var("n", INT), Var("ctx", CONTEXT))))
        b, _ = builder(add_view)
        args = b.build(fn, "TestRun").func.args
        assert args[1] == ScaffoldField(name="ctx", type="context.Context")

    def test_multiple_results(self, add_view):
        fn = Func(
            "Divmod",
            MATHX,
            Signature(results=(Var("q", INT), Var("r", INT), Var("err", ERROR_TYPE))),
        )
        b, _ = builder(add_view)
        names = [f.name for f in b.build(fn, "TestDivmod").func.results]
        assert names == ["got", "got2", "gotErr"]

    def test_error_not_last_is_compared(self, add_view):
        fn = Func("Odd", MATHX, Signature(results=(Var("", ERROR_TYPE), Var("", INT))))
        b, _ = builder(add_view)
        names = [f.name for f in b.build(fn, "TestOdd").func.results]
        assert names == ["got", "got2"]


class TestMethods:
    def test_set_contains_uses_new_set(self, set_view, set_funcs):
        _, contains = set_funcs
        b, _ = builder(set_view)
        info = b.build(contains, "TestSet_Contains")

        assert info.receiver.var == ScaffoldField(name="s", type="mathx.Set")
        ctor = info.receiver.constructor
        assert ctor.name == "NewSet"
        assert ctor.args == []
        assert [(f.name, f.type) for f in ctor.results] == [("s", "*mathx.Set")]
        assert [f.name for f in info.func.results] == ["got"]

    def test_receiver_without_constructor(self, set_type):
        method = Func("Len", MATHX, Signature(results=(Var("", INT),), recv=Var("", set_type)))
        view = package_view([], [])
        b, _ = builder(view)
        info = b.build(method, "TestSet_Len")
        assert info.receiver.var == ScaffoldField(name="s", type="mathx.Set")
        assert info.receiver.constructor is None

    def test_receiver_of_plain_function(self, add_view, add_func):
        b, _ = builder(add_view)
        with pytest.raises(ResolutionError, match="Add is not a method"):
            b.receiver(add_func)

    def test_constructor_results_and_collisions(self, set_type):
        open_set = Func(
            "NewSet",
            MATHX,
            Signature(
                params=(Var("x", INT),),
                results=(Var("", Pointer(set_type)), Var("", INT), Var("", ERROR_TYPE)),
            ),
        )
        # Three results do not qualify; a two-result constructor does.
        make = Func(
            "Make",
            MATHX,
            Signature(params=(Var("x", INT),), results=(Var("", set_type), Var("", ERROR_TYPE))),
        )
        add = Func(
            "Add",
            MATHX,
            Signature(params=(Var("x", INT),), recv=Var("s", Pointer(set_type))),
        )
        view = package_view([], [open_set, make])
        b, _ = builder(view)
        ctor = b.build(add, "TestSet_Add").receiver.constructor

        assert ctor.name == "Make"
        assert [f.name for f in ctor.args] == ["cx"]
        assert [(f.name, f.type) for f in ctor.results] == [
            ("s", "mathx.Set"),
            ("err", "error"),
        ]

    def test_qualifier_order_testing_first(self, set_view, set_funcs):
        _, contains = set_funcs
        b, qf = builder(set_view)
        b.build(contains, "TestSet_Contains")
        assert list(qf.extra_imports) == ["testing", MATHX.path]
