"""
Package loader adapter for Go source directories.

Builds a PackageView from the non-test .go files of a directory: it parses
every file with tree-sitter, resolves the package's declared types and
function signatures into the gotypes model and records the dependencies of
its imports. Resolution is syntactic. Types from other packages are known
by name only, except for a few standard library types whose kind decides
the zero value of a parameter.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

from tree_sitter import Node

from ...domain.gotypes import (
    ANY,
    ERROR_TYPE,
    NUMERIC_KINDS,
    Alias,
    Array,
    Basic,
    Chan,
    Func,
    GoType,
    Interface,
    Map,
    Named,
    Package,
    Pointer,
    Signature,
    Slice,
    Struct,
    TypeParam,
    Var,
)
from ...domain.package_view import (
    COMMAND_LINE_ARGUMENTS,
    DepInfo,
    FuncDecl,
    PackageView,
    ParsedFile,
    import_path_to_assumed_name,
)
from .treesitter_parser import TreeSitterGoParser, node_text, receiver_base_node, unquote

logger = logging.getLogger(__name__)

_MODULE_RE = re.compile(r"^\s*module\s+(\S+)", re.MULTILINE)

UNIVERSE: dict[str, GoType] = {
    name: Basic(name) for name in NUMERIC_KINDS | {"bool", "string"}
}
UNIVERSE.update(
    {
        "error": ERROR_TYPE,
        "any": ANY,
        "comparable": Named("comparable", None, underlying=Interface()),
    }
)

# Standard library types whose underlying type matters for zero values.
KNOWN_UNDERLYING: dict[tuple[str, str], GoType] = {
    ("context", "Context"): Interface(),
    ("io", "Reader"): Interface(),
    ("io", "Writer"): Interface(),
    ("io", "ReadCloser"): Interface(),
    ("net/http", "Handler"): Interface(),
    ("time", "Duration"): Basic("int64"),
    ("time", "Month"): Basic("int"),
    ("time", "Time"): Struct(),
    ("os", "FileMode"): Basic("uint32"),
    ("io/fs", "FileMode"): Basic("uint32"),
}


class PackageLoadError(Exception):
    """Raised when a directory cannot be loaded as a Go package."""

    pass


@dataclass
class _SourceFile:
    parsed: ParsedFile
    root: Node
    imports_by_name: dict[str, Package] = field(default_factory=dict)
    dot_import: Package | None = None


@dataclass
class _TypeDecl:
    name: str
    spec: Node
    file: _SourceFile
    alias: bool


def find_module(directory: Path) -> tuple[Path, str] | None:
    """Return the root directory and module path of the enclosing go.mod."""
    for candidate in [directory, *directory.parents]:
        gomod = candidate / "go.mod"
        if gomod.is_file():
            match = _MODULE_RE.search(gomod.read_text(encoding="utf-8", errors="replace"))
            if match:
                return candidate, unquote(match.group(1))
    return None


class GoPackageLoader:
    """
    PackageViewPort implementation over a Go source tree.

    A directory outside any module loads as the synthetic
    command-line-arguments package, as the go command does for files named
    on its command line.
    """

    def __init__(self, parser: TreeSitterGoParser | None = None) -> None:
        self._parser = parser or TreeSitterGoParser()

    def package_for_file(self, path: Path) -> PackageView:
        path = Path(path).resolve()
        if not path.is_file():
            raise PackageLoadError(f"no such file: {path}")
        directory = path.parent

        files = self._parse_dir(directory)
        subject = next((f for f in files if f.parsed.path == path), None)
        pkg_name = (subject or files[0]).parsed.package_name if files else None

        kept = []
        for f in files:
            if f.parsed.package_name not in (pkg_name, None):
                logger.warning(
                    "Ignoring %s: package %s, expected %s",
                    f.parsed.path.name,
                    f.parsed.package_name,
                    pkg_name,
                )
                continue
            kept.append(f)

        module = find_module(directory)
        if module is None:
            pkg_id = COMMAND_LINE_ARGUMENTS
        else:
            root, module_path = module
            rel = directory.relative_to(root).as_posix()
            pkg_id = module_path if rel == "." else f"{module_path}/{rel}"

        package = Package(path=pkg_id, name=pkg_name or "")
        view = PackageView(id=pkg_id, package=package, files=[f.parsed for f in kept])
        for f in kept:
            view.parse_errors.extend(f.parsed.parse_errors)

        deps = self._resolve_imports(kept, module)
        view.deps_by_import_path = deps

        checker = _Checker(package, kept, view.type_errors)
        checker.check()
        view.scope = checker.scope
        for f in kept:
            f.parsed.decls = [checker.typed_decl(f, d) for d in f.parsed.decls]

        logger.debug(
            "Loaded package %s from %s (%d files, %d functions)",
            pkg_id,
            directory,
            len(kept),
            len(view.scope),
        )
        return view

    def _parse_dir(self, directory: Path) -> list[_SourceFile]:
        files = []
        for go_file in sorted(directory.glob("*.go")):
            if go_file.name.endswith("_test.go"):
                continue
            src = go_file.read_bytes()
            root = self._parser.parse_tree(src).root_node
            parsed = self._parser.to_parsed_file(go_file.resolve(), src, root)
            files.append(_SourceFile(parsed=parsed, root=root))
        return files

    def _resolve_imports(
        self, files: list[_SourceFile], module: tuple[Path, str] | None
    ) -> dict[str, DepInfo]:
        deps: dict[str, DepInfo] = {}
        for f in files:
            for spec in f.parsed.imports:
                dep = deps.get(spec.path)
                if dep is None:
                    name = self._local_package_name(spec.path, module)
                    dep = DepInfo(id=spec.path, name=name or import_path_to_assumed_name(spec.path))
                    deps[spec.path] = dep
                pkg = Package(path=spec.path, name=dep.name)
                if spec.name == ".":
                    f.dot_import = f.dot_import or pkg
                elif spec.name != "_":
                    f.imports_by_name[spec.name or dep.name] = pkg
        return deps

    def _local_package_name(
        self, import_path: str, module: tuple[Path, str] | None
    ) -> str | None:
        """Read the package clause of an import path inside the current module."""
        if module is None:
            return None
        root, module_path = module
        if import_path != module_path and not import_path.startswith(module_path + "/"):
            return None
        directory = root / import_path[len(module_path) :].lstrip("/")
        for go_file in sorted(directory.glob("*.go")):
            if go_file.name.endswith("_test.go"):
                continue
            parsed = self._parser.parse_header(go_file, go_file.read_bytes())
            if parsed.package_name:
                return parsed.package_name
        return None


class _Checker:
    """Resolve the declared types and functions of one package."""

    def __init__(self, package: Package, files: list[_SourceFile], errors: list[str]) -> None:
        self.package = package
        self.files = files
        self.errors = errors
        self.scope: dict[str, Func] = {}
        self._type_decls: dict[str, _TypeDecl] = {}
        self._types: dict[str, GoType] = {}
        self._in_progress: set[str] = set()
        self._decl_funcs: dict[tuple[int, int], Func] = {}

    def check(self) -> None:
        for f in self.files:
            for node in f.root.named_children:
                if node.type == "type_declaration":
                    self._collect_type_decl(f, node)

        for name in self._type_decls:
            self._declared_type(name)

        for f in self.files:
            for node in f.root.named_children:
                if node.type not in ("function_declaration", "method_declaration"):
                    continue
                fn = self._func(f, node)
                if fn is None:
                    continue
                self._decl_funcs[id(f), node.start_byte] = fn
                if node.type == "function_declaration" and fn.name not in ("_", "init"):
                    self.scope.setdefault(fn.name, fn)

    def typed_decl(self, f: _SourceFile, decl: FuncDecl) -> FuncDecl:
        return FuncDecl(
            name=decl.name,
            start=decl.start,
            end=decl.end,
            recv_type_name=decl.recv_type_name,
            func=self._decl_funcs.get((id(f), decl.start)),
        )

    def _collect_type_decl(self, f: _SourceFile, decl: Node) -> None:
        specs = [c for c in decl.named_children if c.type in ("type_spec", "type_alias")]
        for spec in specs:
            name_node = spec.child_by_field_name("name")
            if name_node is None:
                continue
            name = node_text(f.parsed.src, name_node)
            if name in self._type_decls:
                self.errors.append(f"{f.parsed.path}: {name} redeclared in this block")
                continue
            self._type_decls[name] = _TypeDecl(
                name=name, spec=spec, file=f, alias=spec.type == "type_alias"
            )

    def _declared_type(self, name: str) -> GoType:
        """Return the package-level type called name, resolving it on first use."""
        done = self._types.get(name)
        if done is not None:
            return done
        decl = self._type_decls[name]
        if name in self._in_progress:
            if decl.alias:
                self.errors.append(f"{decl.file.parsed.path}: invalid recursive type alias {name}")
                return Basic("invalid type")
            # Recursive reference inside its own definition.
            return Named(name, self.package)

        self._in_progress.add(name)
        try:
            type_params = self._type_params(decl.file, decl.spec)
            rhs = decl.spec.child_by_field_name("type")
            target = (
                self._type(decl.file, rhs, type_params)
                if rhs is not None
                else Basic("invalid type")
            )
            if decl.alias:
                result: GoType = Alias(name, self.package, target)
            else:
                result = Named(name, self.package, underlying=target)
        finally:
            self._in_progress.discard(name)
        self._types[name] = result
        return result

    def _type_params(self, f: _SourceFile, node: Node) -> set[str]:
        params = node.child_by_field_name("type_parameters")
        names: set[str] = set()
        if params is None:
            return names
        for decl in params.named_children:
            if decl.type != "type_parameter_declaration":
                continue
            for ident in decl.children_by_field_name("name"):
                names.add(node_text(f.parsed.src, ident))
        return names

    def _func(self, f: _SourceFile, node: Node) -> Func | None:
        src = f.parsed.src
        name_node = node.child_by_field_name("name")
        if name_node is None:
            return None
        type_params = self._type_params(f, node)

        recv = None
        receiver = node.child_by_field_name("receiver")
        if receiver is not None:
            type_params |= self._receiver_type_params(f, receiver)
            recv_vars = self._params(f, receiver, type_params)[0]
            if not recv_vars:
                return None
            recv = recv_vars[0]
            base = receiver_base_node(receiver)
            if base is not None and node_text(src, base) not in self._type_decls:
                self.errors.append(
                    f"{f.parsed.path}: cannot define new methods on non-local type "
                    f"{node_text(src, base)}"
                )

        params, variadic = self._params(f, node.child_by_field_name("parameters"), type_params)
        results = self._results(f, node.child_by_field_name("result"), type_params)
        return Func(
            name=node_text(src, name_node),
            package=self.package,
            signature=Signature(params=params, results=results, variadic=variadic, recv=recv),
        )

    def _receiver_type_params(self, f: _SourceFile, receiver: Node) -> set[str]:
        names: set[str] = set()
        for param in receiver.named_children:
            t = param.child_by_field_name("type") if param.type == "parameter_declaration" else None
            while t is not None and t.type in ("pointer_type", "parenthesized_type"):
                t = t.named_children[0] if t.named_children else None
            if t is None or t.type != "generic_type":
                continue
            args = t.child_by_field_name("type_arguments")
            for arg in args.named_children if args is not None else []:
                names.add(node_text(f.parsed.src, arg).strip())
        return names

    def _params(
        self, f: _SourceFile, node: Node | None, type_params: set[str]
    ) -> tuple[tuple[Var, ...], bool]:
        if node is None:
            return (), False
        out: list[Var] = []
        variadic = False
        for decl in node.named_children:
            if decl.type not in ("parameter_declaration", "variadic_parameter_declaration"):
                continue
            t = self._type(f, decl.child_by_field_name("type"), type_params)
            if decl.type == "variadic_parameter_declaration":
                t = Slice(t)
                variadic = True
            names = decl.children_by_field_name("name")
            if not names:
                out.append(Var("", t))
            for ident in names:
                out.append(Var(node_text(f.parsed.src, ident), t))
        return tuple(out), variadic

    def _results(
        self, f: _SourceFile, node: Node | None, type_params: set[str]
    ) -> tuple[Var, ...]:
        if node is None:
            return ()
        if node.type == "parameter_list":
            return self._params(f, node, type_params)[0]
        return (Var("", self._type(f, node, type_params)),)

    def _type(self, f: _SourceFile, node: Node | None, type_params: set[str]) -> GoType:
        """Convert a type expression node into a GoType."""
        if node is None:
            return Basic("invalid type")
        src = f.parsed.src
        kind = node.type

        if kind == "type_identifier":
            return self._ident(f, node_text(src, node), type_params)
        if kind == "qualified_type":
            return self._qualified(f, node)
        if kind == "generic_type":
            base = self._type(f, node.child_by_field_name("type"), type_params)
            args_node = node.child_by_field_name("type_arguments")
            args = tuple(
                self._type(f, _unwrap_elem(a), type_params)
                for a in (args_node.named_children if args_node is not None else [])
            )
            if isinstance(base, Named):
                return Named(base.name, base.package, args, underlying=base.underlying)
            return base
        if kind in ("parenthesized_type", "type_elem", "constraint_elem"):
            inner = node.named_children
            if len(inner) == 1:
                return self._type(f, inner[0], type_params)
            return Basic(node_text(src, node))
        if kind == "pointer_type":
            return Pointer(self._type(f, _only_child(node), type_params))
        if kind == "slice_type":
            return Slice(self._type(f, node.child_by_field_name("element"), type_params))
        if kind in ("negated_type", "union_type"):
            return Basic(node_text(src, node))
        if kind in ("array_type", "implicit_length_array_type"):
            length = node.child_by_field_name("length")
            return Array(
                node_text(src, length) if length is not None else "...",
                self._type(f, node.child_by_field_name("element"), type_params),
            )
        if kind == "map_type":
            return Map(
                self._type(f, node.child_by_field_name("key"), type_params),
                self._type(f, node.child_by_field_name("value"), type_params),
            )
        if kind == "channel_type":
            tokens = [c.type for c in node.children if not c.is_named]
            if tokens[:1] == ["<-"]:
                direction = "recv"
            elif tokens[:2] == ["chan", "<-"]:
                direction = "send"
            else:
                direction = "both"
            return Chan(self._type(f, node.child_by_field_name("value"), type_params), direction)
        if kind == "function_type":
            params, variadic = self._params(f, node.child_by_field_name("parameters"), type_params)
            results = self._results(f, node.child_by_field_name("result"), type_params)
            return Signature(params=params, results=results, variadic=variadic)
        if kind == "struct_type":
            return self._struct(f, node, type_params)
        if kind == "interface_type":
            return self._interface(f, node, type_params)

        self.errors.append(
            f"{f.parsed.path}:{node.start_point[0] + 1}: unsupported type expression "
            f"{node_text(src, node)!r}"
        )
        return Basic("invalid type")

    def _ident(self, f: _SourceFile, name: str, type_params: set[str]) -> GoType:
        if name in type_params:
            return TypeParam(name)
        if name in self._type_decls:
            return self._declared_type(name)
        universe = UNIVERSE.get(name)
        if universe is not None:
            return universe
        if f.dot_import is not None:
            return Named(name, f.dot_import)
        self.errors.append(f"{f.parsed.path}: undefined: {name}")
        return Basic("invalid type")

    def _qualified(self, f: _SourceFile, node: Node) -> GoType:
        src = f.parsed.src
        pkg_node = node.child_by_field_name("package")
        name_node = node.child_by_field_name("name")
        if pkg_node is None or name_node is None:
            return Basic("invalid type")
        local, name = node_text(src, pkg_node), node_text(src, name_node)
        pkg = f.imports_by_name.get(local)
        if pkg is None:
            self.errors.append(f"{f.parsed.path}: undefined: {local}")
            return Basic("invalid type")
        return Named(name, pkg, underlying=KNOWN_UNDERLYING.get((pkg.path, name)))

    def _struct(self, f: _SourceFile, node: Node, type_params: set[str]) -> Struct:
        fields: list[Var] = []
        for body in node.named_children:
            if body.type != "field_declaration_list":
                continue
            for decl in body.named_children:
                if decl.type != "field_declaration":
                    continue
                t = self._type(f, decl.child_by_field_name("type"), type_params)
                names = decl.children_by_field_name("name")
                if not names:
                    if any(c.type == "*" for c in decl.children):
                        t = Pointer(t)
                    fields.append(Var("", t, embedded=True))
                for ident in names:
                    fields.append(Var(node_text(f.parsed.src, ident), t))
        return Struct(tuple(fields))

    def _interface(self, f: _SourceFile, node: Node, type_params: set[str]) -> Interface:
        methods: list[tuple[str, Signature]] = []
        embeddeds: list[GoType] = []
        for elem in node.named_children:
            if elem.type in ("method_elem", "method_spec"):
                name_node = elem.child_by_field_name("name")
                if name_node is None:
                    continue
                params, variadic = self._params(
                    f, elem.child_by_field_name("parameters"), type_params
                )
                results = self._results(f, elem.child_by_field_name("result"), type_params)
                methods.append(
                    (
                        node_text(f.parsed.src, name_node),
                        Signature(params=params, results=results, variadic=variadic),
                    )
                )
            elif elem.type == "comment":
                continue
            else:
                embeddeds.append(self._type(f, elem, type_params))
        return Interface(tuple(methods), tuple(embeddeds))


def _only_child(node: Node) -> Node | None:
    return node.named_children[0] if node.named_children else None


def _unwrap_elem(node: Node) -> Node:
    if node.type == "type_elem" and len(node.named_children) == 1:
        return node.named_children[0]
    return node
