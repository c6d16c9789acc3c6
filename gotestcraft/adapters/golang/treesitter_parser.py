"""
Go syntax adapter backed by tree-sitter.

Parses Go source into ParsedFile headers: package clause, comment groups,
imports and top-level function declarations. Offsets are byte offsets, as
tree-sitter reports them when parsing bytes.
"""

from __future__ import annotations

import logging
from pathlib import Path

import tree_sitter_go as ts_go
from tree_sitter import Language, Node, Parser, Tree

from ...domain.package_view import CommentGroup, FuncDecl, ImportSpec, ParsedFile

logger = logging.getLogger(__name__)

GO_LANGUAGE = Language(ts_go.language())

_STRING_LITERALS = ("interpreted_string_literal", "raw_string_literal")


def node_text(src: bytes, node: Node) -> str:
    return src[node.start_byte : node.end_byte].decode("utf-8", errors="replace")


def unquote(literal: str) -> str:
    """Strip the quotes of a Go string literal used as an import path."""
    if len(literal) >= 2 and literal[0] == literal[-1] and literal[0] in "\"`":
        return literal[1:-1]
    return literal


def receiver_base_node(receiver: Node) -> Node | None:
    """Return the type identifier node naming a method's receiver type."""
    for param in receiver.named_children:
        if param.type != "parameter_declaration":
            continue
        t = param.child_by_field_name("type")
        while t is not None:
            if t.type == "type_identifier":
                return t
            if t.type in ("pointer_type", "parenthesized_type"):
                t = t.named_children[0] if t.named_children else None
            elif t.type == "generic_type":
                t = t.child_by_field_name("type")
            else:
                return None
    return None


class TreeSitterGoParser:
    """Parse Go files with the tree-sitter Go grammar."""

    def __init__(self) -> None:
        self._parser = Parser(GO_LANGUAGE)

    def parse_tree(self, src: bytes) -> Tree:
        return self._parser.parse(src)

    def parse_header(self, path: Path, src: bytes) -> ParsedFile:
        """Parse the package clause, imports and top-level declarations of a file."""
        return self.to_parsed_file(path, src, self.parse_tree(src).root_node)

    def to_parsed_file(self, path: Path, src: bytes, root: Node) -> ParsedFile:
        parsed = ParsedFile(path=Path(path), src=src, package_name=None)

        comment_nodes: list[Node] = []
        package_node: Node | None = None
        for child in root.children:
            if child.type == "comment":
                comment_nodes.append(child)
            elif child.type == "package_clause":
                if package_node is None:
                    package_node = child
            elif child.type == "import_declaration":
                parsed.imports.extend(self._import_specs(src, child))
            elif child.type in ("function_declaration", "method_declaration"):
                decl = self._func_decl(src, child)
                if decl is not None:
                    parsed.decls.append(decl)

        if package_node is not None:
            parsed.package_start = package_node.start_byte
            for ident in package_node.named_children:
                if ident.type == "package_identifier":
                    parsed.package_name = node_text(src, ident)

        parsed.comments = self._comment_groups(src, comment_nodes)
        if package_node is not None:
            parsed.doc = self._package_doc(parsed.comments, comment_nodes, package_node)

        if not _valid_utf8(src):
            parsed.parse_errors.append(f"{path}: illegal UTF-8 encoding")
            logger.debug("Invalid UTF-8 in %s", path)
        if root.has_error:
            parsed.parse_errors.append(self._syntax_error(path, root))
            logger.debug("Syntax error in %s: %s", path, parsed.parse_errors[-1])
        return parsed

    def _import_specs(self, src: bytes, decl: Node) -> list[ImportSpec]:
        specs = []
        nodes = [c for c in decl.named_children if c.type == "import_spec"]
        for block in decl.named_children:
            if block.type == "import_spec_list":
                nodes.extend(c for c in block.named_children if c.type == "import_spec")
        for spec in nodes:
            path_node = spec.child_by_field_name("path")
            if path_node is None or path_node.type not in _STRING_LITERALS:
                continue
            name_node = spec.child_by_field_name("name")
            name = None
            if name_node is not None:
                if name_node.type == "dot":
                    name = "."
                elif name_node.type == "blank_identifier":
                    name = "_"
                else:
                    name = node_text(src, name_node)
            specs.append(ImportSpec(path=unquote(node_text(src, path_node)), name=name))
        return specs

    def _func_decl(self, src: bytes, node: Node) -> FuncDecl | None:
        name_node = node.child_by_field_name("name")
        if name_node is None:
            return None
        recv_type_name = None
        if node.type == "method_declaration":
            receiver = node.child_by_field_name("receiver")
            base = receiver_base_node(receiver) if receiver is not None else None
            # A method whose receiver cannot be read is still not a plain function.
            recv_type_name = node_text(src, base) if base is not None else ""
        return FuncDecl(
            name=node_text(src, name_node),
            start=node.start_byte,
            end=node.end_byte,
            recv_type_name=recv_type_name,
        )

    def _comment_groups(self, src: bytes, nodes: list[Node]) -> list[CommentGroup]:
        """Group comments that are separated by at most one line break."""
        groups: list[list[Node]] = []
        for node in nodes:
            if groups and node.start_point[0] <= groups[-1][-1].end_point[0] + 1:
                groups[-1].append(node)
            else:
                groups.append([node])
        return [
            CommentGroup(
                start=g[0].start_byte,
                end=g[-1].end_byte,
                texts=tuple(node_text(src, n) for n in g),
            )
            for g in groups
        ]

    def _package_doc(
        self, groups: list[CommentGroup], nodes: list[Node], package_node: Node
    ) -> CommentGroup | None:
        # The doc comment ends on the line right above the package clause.
        pkg_row = package_node.start_point[0]
        ends = {n.end_byte: n.end_point[0] for n in nodes}
        for group in groups:
            if group.end <= package_node.start_byte and ends[group.end] + 1 == pkg_row:
                return group
        return None

    def _syntax_error(self, path: Path, root: Node) -> str:
        node = _first_error(root) or root
        row, col = node.start_point[0], node.start_point[1]
        return f"{path}:{row + 1}:{col + 1}: syntax error"


def _first_error(node: Node) -> Node | None:
    if node.type == "ERROR" or node.is_missing:
        return node
    for child in node.children:
        if child.has_error or child.is_missing:
            found = _first_error(child)
            if found is not None:
                return found
    return None


def _valid_utf8(src: bytes) -> bool:
    try:
        src.decode("utf-8")
    except UnicodeDecodeError:
        return False
    return True
