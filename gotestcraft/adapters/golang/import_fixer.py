"""
Import merging for existing Go files.

Computes the text edits that add import specs to a file while leaving its
other imports where they are: new specs go into the first parenthesized
import block, a lone single-line import is expanded into a block, and a file
without imports gets a new block after its package clause.

Imports are grouped the way goimports groups them: standard library first,
then other packages, then packages under the local prefix. A new spec joins
the last existing group of its kind at its sorted position.
"""

from __future__ import annotations

import logging
import re

from tree_sitter import Node

from ...domain.edits import ImportFix, TextEdit
from .treesitter_parser import TreeSitterGoParser, node_text, unquote

logger = logging.getLogger(__name__)

_BLANK_LINE_RE = re.compile(rb"\n[ \t]*\n")

STDLIB, THIRD_PARTY, LOCAL = 0, 1, 2


def import_spec(fix: ImportFix) -> str:
    return f'{fix.name} "{fix.path}"' if fix.name else f'"{fix.path}"'


class GoImportFixer:
    """
    ImportFixPort implementation over tree-sitter syntax.

    With a local prefix set, imports under that prefix are placed in their own
    group after the others, as ``goimports -local`` does.
    """

    def __init__(self, parser: TreeSitterGoParser | None = None, local_prefix: str = "") -> None:
        self._parser = parser or TreeSitterGoParser()
        self._local_prefix = local_prefix

    def import_group(self, path: str) -> int:
        """Classify an import path; a first element without a dot is standard library."""
        if self._local_prefix and path.startswith(self._local_prefix):
            return LOCAL
        if "." not in path.split("/", 1)[0]:
            return STDLIB
        return THIRD_PARTY

    def compute_import_edits(self, src: bytes, fixes: list[ImportFix]) -> list[TextEdit]:
        root = self._parser.parse_tree(src).root_node
        parsed = self._parser.to_parsed_file("<imports>", src, root)

        present = {spec.path for spec in parsed.imports}
        missing: list[ImportFix] = []
        for fix in sorted(fixes, key=lambda f: f.path):
            if fix.path in present:
                logger.debug("Import %s already present", fix.path)
                continue
            present.add(fix.path)
            missing.append(fix)
        if not missing:
            return []

        decls = [c for c in root.children if c.type == "import_declaration"]

        for decl in decls:
            block = next((c for c in decl.named_children if c.type == "import_spec_list"), None)
            if block is not None:
                return self._into_block(src, block, missing)

        if decls:
            return [self._expand(src, decls[0], missing)]

        lines = [(fix.path, import_spec(fix)) for fix in missing]
        package = next((c for c in root.children if c.type == "package_clause"), None)
        if package is None:
            # Nothing to anchor on; put the imports at the top.
            return [TextEdit(new_text=self._new_block(lines) + "\n")]
        at = package.end_byte
        return [TextEdit(start=at, end=at, new_text="\n\n" + self._new_block(lines))]

    def _grouped(self, lines: list[tuple[str, str]]) -> list[list[str]]:
        """Split (path, spec) pairs into sorted goimports groups."""
        groups: dict[int, list[tuple[str, str]]] = {}
        for path, text in lines:
            groups.setdefault(self.import_group(path), []).append((path, text))
        return [[text for _, text in sorted(groups[k])] for k in sorted(groups)]

    def _lines(self, groups: list[list[str]]) -> str:
        return "\n".join("".join(f"\t{spec}\n" for spec in group) for group in groups)

    def _new_block(self, lines: list[tuple[str, str]]) -> str:
        if len(lines) == 1:
            return f"import {lines[0][1]}"
        return "import (\n" + self._lines(self._grouped(lines)) + ")"

    def _into_block(self, src: bytes, block: Node, missing: list[ImportFix]) -> list[TextEdit]:
        specs = [c for c in block.named_children if c.type == "import_spec"]
        if not specs or not all(_on_own_line(src, s) for s in specs):
            return [self._append_to_block(src, block, missing)]

        # Existing groups are runs of specs not separated by a blank line.
        groups: list[list[tuple[str, Node]]] = []
        prev: Node | None = None
        for spec in specs:
            path_node = spec.child_by_field_name("path")
            path = unquote(node_text(src, path_node)) if path_node is not None else ""
            if prev is None or _BLANK_LINE_RE.search(src, prev.end_byte, spec.start_byte):
                groups.append([])
            groups[-1].append((path, spec))
            prev = spec

        edits: list[TextEdit] = []
        leftovers: list[ImportFix] = []
        for fix in missing:
            kind = self.import_group(fix.path)
            group = next(
                (g for g in reversed(groups) if self.import_group(g[0][0]) == kind), None
            )
            if group is None:
                leftovers.append(fix)
                continue
            after = next((spec for path, spec in group if path > fix.path), None)
            if after is not None:
                at = src.rfind(b"\n", 0, after.start_byte) + 1
            else:
                at = src.index(b"\n", group[-1][1].end_byte) + 1
            edits.append(TextEdit(start=at, end=at, new_text=f"\t{import_spec(fix)}\n"))

        # Specs with no group of their kind form a new group ahead of the
        # first group of a later kind, or at the end of the block.
        new_groups: list[TextEdit] = []
        by_kind: dict[int, list[ImportFix]] = {}
        for fix in leftovers:
            by_kind.setdefault(self.import_group(fix.path), []).append(fix)
        for kind, fixes in sorted(by_kind.items()):
            later = next((g for g in groups if self.import_group(g[0][0]) > kind), None)
            if later is None:
                new_groups.append(self._append_to_block(src, block, fixes, new_group=True))
                continue
            at = src.rfind(b"\n", 0, later[0][1].start_byte) + 1
            text = "".join(f"\t{import_spec(f)}\n" for f in fixes) + "\n"
            new_groups.append(TextEdit(start=at, end=at, new_text=text))
        return new_groups + edits

    def _append_to_block(
        self, src: bytes, block: Node, fixes: list[ImportFix], new_group: bool = False
    ) -> TextEdit:
        rparen = next((c for c in reversed(block.children) if c.type == ")"), None)
        at = rparen.start_byte if rparen is not None else block.end_byte
        text = self._lines(self._grouped([(f.path, import_spec(f)) for f in fixes]))
        if new_group:
            text = "\n" + text
        if at > 0 and src[at - 1 : at] != b"\n":
            text = "\n" + text
        return TextEdit(start=at, end=at, new_text=text)

    def _expand(self, src: bytes, decl: Node, missing: list[ImportFix]) -> TextEdit:
        spec = next(c for c in decl.named_children if c.type == "import_spec")
        path_node = spec.child_by_field_name("path")
        existing = node_text(src, spec)
        path = unquote(node_text(src, path_node)) if path_node is not None else ""
        lines = [(path, existing)] + [(f.path, import_spec(f)) for f in missing]
        text = "import (\n" + self._lines(self._grouped(lines)) + ")"
        return TextEdit(start=decl.start_byte, end=decl.end_byte, new_text=text)


def _on_own_line(src: bytes, spec: Node) -> bool:
    """Report whether spec is alone on its line, ignoring a trailing comment."""
    line_start = src.rfind(b"\n", 0, spec.start_byte) + 1
    line_end = src.find(b"\n", spec.end_byte)
    if line_end < 0:
        return False
    rest = src[spec.end_byte : line_end].strip()
    return not src[line_start : spec.start_byte].strip() and (not rest or rest.startswith(b"//"))
