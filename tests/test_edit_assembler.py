"""Tests for destination inspection and edit placement."""

from pathlib import Path

import pytest

from gotestcraft.application.addtest.edit_assembler import (
    EditAssembler,
    copyright_header,
    import_block,
    is_directive,
)
from gotestcraft.domain.errors import PackageMismatch
from gotestcraft.domain.models import ImportInfo
from gotestcraft.domain.package_view import CommentGroup, ImportSpec, ParsedFile
from tests.conftest import (
    SUBJECT_PATH,
    TEST_PATH,
    FakeFileReader,
    FakeGoParser,
    FakeImportFixer,
    parsed_file,
)

COPYRIGHT = "// Copyright 2024 The Mathx Authors. All rights reserved."


def subject_with_comments(src: str, doc_index: int | None = None) -> ParsedFile:
    """Build a subject file whose comment groups are its leading // lines."""
    data = src.encode()
    groups = []
    for block in src.split("\n\n"):
        if block.startswith("//"):
            start = data.index(block.encode())
            groups.append(
                CommentGroup(start=start, end=start + len(block.encode()), texts=tuple(block.split("\n")))
            )
    return ParsedFile(
        path=SUBJECT_PATH,
        src=data,
        package_name="mathx",
        package_start=data.index(b"package "),
        comments=groups,
        doc=groups[doc_index] if doc_index is not None else None,
    )


def assembler(existing: dict[Path, ParsedFile] | None = None) -> EditAssembler:
    existing = existing or {}
    return EditAssembler(
        FakeFileReader({p: f.src for p, f in existing.items()}),
        FakeGoParser(existing),
        FakeImportFixer(),
    )


class TestDirectives:
    @pytest.mark.parametrize(
        "comment",
        ["//go:build linux", "//go:generate stringer", "//line foo.go:1", "//export F", "//nolint:errcheck"],
    )
    def test_directives(self, comment):
        assert is_directive(comment)

    @pytest.mark.parametrize("comment", ["// Copyright 2024", "//Copyright", "// go:build"])
    def test_plain_comments(self, comment):
        assert not is_directive(comment)


class TestCopyrightHeader:
    def test_copyright_is_copied(self):
        subject = subject_with_comments(f"{COPYRIGHT}\n\npackage mathx\n")
        assert copyright_header(subject) == COPYRIGHT

    def test_package_doc_is_not_copyright(self):
        subject = subject_with_comments("// Copyright notice in package doc.\npackage mathx\n")
        subject.comments = [CommentGroup(0, subject.package_start - 1, ("// Copyright notice in package doc.",))]
        subject.doc = subject.comments[0]
        assert copyright_header(subject) == ""

    def test_directive_first_is_skipped(self):
        subject = subject_with_comments("//go:build linux\n// Copyright 2024\n\npackage mathx\n")
        assert copyright_header(subject) == ""

    def test_without_copyright_word(self):
        subject = subject_with_comments("// Some header.\n\npackage mathx\n")
        assert copyright_header(subject) == ""


class TestDestination:
    def test_missing_file_is_external(self, add_view):
        dest = assembler().destination_for(add_view.files[0], add_view)
        assert dest.path == TEST_PATH
        assert not dest.exists
        assert dest.xtest

    def test_same_package_is_white_box(self, add_view):
        test_file = parsed_file(
            TEST_PATH, 'package mathx\n\nimport "testing"\n', "mathx", imports=[ImportSpec("testing")]
        )
        dest = assembler({TEST_PATH: test_file}).destination_for(add_view.files[0], add_view)
        assert not dest.xtest
        assert dest.imports == {"testing": ImportInfo(name="testing")}

    def test_test_package_is_external(self, add_view):
        test_file = parsed_file(TEST_PATH, "package mathx_test\n", "mathx_test")
        dest = assembler({TEST_PATH: test_file}).destination_for(add_view.files[0], add_view)
        assert dest.xtest

    def test_foreign_package_is_rejected(self, add_view):
        test_file = parsed_file(TEST_PATH, "package other\n", "other")
        with pytest.raises(PackageMismatch, match="other"):
            assembler({TEST_PATH: test_file}).destination_for(add_view.files[0], add_view)

    def test_missing_package_clause_is_rejected(self, add_view):
        test_file = ParsedFile(path=TEST_PATH, src=b"", package_name=None)
        with pytest.raises(PackageMismatch):
            assembler({TEST_PATH: test_file}).destination_for(add_view.files[0], add_view)

    def test_custom_suffix(self):
        a = EditAssembler(FakeFileReader(), FakeGoParser(), FakeImportFixer(), "_gen_test.go")
        assert a.test_path_for(Path("/w/add.go")) == Path("/w/add_gen_test.go")


class TestAssemble:
    def test_new_file(self, add_view):
        a = assembler()
        dest = a.destination_for(add_view.files[0], add_view)
        extra = {"testing": ImportInfo(name="testing"), "example.com/mathx": ImportInfo(name="mathx")}
        changes = a.assemble(dest, add_view.files[0], extra, "\nfunc TestAdd() {}\n")

        assert [c.kind for c in changes] == ["create", "edit"]
        assert changes[0].path == changes[1].path == TEST_PATH
        texts = [e.new_text for e in changes[1].edits]
        assert texts == [
            "package mathx_test\n",
            '\nimport (\n\t"example.com/mathx"\n\t"testing"\n)\n',
            "\nfunc TestAdd() {}\n",
        ]
        assert all(e.start == e.end == 0 for e in changes[1].edits)

    def test_new_file_keeps_copyright(self):
        subject = subject_with_comments(f"{COPYRIGHT}\n\npackage mathx\n")
        assert assembler().new_file_header(subject) == f"{COPYRIGHT}\n\npackage mathx_test\n"

    def test_existing_file_appends_at_end(self, add_view):
        src = 'package mathx\n\nimport "testing"\n\nfunc TestOther(t *testing.T) {\n}\n'
        test_file = parsed_file(TEST_PATH, src, "mathx", imports=[ImportSpec("testing")])
        a = assembler({TEST_PATH: test_file})
        dest = a.destination_for(add_view.files[0], add_view)
        changes = a.assemble(dest, add_view.files[0], {}, "\nfunc TestAdd() {}\n")

        assert len(changes) == 1 and changes[0].kind == "edit"
        (edit,) = changes[0].edits
        assert edit.start == edit.end == len(src.encode())

    def test_existing_file_gets_import_edits_first(self, add_view):
        test_file = parsed_file(TEST_PATH, "package mathx_test\n", "mathx_test")
        fixer = FakeImportFixer()
        a = EditAssembler(FakeFileReader({TEST_PATH: test_file.src}), FakeGoParser({TEST_PATH: test_file}), fixer)
        dest = a.destination_for(add_view.files[0], add_view)
        extra = {"testing": ImportInfo(name="testing"), "example.com/yaml": ImportInfo(name="yaml2", renamed=True)}
        changes = a.assemble(dest, add_view.files[0], extra, "\nfunc TestAdd() {}\n")

        assert [(f.path, f.name) for f in fixer.requests[0]] == [
            ("example.com/yaml", "yaml2"),
            ("testing", ""),
        ]
        edits = changes[0].edits
        assert edits[-1].new_text == "\nfunc TestAdd() {}\n"
        assert len(edits) == 2


class TestImportBlock:
    def test_single_import(self):
        assert import_block({"testing": ImportInfo(name="testing")}) == '\nimport "testing"\n'

    def test_renamed_imports_are_sorted(self):
        block = import_block(
            {
                "testing": ImportInfo(name="testing"),
                "example.com/yaml": ImportInfo(name="yaml2", renamed=True),
            }
        )
        assert block == '\nimport (\n\tyaml2 "example.com/yaml"\n\t"testing"\n)\n'
