"""Tests for converting CLI positions to byte ranges."""

import click
import pytest

from gotestcraft.cli.main import position_to_range

SRC = b"package p\n\nfunc F() {\n}\n"


class TestPositionToRange:
    def test_offset_is_an_empty_range(self):
        assert position_to_range(SRC, None, None, 12) == (12, 12)

    def test_line_selects_whole_line(self):
        assert position_to_range(SRC, 3, None, None) == (11, 21)
        assert SRC[11:21] == b"func F() {"

    def test_line_and_column(self):
        assert position_to_range(SRC, 3, 6, None) == (16, 16)
        assert SRC[16:17] == b"F"

    def test_column_may_point_past_line_end(self):
        assert position_to_range(SRC, 1, 10, None) == (9, 9)

    @pytest.mark.parametrize(
        "line, column, offset",
        [(None, None, 99), (9, None, None), (1, 11, None)],
    )
    def test_out_of_range(self, line, column, offset):
        with pytest.raises(click.BadParameter):
            position_to_range(SRC, line, column, offset)

    def test_missing_position_is_a_usage_error(self):
        with pytest.raises(click.UsageError, match="--line or --offset"):
            position_to_range(SRC, None, 4, None)
