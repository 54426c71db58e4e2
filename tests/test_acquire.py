"""Tests for query acquisition."""

import io

import pytest

from pswait.acquire import acquire_query, parse_pid
from pswait.errors import QueryInputError
from pswait.models import Query

LISTING = "  PID TTY TIME CMD\n501 ttys000 0:00 make\n"


def no_lister():
    raise AssertionError("process table should not be listed")


class TestParsePid:
    """Tests for parse_pid."""

    def test_none_and_blank(self):
        assert parse_pid(None) is None
        assert parse_pid("") is None
        assert parse_pid("   ") is None

    def test_numeric(self):
        assert parse_pid("4242") == 4242
        assert parse_pid(" 17 \n") == 17

    @pytest.mark.parametrize("value", ["abc", "-5", "12a", "1.5", "\u00b2", "\uff14\uff12"])
    def test_non_numeric(self, value):
        with pytest.raises(QueryInputError):
            parse_pid(value)


class TestFlags:
    """Acquisition from externally supplied values."""

    def test_command_flag(self):
        query = acquire_query(command="make", lister=no_lister)

        assert query == Query(command="make")

    def test_all_flags(self):
        query = acquire_query("make", "4242", "ttys000", lister=no_lister)

        assert query == Query(command="make", pid=4242, terminal="ttys000")

    def test_bad_pid_flag(self):
        with pytest.raises(QueryInputError):
            acquire_query(pid="nope", lister=no_lister)

    def test_flags_do_not_prompt(self):
        stdin = io.StringIO("cargo\n")
        stdout = io.StringIO()

        acquire_query(terminal="pts/1", stdin=stdin, stdout=stdout, lister=no_lister)

        assert stdout.getvalue() == ""
        assert stdin.read() == "cargo\n"

    def test_out_of_range_pid_flag_gives_nothing(self):
        assert acquire_query(pid="123456", lister=no_lister) is None


class TestInteractive:
    """Acquisition by prompting the operator."""

    def test_prints_table_then_prompts(self):
        stdin = io.StringIO("make\n\n\n")
        stdout = io.StringIO()

        query = acquire_query(stdin=stdin, stdout=stdout, lister=lambda: LISTING)

        assert query == Query(command="make")
        output = stdout.getvalue()
        assert output.startswith(LISTING)
        assert output.index("command: ") < output.index("pid: ") < output.index("tty: ")

    def test_decodes_byte_listing(self):
        stdin = io.StringIO("\n42\n\n")
        stdout = io.StringIO()

        query = acquire_query(stdin=stdin, stdout=stdout, lister=lambda: LISTING.encode())

        assert query == Query(pid=42)
        assert LISTING in stdout.getvalue()

    def test_all_prompts(self):
        stdin = io.StringIO("make\n42\nttys000\n")

        query = acquire_query(stdin=stdin, stdout=io.StringIO(), lister=lambda: LISTING)

        assert query == Query(command="make", pid=42, terminal="ttys000")

    def test_all_empty_gives_nothing(self):
        stdin = io.StringIO("\n\n\n")

        assert acquire_query(stdin=stdin, stdout=io.StringIO(), lister=lambda: LISTING) is None

    def test_eof_gives_nothing(self):
        stdin = io.StringIO("")

        assert acquire_query(stdin=stdin, stdout=io.StringIO(), lister=lambda: LISTING) is None

    def test_bad_pid_answer(self):
        stdin = io.StringIO("\nforty-two\n\n")

        with pytest.raises(QueryInputError):
            acquire_query(stdin=stdin, stdout=io.StringIO(), lister=lambda: LISTING)
