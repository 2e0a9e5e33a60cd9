"""
Unit tests for the /proc directory handle.

Tests cover:
- exe and cwd symlink reads
- Children list parsing and validation
- Read failures mapped to ProcessReadError
- Handle lifetime
"""

import pytest

from focused_cwd.errors import ProcessReadError
from focused_cwd.proc_table import MAX_CHILDREN_BYTES, ProcTable


class TestProcReads:
    """Test per-pid lookups."""

    def test_exe_and_cwd(self, fake_proc, proc_table):
        fake_proc.add(100, "/usr/bin/bash", "/home/a")

        assert proc_table.exe(100) == "/usr/bin/bash"
        assert proc_table.cwd(100) == "/home/a"

    def test_children_in_kernel_order(self, fake_proc, proc_table):
        fake_proc.add(100, "/usr/bin/bash", "/home/a", children=[205, 201, 300])

        assert proc_table.children(100) == [205, 201, 300]

    def test_no_children(self, fake_proc, proc_table):
        fake_proc.add(100, "/usr/bin/bash", "/home/a")

        assert proc_table.children(100) == []

    def test_children_whitespace_tolerated(self, fake_proc, proc_table):
        fake_proc.add(100, "/usr/bin/bash", "/home/a", children_raw=b"  7\n8\t9 ")

        assert proc_table.children(100) == [7, 8, 9]

    def test_missing_process(self, proc_table):
        with pytest.raises(ProcessReadError) as exc_info:
            proc_table.exe(999)
        assert exc_info.value.pid == 999
        assert exc_info.value.path == "999/exe"

    def test_missing_children_file(self, fake_proc, proc_table):
        fake_proc.add(100, "/usr/bin/bash", "/home/a")
        fake_proc.remove_children_file(100)

        with pytest.raises(ProcessReadError):
            proc_table.children(100)

    def test_non_utf8_cwd(self, fake_proc, proc_table):
        fake_proc.add(100, "/usr/bin/bash", b"/home/caf\xe9")

        with pytest.raises(ProcessReadError) as exc_info:
            proc_table.cwd(100)
        assert exc_info.value.path == "100/cwd"
        assert "UTF-8" in str(exc_info.value)

    def test_non_utf8_exe(self, fake_proc, proc_table):
        fake_proc.add(100, b"/opt/\xff\xfe/bin", "/home/a")

        with pytest.raises(ProcessReadError):
            proc_table.exe(100)
        assert proc_table.cwd(100) == "/home/a"


class TestChildrenValidation:
    """The children list is untrusted input."""

    @pytest.mark.parametrize("raw", [b"12 abc ", b"12 -3 ", b"1.5 ", b"0 "])
    def test_malformed_entries(self, fake_proc, proc_table, raw):
        fake_proc.add(100, "/usr/bin/bash", "/home/a", children_raw=raw)

        with pytest.raises(ProcessReadError):
            proc_table.children(100)

    def test_oversize_list(self, fake_proc, proc_table):
        fake_proc.add(100, "/usr/bin/bash", "/home/a", children_raw=b"1 " * (MAX_CHILDREN_BYTES // 2 + 1))

        with pytest.raises(ProcessReadError) as exc_info:
            proc_table.children(100)
        assert "exceeds" in str(exc_info.value)


class TestLifetime:
    """Test handle open/close."""

    def test_context_manager_closes(self, fake_proc):
        with ProcTable(fake_proc.root) as proc:
            assert not proc.closed
        assert proc.closed

    def test_close_is_idempotent(self, fake_proc):
        proc = ProcTable(fake_proc.root)
        proc.close()
        proc.close()
        assert proc.closed

    def test_read_after_close(self, fake_proc):
        fake_proc.add(100, "/usr/bin/bash", "/home/a")
        proc = ProcTable(fake_proc.root)
        proc.close()

        with pytest.raises(ProcessReadError):
            proc.cwd(100)

    def test_missing_root(self, tmp_path):
        with pytest.raises(ProcessReadError):
            ProcTable(tmp_path / "nowhere")
