from pathlib import Path
from unittest.mock import Mock

import pytest

from typemover.common.transaction import (
    ByteRange,
    CreateFileOp,
    EditFileOp,
    FileSystemAdapter,
    OverlayFileSystem,
    PendingEdit,
    TransactionError,
    TransactionManager,
    apply_edits,
    order_edits,
)


def test_byte_range_rejects_inverted_bounds():
    with pytest.raises(ValueError):
        ByteRange(5, 2)


def test_order_edits_sorts_descending_by_start():
    edits = [
        PendingEdit.insert(0, "a"),
        PendingEdit(ByteRange(10, 12), "b"),
        PendingEdit.delete(ByteRange(4, 6)),
    ]
    ordered = order_edits(edits)
    assert [e.range.start for e in ordered] == [10, 4, 0]


def test_order_edits_rejects_overlap():
    edits = [PendingEdit(ByteRange(0, 5), "x"), PendingEdit(ByteRange(3, 8), "y")]
    with pytest.raises(ValueError):
        order_edits(edits)


def test_apply_edits_uses_utf8_byte_offsets():
    text = 'const s = "é";\nexport type A = string;\n'
    start = text.encode("utf-8").index(b"export")
    end = len(text.encode("utf-8")) - 1

    result = apply_edits(text, [PendingEdit.delete(ByteRange(start, end))])

    assert result == 'const s = "é";\n\n'


def test_apply_edits_adjacent_insert_and_delete():
    text = "line1\nline2\nline3\n"
    edits = [
        PendingEdit.delete(ByteRange(6, 12)),
        PendingEdit.insert(12, "new\n"),
    ]
    assert apply_edits(text, edits) == "line1\nnew\nline3\n"


def test_apply_edits_rejects_range_outside_document():
    with pytest.raises(ValueError):
        apply_edits("abc", [PendingEdit(ByteRange(2, 10), "")])


def test_transaction_submit_executes_immediately():
    # Setup
    mock_fs = Mock(spec=FileSystemAdapter)
    root = Path("/root")
    tm = TransactionManager(root, fs=mock_fs)

    # Execute
    tm.create("src/c.ts", "export interface Foo {}\n")

    # Verify
    mock_fs.write_text.assert_called_once_with(
        root / "src/c.ts", "export interface Foo {}\n"
    )
    assert tm.preview() == ["[CREATE] src/c.ts"]
    assert tm.applied_count == 1
    assert isinstance(tm.applied[0], CreateFileOp)


def test_transaction_edit_reads_then_writes():
    mock_fs = Mock(spec=FileSystemAdapter)
    mock_fs.exists.return_value = True
    mock_fs.read_text.return_value = "hello world"
    root = Path("/root")
    tm = TransactionManager(root, fs=mock_fs)

    tm.edit("a.ts", [PendingEdit(ByteRange(0, 5), "goodbye")])

    mock_fs.read_text.assert_called_once_with(root / "a.ts")
    mock_fs.write_text.assert_called_once_with(root / "a.ts", "goodbye world")
    assert isinstance(tm.applied[0], EditFileOp)
    assert tm.preview() == ["[EDIT] a.ts (1 edit(s))"]


def test_transaction_edit_of_missing_file_fails():
    mock_fs = Mock(spec=FileSystemAdapter)
    mock_fs.exists.return_value = False
    tm = TransactionManager(Path("/root"), fs=mock_fs)

    with pytest.raises(TransactionError) as excinfo:
        tm.edit("gone.ts", [PendingEdit.insert(0, "x")])

    assert excinfo.value.path == Path("gone.ts")
    assert tm.applied_count == 0


def test_transaction_failure_keeps_earlier_files():
    fs = OverlayFileSystem(Mock(spec=FileSystemAdapter, **{"exists.return_value": False}))
    root = Path("/root")
    tm = TransactionManager(root, fs=fs)

    tm.create("a.ts", "abc")
    with pytest.raises(TransactionError):
        tm.edit("a.ts", [PendingEdit(ByteRange(0, 2), "x"), PendingEdit(ByteRange(1, 3), "y")])

    # No rollback: the first transaction stays applied
    assert fs.read_text(root / "a.ts") == "abc"
    assert tm.applied_count == 1


def test_overlay_file_system_reads_through(tmp_path):
    disk = tmp_path / "a.ts"
    disk.write_text("original", encoding="utf-8")
    fs = OverlayFileSystem()

    fs.write_text(disk, "changed")

    assert fs.read_text(disk) == "changed"
    assert fs.original_text(disk) == "original"
    assert disk.read_text(encoding="utf-8") == "original"
    assert fs.exists(tmp_path / "new.ts") is False
    assert fs.original_text(tmp_path / "new.ts") is None
