from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Protocol, Sequence, Union


class FileSystemAdapter(Protocol):
    def write_text(self, path: Path, content: str) -> None: ...
    def exists(self, path: Path) -> bool: ...
    def read_text(self, path: Path) -> str: ...


class RealFileSystem:
    def write_text(self, path: Path, content: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        # newline="" keeps the document's own line endings
        with path.open("w", encoding="utf-8", newline="") as f:
            f.write(content)

    def exists(self, path: Path) -> bool:
        return path.is_file()

    def read_text(self, path: Path) -> str:
        with path.open("r", encoding="utf-8", newline="") as f:
            return f.read()


class OverlayFileSystem:
    """
    Reads through to a base file system, keeps every write in memory.

    Used for dry runs: the move executes normally and the overlay afterwards
    holds the would-be content of every touched file.
    """

    def __init__(self, base: Optional[FileSystemAdapter] = None):
        self.base = base or RealFileSystem()
        self.files: Dict[Path, str] = {}

    def write_text(self, path: Path, content: str) -> None:
        self.files[path] = content

    def exists(self, path: Path) -> bool:
        return path in self.files or self.base.exists(path)

    def read_text(self, path: Path) -> str:
        if path in self.files:
            return self.files[path]
        return self.base.read_text(path)

    def original_text(self, path: Path) -> Optional[str]:
        return self.base.read_text(path) if self.base.exists(path) else None


class TransactionError(Exception):
    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Could not apply edits to {path}: {reason}")


@dataclass(frozen=True)
class ByteRange:
    start: int
    end: int

    def __post_init__(self):
        if self.start < 0 or self.end < self.start:
            raise ValueError(f"Invalid byte range [{self.start}, {self.end})")

    def __len__(self) -> int:
        return self.end - self.start

    def contains(self, offset: int) -> bool:
        return self.start <= offset <= self.end


@dataclass(frozen=True)
class PendingEdit:
    range: ByteRange
    replacement_text: str

    @classmethod
    def insert(cls, offset: int, text: str) -> "PendingEdit":
        return cls(ByteRange(offset, offset), text)

    @classmethod
    def delete(cls, span: ByteRange) -> "PendingEdit":
        return cls(span, "")


def order_edits(edits: Iterable[PendingEdit]) -> List[PendingEdit]:
    """
    Returns the edits in application order: descending start offset.

    Applying in this order keeps every offset that has not been applied yet
    valid. Overlapping ranges cannot be ordered that way and are rejected.
    Insertions at the same offset end up in the document in submission order.
    """
    indexed = list(enumerate(edits))
    indexed.sort(
        key=lambda item: (-item[1].range.start, -item[1].range.end, -item[0])
    )
    ordered = [edit for _, edit in indexed]

    for later, earlier in zip(ordered, ordered[1:]):
        if earlier.range.end > later.range.start:
            raise ValueError(
                f"Overlapping edits [{earlier.range.start}, {earlier.range.end}) "
                f"and [{later.range.start}, {later.range.end})"
            )
    return ordered


def apply_edits(text: str, edits: Sequence[PendingEdit]) -> str:
    data = text.encode("utf-8")
    for edit in order_edits(edits):
        if edit.range.end > len(data):
            raise ValueError(
                f"Edit range [{edit.range.start}, {edit.range.end}) exceeds "
                f"document length {len(data)}"
            )
        data = (
            data[: edit.range.start]
            + edit.replacement_text.encode("utf-8")
            + data[edit.range.end :]
        )
    return data.decode("utf-8")


@dataclass
class FileOp(ABC):
    path: Path

    @abstractmethod
    def execute(self, fs: FileSystemAdapter, root: Path) -> None: ...

    @abstractmethod
    def describe(self) -> str: ...


@dataclass
class EditFileOp(FileOp):
    edits: List[PendingEdit] = field(default_factory=list)

    def execute(self, fs: FileSystemAdapter, root: Path) -> None:
        target = root / self.path
        if not fs.exists(target):
            raise FileNotFoundError(f"No such document: {target}")
        fs.write_text(target, apply_edits(fs.read_text(target), self.edits))

    def describe(self) -> str:
        return f"[EDIT] {self.path} ({len(self.edits)} edit(s))"


@dataclass
class CreateFileOp(FileOp):
    content: str

    def execute(self, fs: FileSystemAdapter, root: Path) -> None:
        fs.write_text(root / self.path, self.content)

    def describe(self) -> str:
        return f"[CREATE] {self.path}"


class TransactionManager:
    """
    Applies one file transaction at a time, in submission order.

    There is no cross-file rollback: when a transaction fails, the ones that
    were already submitted stay applied.
    """

    def __init__(self, root_path: Path, fs: Optional[FileSystemAdapter] = None):
        self.root_path = root_path
        self.fs = fs or RealFileSystem()
        self._applied: List[FileOp] = []

    def submit(self, op: FileOp) -> None:
        try:
            op.execute(self.fs, self.root_path)
        except (OSError, ValueError, UnicodeError) as e:
            raise TransactionError(op.path, str(e)) from e
        self._applied.append(op)

    def edit(self, path: Union[str, Path], edits: Sequence[PendingEdit]) -> None:
        self.submit(EditFileOp(Path(path), list(edits)))

    def create(self, path: Union[str, Path], content: str) -> None:
        self.submit(CreateFileOp(Path(path), content))

    def preview(self) -> List[str]:
        return [op.describe() for op in self._applied]

    @property
    def applied(self) -> List[FileOp]:
        return list(self._applied)

    @property
    def applied_count(self) -> int:
        return len(self._applied)
