from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Union


@dataclass(frozen=True)
class SourceFile:
    """A file under the root directory, identified the way cache keys need it."""

    path: str
    size: int
    mtime: int  # epoch milliseconds

    @property
    def extension(self) -> str:
        return PurePosixPath(self.path).suffix.lstrip(".").lower()

    @property
    def basename(self) -> str:
        return PurePosixPath(self.path).stem


class LocalFileSystem:
    """Root-relative file access; paths use forward slashes, `~` in the root is expanded."""

    def __init__(self, root_dir: str):
        self.root_dir = Path(root_dir).expanduser()

    def resolve(self, path: str) -> Path:
        return self.root_dir / path

    def exists(self, path: str) -> bool:
        return self.resolve(path).exists()

    def mkdir(self, path: str) -> None:
        self.resolve(path).mkdir(parents=True, exist_ok=True)

    def read(self, path: str) -> bytes:
        return self.resolve(path).read_bytes()

    def read_text(self, path: str) -> str:
        return self.resolve(path).read_text(encoding="utf-8")

    def write(self, path: str, data: Union[bytes, str]) -> None:
        target = self.resolve(path)
        if isinstance(data, str):
            target.write_text(data, encoding="utf-8")
        else:
            target.write_bytes(data)

    def list(self, directory: str) -> list[str]:
        base = self.resolve(directory)
        if not base.is_dir():
            return []
        return sorted(
            str(PurePosixPath(directory) / child.name)
            for child in base.iterdir()
            if child.is_file()
        )

    def list_dirs(self, directory: str) -> list[str]:
        base = self.resolve(directory)
        if not base.is_dir():
            return []
        return sorted(
            str(PurePosixPath(directory) / child.name)
            for child in base.iterdir()
            if child.is_dir()
        )

    def remove(self, path: str) -> None:
        self.resolve(path).unlink()

    def stat(self, path: str) -> SourceFile:
        stat = self.resolve(path).stat()
        return SourceFile(
            path=path,
            size=stat.st_size,
            mtime=stat.st_mtime_ns // 1_000_000,
        )
