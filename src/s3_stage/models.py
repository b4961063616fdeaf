"""Vocabulary and file items passed between pipeline stages."""

import io
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import BinaryIO

from pydantic import BaseModel, ConfigDict


class ACL(str, Enum):
    """Canned access policy applied to an uploaded object."""

    PRIVATE = "private"
    PUBLIC_READ = "public-read"
    PUBLIC_READ_WRITE = "public-read-write"
    AUTHENTICATED_READ = "authenticated-read"
    BUCKET_OWNER_READ = "bucket-owner-read"
    BUCKET_OWNER_FULL_CONTROL = "bucket-owner-full-control"


class Region(str, Enum):
    """Named S3 regions; values are the region names boto3 expects."""

    AP_NORTHEAST = "ap-northeast-1"
    AP_SOUTHEAST = "ap-southeast-1"
    AP_SOUTHEAST_2 = "ap-southeast-2"
    EU_WEST = "eu-west-1"
    US_EAST = "us-east-1"
    US_WEST = "us-west-1"
    US_WEST_2 = "us-west-2"
    SA_EAST = "sa-east-1"
    CN_NORTH = "cn-north-1"


class FileInfo(BaseModel):
    """Metadata describing a file item."""

    model_config = ConfigDict(frozen=True)

    name: str
    is_dir: bool = False
    size: int = 0
    modified: datetime | None = None


class FileItem:
    """A file-like resource flowing through a pipeline.

    The byte stream is consumed once by whichever stage reads it. Stages
    that need to forward the content re-wrap the buffered bytes with
    :meth:`from_bytes`.
    """

    def __init__(self, stream: BinaryIO, info: FileInfo) -> None:
        self._stream = stream
        self.info = info

    @classmethod
    def from_bytes(cls, content: bytes, info: FileInfo) -> "FileItem":
        """Wrap already-buffered content."""
        return cls(io.BytesIO(content), info)

    @classmethod
    def from_path(cls, path: str | Path, name: str | None = None) -> "FileItem":
        """Create an item for a file or directory on disk.

        Files are opened lazily on the first read so that a large batch of
        items does not hold every descriptor open at once.

        Args:
            path: Location on disk.
            name: Object name to use instead of the file's base name.
        """
        path = Path(path)
        stat = path.stat()
        info = FileInfo(
            name=name or path.name,
            is_dir=path.is_dir(),
            size=0 if path.is_dir() else stat.st_size,
            modified=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
        )
        if info.is_dir:
            return cls(io.BytesIO(b""), info)
        return cls(_LazyFile(path), info)

    @property
    def name(self) -> str:
        return self.info.name

    @property
    def is_dir(self) -> bool:
        return self.info.is_dir

    def read(self, size: int = -1) -> bytes:
        return self._stream.read(size)

    def close(self) -> None:
        self._stream.close()

    def __enter__(self) -> "FileItem":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"FileItem(name={self.info.name!r}, is_dir={self.info.is_dir})"


class _LazyFile(io.RawIOBase):
    """Binary reader that opens its path on first use."""

    def __init__(self, path: Path) -> None:
        super().__init__()
        self._path = path
        self._handle: BinaryIO | None = None

    def readable(self) -> bool:
        return True

    def read(self, size: int = -1) -> bytes:
        if self._handle is None:
            self._handle = open(self._path, "rb")
        return self._handle.read(size)

    def readinto(self, buffer) -> int:
        data = self.read(len(buffer))
        buffer[: len(data)] = data
        return len(data)

    def close(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None
        super().close()
