"""File based uploader bound into scope as ``$uploader``."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from loguru import logger

from vql_console.errors import UploadError


@dataclass(frozen=True)
class UploadResponse:
    path: Path
    size: int


class FileBasedUploader:
    """Write uploaded content below a dump directory."""

    def __init__(self, upload_dir: Path) -> None:
        self.upload_dir = upload_dir

    def resolve(self, name: str) -> Path:
        root = self.upload_dir.resolve()
        target = (root / name.lstrip("/\\")).resolve()
        if target != root and root not in target.parents:
            raise UploadError(f"upload path escapes dump directory: {name}")
        if target == root:
            raise UploadError("upload name is empty")
        return target

    def upload(self, name: str, data: bytes | Iterable[bytes]) -> UploadResponse:
        target = self.resolve(name)
        target.parent.mkdir(parents=True, exist_ok=True)
        chunks = [data] if isinstance(data, bytes) else data
        size = 0
        with open(target, "wb") as handle:
            for chunk in chunks:
                handle.write(chunk)
                size += len(chunk)
        logger.info("upload.written path={} size={}", target, size)
        return UploadResponse(path=target, size=size)
