import logging
import os
import re
import time
from contextlib import contextmanager
from typing import Iterable

from pyquer.errors import InputError, PaperExtractionError
from pyquer.utils.file_utils import ensure_directory

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def sanitize_filename(filename: str) -> str:
    name = os.path.basename(filename or "").strip()
    name = _UNSAFE_CHARS.sub("_", name)
    name = re.sub(r"\.{2,}", ".", name).strip("._")
    return name or "upload.pdf"


class FileStorage:
    """Uploaded papers on local disk, addressed by an opaque file id"""

    def __init__(self, upload_dir: str):
        self.upload_dir = os.path.abspath(upload_dir)
        ensure_directory(self.upload_dir)

    def _path(self, file_id: str) -> str:
        if not file_id or "/" in file_id or "\\" in file_id or file_id in (".", "..") or ".." in file_id:
            raise InputError(f"Invalid file id: {file_id!r}")
        return os.path.join(self.upload_dir, file_id)

    def save(self, data: bytes, original_name: str) -> str:
        name = sanitize_filename(original_name)
        file_id = f"{int(time.time() * 1000)}-{name}"
        suffix = 1
        while True:
            # Exclusive create; a taken id is retried with a suffix
            try:
                with open(self._path(file_id), "xb") as f:
                    f.write(data)
                break
            except FileExistsError:
                file_id = f"{int(time.time() * 1000)}-{suffix}-{name}"
                suffix += 1
        logger.info("Stored upload %s (%d bytes)", file_id, len(data))
        return file_id

    def read(self, file_id: str) -> bytes:
        path = self._path(file_id)
        try:
            with open(path, "rb") as f:
                return f.read()
        except FileNotFoundError:
            raise PaperExtractionError(file_id, "uploaded file not found")

    def exists(self, file_id: str) -> bool:
        return os.path.exists(self._path(file_id))

    def delete(self, file_id: str):
        os.remove(self._path(file_id))
        logger.info("Deleted upload %s", file_id)


@contextmanager
def cleanup_scope(storage: FileStorage, file_ids: Iterable[str]):
    """
    Delete the given uploads when the block exits, however it exits.
    Deletion failures are logged and never raised.
    """
    file_ids = list(file_ids)
    try:
        yield file_ids
    finally:
        for file_id in file_ids:
            try:
                storage.delete(file_id)
            except Exception as e:
                logger.warning("Failed to delete uploaded file %s: %s", file_id, e)
