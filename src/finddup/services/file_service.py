"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

services/file_service.py
Filesystem operations used when merging duplicates: hardlink replacement and
optional removal to the system trash.
"""
import logging
import os
from pathlib import Path
from send2trash import send2trash

logger = logging.getLogger(__name__)


class FileService:
    """
    Filesystem side effects of the merge operation.
    Methods raise RuntimeError with a readable message on failure.
    """

    @staticmethod
    def is_same_file(first: str, second: str) -> bool:
        """True if both paths exist and name the same physical file."""
        try:
            return os.path.samefile(first, second)
        except OSError:
            return False

    @staticmethod
    def replace_with_hardlink(source: str, target: str, use_trash: bool = False) -> None:
        """
        Makes `target` a hardlink to `source`.

        The link is first created under a temporary name next to `target` and
        then renamed over it, so `target` is never missing if linking fails.
        With `use_trash`, an existing `target` is sent to the system trash
        before the rename instead of being unlinked by it.
        """
        target_path = Path(target)
        tmp_path = target_path.with_name(f".{target_path.name}.finddup-{os.getpid()}.tmp")

        try:
            os.link(source, tmp_path)
        except OSError as e:
            raise RuntimeError(f"Failed to link {source} to {target}: {e.strerror or e}") from e

        try:
            if use_trash and os.path.lexists(target):
                FileService.move_to_trash(target)
            os.replace(tmp_path, target_path)
        except (OSError, RuntimeError) as e:
            FileService._discard(tmp_path)
            if isinstance(e, RuntimeError):
                raise
            raise RuntimeError(f"Failed to replace {target}: {e.strerror or e}") from e

    @staticmethod
    def move_to_trash(file_path: str):
        """Moves a file to the system trash."""
        path = Path(file_path)

        if not os.path.lexists(path):
            raise FileNotFoundError(f"File not found: {path}")

        try:
            send2trash(str(path))
        except Exception as e:
            raise RuntimeError(f"Failed to move to trash: {e}") from e

    @staticmethod
    def _discard(tmp_path: Path) -> None:
        try:
            tmp_path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.error(f"Failed to remove temporary link {tmp_path}: {e}")
