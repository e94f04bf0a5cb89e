"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

services/file_service.py
File removal for the deleter: system trash by default (via send2trash), permanent removal on request.
"""
import os
from pathlib import Path
from typing import List, Tuple
from send2trash import send2trash


class FileService:
    """
    Cross-platform removal of duplicate files.
    Every failure is re-raised as RuntimeError with a readable message.
    """

    @staticmethod
    def move_to_trash(file_path: str):
        """Moves a file to the system trash."""
        path = Path(file_path)

        if not path.exists():
            raise RuntimeError(f"File not found: {path}")

        try:
            send2trash(str(path))
        except Exception as e:
            raise RuntimeError(f"Failed to move to trash: {e}") from e

    @staticmethod
    def remove_permanently(file_path: str):
        """Deletes a file without going through the trash."""
        try:
            os.remove(file_path)
        except FileNotFoundError as e:
            raise RuntimeError(f"File not found: {file_path}") from e
        except OSError as e:
            raise RuntimeError(f"Failed to delete file: {e}") from e

    @classmethod
    def delete(cls, file_path: str, permanent: bool = False):
        if permanent:
            cls.remove_permanently(file_path)
        else:
            cls.move_to_trash(file_path)

    @classmethod
    def delete_multiple(cls, file_paths: List[str], permanent: bool = False) -> List[Tuple[str, str]]:
        """
        Deletes every file it can.
        Returns (path, error message) for each file that could not be deleted.
        """
        errors = []
        for path in file_paths:
            try:
                cls.delete(path, permanent=permanent)
            except RuntimeError as e:
                errors.append((path, str(e)))
        return errors

    @staticmethod
    def summarize_errors(errors: List[Tuple[str, str]], limit: int = 5) -> str:
        summary = "\n".join(
            f"  • {Path(p).name}: {msg.split(':')[-1].strip()}"
            for p, msg in errors[:limit]
        )
        if len(errors) > limit:
            summary += f"\n  • ...and {len(errors) - limit} more files"
        return summary
