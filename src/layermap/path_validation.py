"""
Path validation for reading mapping files.

Guards the CLI against:
- Path traversal (../../../etc/passwd)
- Symlinks pointing outside the intended location
- Windows reserved device names
- Unicode normalization tricks

Usage:
    from layermap.path_validation import read_mapping_file

    content = read_mapping_file("mappings/customer.csv")
"""

import logging
import os
import unicodedata
from pathlib import Path
from typing import List, Optional, Union

logger = logging.getLogger(__name__)

# Extensions accepted for mapping input
MAPPING_EXTENSIONS = [".csv", ".txt", ".md", ".map"]

# Windows reserved device names (case-insensitive)
WINDOWS_RESERVED_NAMES = frozenset(
    ["CON", "PRN", "AUX", "NUL"]
    + [f"COM{i}" for i in range(1, 10)]
    + [f"LPT{i}" for i in range(1, 10)]
)


class PathValidator:
    """Validates mapping file paths.

    Example:
        validator = PathValidator()
        path = validator.validate_file("sheet.csv", allowed_extensions=[".csv"])
    """

    def validate_file(
        self,
        path: Union[str, Path],
        allowed_extensions: List[str],
        allow_symlinks: bool = False,
        base_dir: Optional[Union[str, Path]] = None,
    ) -> Path:
        """Validate a file path.

        Args:
            path: The file path to validate.
            allowed_extensions: List of allowed file extensions (e.g., [".csv", ".txt"]).
            allow_symlinks: If True, symlinks are allowed. Defaults to False.
            base_dir: If provided, the file must be within this directory.

        Returns:
            The resolved, validated Path object.

        Raises:
            FileNotFoundError: If the file does not exist.
            ValueError: If path contains traversal sequences, has wrong extension,
                       is not a file, is outside base_dir, or is a symlink
                       (when allow_symlinks=False).
            TypeError: If path is None.
        """
        if path is None:
            raise TypeError("Path cannot be None")

        path_str = str(path).strip()
        if not path_str:
            raise ValueError("Path cannot be empty")

        path_str = unicodedata.normalize("NFKC", path_str)
        path_str = os.path.expanduser(path_str)
        path_obj = Path(path_str)

        # Detect path traversal BEFORE resolution
        self._check_traversal_in_path(path_str)

        try:
            resolved = path_obj.resolve()
        except OSError as e:
            raise ValueError(f"Invalid path: {e}") from e

        if not resolved.exists():
            raise FileNotFoundError("File does not exist: path not found")

        if not resolved.is_file():
            raise ValueError("Path is not a file")

        allowed_exts_lower = [ext.lower() for ext in allowed_extensions]
        if resolved.suffix.lower() not in allowed_exts_lower:
            raise ValueError(f"Invalid file extension: expected one of {allowed_extensions}")

        if resolved.stem.upper() in WINDOWS_RESERVED_NAMES:
            raise ValueError(f"Reserved Windows device name not allowed: {resolved.stem}")

        if path_obj.is_symlink() and not allow_symlinks:
            raise ValueError("Symbolic links are not allowed (use allow_symlinks=True to override)")

        if base_dir is not None:
            base_path = Path(base_dir).resolve()
            if not resolved.is_relative_to(base_path):
                raise ValueError("Path escapes the base directory")

        if allow_symlinks and path_obj.is_symlink():
            logger.warning(
                "SECURITY: allow_symlinks=True enables following symbolic links. "
                "This may expose sensitive files."
            )

        return resolved

    def _check_traversal_in_path(self, path_str: str) -> None:
        """Raise ValueError if any path component is '..'"""
        for component in path_str.replace("\\", "/").split("/"):
            if component == "..":
                raise ValueError("Path traversal detected: path contains '..' component")


def read_mapping_file(
    path: Union[str, Path],
    allowed_extensions: Optional[List[str]] = None,
    allow_symlinks: bool = False,
) -> str:
    """Validate and read a UTF-8 mapping file.

    Raises:
        ValueError: For validation failures or non UTF-8 content.
        FileNotFoundError: If file does not exist.
        PermissionError: If file cannot be read.
    """
    resolved = PathValidator().validate_file(
        path,
        allowed_extensions=allowed_extensions or MAPPING_EXTENSIONS,
        allow_symlinks=allow_symlinks,
    )
    try:
        return resolved.read_text(encoding="utf-8")
    except PermissionError as e:
        raise PermissionError("Cannot read mapping file: permission denied") from e
    except UnicodeDecodeError as e:
        raise ValueError("Mapping file is not valid UTF-8") from e


__all__ = ["MAPPING_EXTENSIONS", "PathValidator", "read_mapping_file"]
