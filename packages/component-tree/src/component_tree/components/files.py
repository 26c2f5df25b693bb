import logging
import os
from pathlib import Path
from typing import List, Tuple, Union

logger = logging.getLogger(__name__)

# Directories skipped during the walk
SKIP_DIRS = {
    "node_modules",
    "dist",
    "build",
    "coverage",
    "__pycache__",
}


def find_files(root: Union[str, Path], suffixes: Union[str, Tuple[str, ...]]) -> List[str]:
    """
    Recursively list every file under *root* whose name ends with one of
    *suffixes*. Hidden directories and common build outputs are skipped.

    Args:
        root: Directory to walk.
        suffixes: A suffix such as ``".component.ts"`` or a tuple of them.

    Returns:
        Sorted list of absolute file paths.

    Raises:
        ValueError: If root doesn't exist or isn't a directory.
    """
    base = Path(root).resolve()

    if not base.exists():
        raise ValueError(f"Source path does not exist: {root}")
    if not base.is_dir():
        raise ValueError(f"Source path is not a directory: {root}")

    if isinstance(suffixes, str):
        suffixes = (suffixes,)

    found: List[str] = []
    for dirpath, dirnames, filenames in os.walk(base):
        # Prune in-place so os.walk never descends into them
        dirnames[:] = [d for d in dirnames if d not in SKIP_DIRS and not d.startswith(".")]

        for fname in filenames:
            if fname.endswith(suffixes):
                found.append(str(Path(dirpath) / fname))

    found.sort()
    logger.debug("find_files: %d files matching %s in %s", len(found), suffixes, root)
    return found
