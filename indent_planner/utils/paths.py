"""
Path resolver for indent-planner.

Rules
-----
* logs_dir → <project root>/logs; fallback ~/.indent_planner/logs when that
  location is read-only (e.g. an installed package in site-packages)
"""

from pathlib import Path


def _get_base_dir() -> Path:
    # indent_planner/utils/paths.py → parent.parent.parent = project root
    return Path(__file__).resolve().parent.parent.parent


def _try_writable(path: Path) -> bool:
    """Return True if *path* can be created and written to (canary-file probe)."""
    try:
        path.mkdir(parents=True, exist_ok=True)
        canary = path / ".write_probe"
        canary.touch()
        canary.unlink()
        return True
    except OSError:
        return False


def get_logs_dir() -> Path:
    """
    Logs directory.

    Priority:
      1. <project root>/logs
      2. ~/.indent_planner/logs
    """
    primary = _get_base_dir() / "logs"
    if _try_writable(primary):
        return primary
    fallback = Path.home() / ".indent_planner" / "logs"
    fallback.mkdir(parents=True, exist_ok=True)
    return fallback
