"""
CSV management utilities for loading and saving table exports.

Provides metadata caching for the CSV tables the loader reads, and the
writers used when reports are saved as CSV.
"""
import csv
import logging
from datetime import datetime, timezone
from pathlib import Path

logger = logging.getLogger(__name__)


class CSVManager:
    """
    Manages CSV file operations with metadata caching.

    Caches file metadata (mtime, size, row count) so repeated status checks
    do not re-read unchanged files.
    """

    def __init__(self):
        self._meta_cache: dict[str, dict] = {}

    def get_metadata(self, path: Path) -> dict:
        """
        Get metadata for a CSV file (with caching).

        Returns:
            dict with keys: exists, mtime, mtime_iso, size, rows
        """
        if not path.exists():
            return {"exists": False, "mtime": None, "mtime_iso": None, "size": 0, "rows": 0}

        stat = path.stat()
        mtime = stat.st_mtime

        cached = self._meta_cache.get(str(path))
        if cached and cached.get("mtime") == mtime:
            return cached

        rows = 0
        try:
            with open(path, newline="", encoding="utf-8") as f:
                reader = csv.reader(f)
                if next(reader, None) is not None:
                    rows = sum(1 for _ in reader)
        except (OSError, UnicodeDecodeError, csv.Error) as e:
            logger.warning("Could not count rows in %s: %s", path, e)

        meta = {
            "exists": True,
            "mtime": mtime,
            "mtime_iso": datetime.fromtimestamp(mtime, tz=timezone.utc).isoformat(),
            "size": stat.st_size,
            "rows": rows,
        }
        self._meta_cache[str(path)] = meta
        return meta

    def load_dicts(self, path: Path) -> list[dict]:
        """
        Load a CSV file as a list of dictionaries.

        Returns an empty list if the file does not exist.
        """
        if not path.exists():
            logger.warning("CSV file not found: %s", path)
            return []

        with open(path, newline="", encoding="utf-8-sig") as f:
            return list(csv.DictReader(f))

    def save_dicts(self, path: Path, rows: list[dict], fieldnames: list[str]) -> None:
        """Write rows to a CSV file, replacing it."""
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=fieldnames, extrasaction="ignore")
            writer.writeheader()
            writer.writerows(rows)

        self._meta_cache.pop(str(path), None)
        logger.info("Saved CSV: %s (%d rows)", path, len(rows))


# Global instance for shared use
csv_manager = CSVManager()
