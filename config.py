"""
Central configuration for the procurement cost analytics.

All paths, thresholds, and reporting settings are defined here.
Override via environment variables or by passing a Config instance directly.

Settings priority (highest wins):
  1. Environment variables
  2. config/analytics_settings.json  (admin-editable, persisted)
  3. Hardcoded defaults in this file
"""
import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

# Project root (directory containing this file)
PROJECT_ROOT = Path(__file__).parent

# Default data locations (relative to project root)
DEFAULT_DATA_DIR    = PROJECT_ROOT / "data"
DEFAULT_OUTPUT_DIR  = PROJECT_ROOT / "output"
DEFAULT_DB_PATH     = DEFAULT_OUTPUT_DIR / "procurement.db"


@dataclass
class Config:
    # --- Data source ---
    data_dir: Path = field(
        default_factory=lambda: Path(os.getenv("DATA_DIR", str(DEFAULT_DATA_DIR)))
    )
    db_path: Path = field(
        default_factory=lambda: Path(os.getenv("DB_PATH", str(DEFAULT_DB_PATH)))
    )
    # use_database=True  → read the SQLite mirror at db_path
    # use_database=False → read CSV exports from data_dir (default)
    use_database: bool = field(
        default_factory=lambda: os.getenv("USE_DATABASE", "false").lower() == "true"
    )

    # --- Output settings ---
    output_dir: Path = field(
        default_factory=lambda: Path(os.getenv("OUTPUT_DIR", str(DEFAULT_OUTPUT_DIR)))
    )
    pretty_json: bool = True        # Indent JSON output for human readability
    report_template: Optional[Path] = field(
        default_factory=lambda: Path(os.environ["REPORT_TEMPLATE"]) if os.getenv("REPORT_TEMPLATE") else None
    )

    # --- Cost allocation ---
    # PO cost amounts are stored in this currency; orders in any other
    # currency need an exchange_rate.
    reporting_currency: str = field(
        default_factory=lambda: os.getenv("REPORTING_CURRENCY", "IDR").upper()
    )

    # --- Component search ---
    search_limit: int = field(
        default_factory=lambda: int(os.getenv("SEARCH_LIMIT", "20"))
    )
    component_fuzzy_threshold: int = field(
        default_factory=lambda: int(os.getenv("COMPONENT_FUZZY_THRESHOLD", "70"))
    )

    def __post_init__(self) -> None:
        """Overlay runtime-tunable settings from analytics_settings.json if present."""
        config_dir = Path(os.getenv("CONFIG_DIR", str(PROJECT_ROOT / "config")))
        settings_file = config_dir / "analytics_settings.json"
        if not settings_file.exists():
            return
        _type_map: dict[str, type] = {
            "reporting_currency":         str,
            "search_limit":               int,
            "component_fuzzy_threshold":  int,
            "pretty_json":                bool,
            "use_database":               bool,
        }
        try:
            with open(settings_file, encoding="utf-8") as f:
                overrides = {k: v for k, v in json.load(f).items() if not k.startswith("_")}
            for key, val in overrides.items():
                if key in _type_map and hasattr(self, key):
                    setattr(self, key, _type_map[key](val))
        except (OSError, ValueError, TypeError) as exc:
            logger.warning("Failed to load analytics_settings.json: %s", exc)
        self.reporting_currency = self.reporting_currency.upper()
