"""
config.py — Configuration loader.

Reads config.yaml and deep-merges it over the built-in defaults below, so a
partial config (or none at all) still yields every key the pipeline reads.
"""

import copy
import logging
import os
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG: dict[str, Any] = {
    "paths": {
        "output_dir": "data/output",
        "log_dir": "logs",
        "pptx_filename": "WorkDoneStatus_{stem}.pptx",
        "html_filename": "WorkDoneStatus_{stem}.html",
        "pdf_filename": "WorkDoneStatus_{stem}.pdf",
        "excel_filename": "WorkDoneStatus_{stem}.xlsx",
    },
    "report": {
        "title": "Work Done Status",
        "organisation": "MasterSoft",
        "tagline": "Automating Education...",
        "company": "MasterSoft ERP Solutions Pvt. Ltd.",
        "footer": "Work Done | MasterSoft ERP Solutions Pvt. Ltd.",
        "author": "",
        "plotlyjs": "cdn",
        "brand": {
            "title": "333333",
            "logo": "00A4E4",
            "muted": "666666",
            "header_fill": "DDDDDD",
            "border": "666666",
            "background": "FFFFFF",
        },
    },
    "pagination": {
        "rows_per_slide": 8,
        "max_chars_per_cell": 250,
    },
    "extraction": {
        "module_hints": ["Hostel", "Academic", "Finance"],
        "section_keywords": ["Client", "Module", "Tasks", "Status", "Projects"],
    },
    "fallback": {
        "known_patterns_enabled": True,
        "known_patterns": [],
    },
    "server": {
        "host": "0.0.0.0",
        "port": 5000,
    },
    "remote": {
        "url": "http://localhost:5000/api/generate-ppt",
        "timeout_seconds": 60,
    },
}


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(config_path: str = "config.yaml") -> dict[str, Any]:
    """Load configuration from YAML, falling back to defaults.

    Args:
        config_path: Path to config.yaml. A missing file is not an error.

    Returns:
        Fully populated configuration dict.
    """
    path = Path(config_path)
    user_cfg: dict[str, Any] = {}
    if path.exists():
        with open(path, "r", encoding="utf-8") as fh:
            user_cfg = yaml.safe_load(fh) or {}
        logger.debug("Loaded configuration from %s", path)
    else:
        logger.debug("Config %s not found -- using built-in defaults", path)

    cfg = _deep_merge(DEFAULT_CONFIG, user_cfg)

    port = os.environ.get("PORT")
    if port:
        cfg["server"]["port"] = int(port)
    return cfg
