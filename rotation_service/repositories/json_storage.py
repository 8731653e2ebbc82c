# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository helpers: whole-document JSON files on local disk.
Reads fall back to None, writes rewrite the file in full. Never raises.
"""

import json
from pathlib import Path
from typing import Any, Optional

from rotation_service.core.logging import get_logger

logger = get_logger(__name__)


def read_document(path: str | Path) -> Optional[Any]:
    """Return the parsed JSON document, or None if missing or unparseable."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            return json.load(fh)
    except FileNotFoundError:
        logger.warning("File not found: %s", path)
    except (OSError, ValueError) as exc:
        logger.warning("Could not read %s: %s", path, exc)
    return None


def write_document(path: str | Path, document: Any) -> bool:
    """Rewrite the file with the whole document. Returns False on failure."""
    try:
        data = json.dumps(document, indent=2)
        with open(path, "w", encoding="utf-8") as fh:
            fh.write(data)
    except (OSError, TypeError, ValueError) as exc:
        logger.error("Could not write %s: %s", path, exc)
        return False
    return True
