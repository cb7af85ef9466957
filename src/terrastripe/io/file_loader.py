"""Concrete loader for attribute trees stored in local YAML / JSON files."""

from __future__ import annotations

import json
import logging
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Final

from ruamel.yaml import YAML

from terrastripe.core.exceptions import TreeLoadError

logger = logging.getLogger(__name__)

_YAML_EXTS: Final[set[str]] = {".yaml", ".yml"}
_JSON_EXTS: Final[set[str]] = {".json"}

_yaml_parser = YAML(typ="safe")  # safe loader, YAML 1.2


def _plain(value: Any) -> Any:
    """Turn YAML-native timestamps back into the RFC 3339 text they came from."""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, dict):
        return {key: _plain(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_plain(item) for item in value]
    return value


class FileLoader:
    """Read an attribute tree from disk and return a Python `dict`."""

    supported_exts: set[str] = _YAML_EXTS | _JSON_EXTS

    @staticmethod
    def load(path: str | Path) -> dict[str, Any]:
        file_path = Path(path)

        # validation
        if not file_path.exists():
            logger.error("File not found: %s", file_path)
            raise TreeLoadError(f"File not found: {file_path}", str(file_path))

        if file_path.suffix.lower() not in FileLoader.supported_exts:
            raise TreeLoadError(
                f"Unsupported extension '{file_path.suffix}'. "
                f"Supported: {', '.join(sorted(FileLoader.supported_exts))}",
                str(file_path),
            )

        # read + parse
        try:
            raw_text = file_path.read_text(encoding="utf-8")
            if file_path.suffix.lower() in _YAML_EXTS:
                data = _yaml_parser.load(raw_text)
            else:  # .json
                data = json.loads(raw_text)
        except Exception as exc:
            raise TreeLoadError(
                f"Cannot parse {file_path.name}: {exc}", str(file_path)
            ) from exc

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise TreeLoadError("Top-level object must be a mapping", str(file_path))

        logger.debug("Attribute tree loaded (%d root keys)", len(data))
        return _plain(data)
