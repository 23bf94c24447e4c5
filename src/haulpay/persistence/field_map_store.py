"""Field map persistence: a JSON object of logical field -> header text.

Loading never fails. A missing, unreadable or corrupt saved mapping is
logged and replaced by the defaults.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from haulpay.core.exceptions import CacheError
from haulpay.persistence.protocols import IKeyValueBackend
from haulpay.models.field_map import FieldMap

logger = logging.getLogger(__name__)


def _decode(raw: str, source: str) -> FieldMap:
    try:
        data: Any = json.loads(raw)
    except ValueError as exc:
        logger.warning("Failed to load fuel import configuration from %s, using defaults: %s", source, exc)
        return FieldMap.load_default()
    if not isinstance(data, dict):
        logger.warning("Fuel import configuration in %s is not a mapping, using defaults", source)
        return FieldMap.load_default()
    logger.info("Loaded fuel import configuration from %s", source)
    return FieldMap.from_mapping(data)


def _encode(field_map: FieldMap) -> str:
    return json.dumps(dict(field_map.items()), indent=2)


class JsonFileFieldMapStore:
    """IFieldMapStore backed by a JSON file on local disk."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    def load(self) -> FieldMap:
        if not self._path.exists():
            logger.info("No saved fuel import configuration at %s, using defaults", self._path)
            return FieldMap.load_default()
        try:
            raw = self._path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Failed to read %s, using defaults: %s", self._path, exc)
            return FieldMap.load_default()
        return _decode(raw, str(self._path))

    def save(self, field_map: FieldMap) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(_encode(field_map), encoding="utf-8")
        logger.info("Saved fuel import configuration to %s", self._path)


class KeyValueFieldMapStore:
    """IFieldMapStore kept under a single key of a key-value backend."""

    def __init__(self, backend: IKeyValueBackend, key: str) -> None:
        self._backend = backend
        self._key = key

    def load(self) -> FieldMap:
        try:
            raw = self._backend.get(self._key)
        except CacheError as exc:
            logger.warning("Failed to load fuel import configuration, using defaults: %s", exc)
            return FieldMap.load_default()
        if raw is None:
            return FieldMap.load_default()
        return _decode(raw, self._key)

    def save(self, field_map: FieldMap) -> None:
        self._backend.set(self._key, _encode(field_map))
        logger.info("Saved fuel import configuration to key %s", self._key)
