"""Directory Bundles — localized operation descriptions loaded from JSON files.

Invariants:
    - File layout: <dir>/<ContractName>.json, <ContractName>_<lang>.json,
      <ContractName>_<lang>_<REGION>.json; more specific files overlay less specific
    - Missing directory, missing file, or malformed JSON is a miss (logged), never a fault
    - Loaded bundles are cached per (contract, locale); the cache is the only
      mutable shared state and is guarded by a lock

Design Decisions:
    - JSON over .properties: stdlib parser, values are plain {key: text} objects
"""

import json
import logging
import threading
from pathlib import Path

from httprpc.core.localization import MappingBundle, TextBundle, locale_candidates

logger = logging.getLogger(__name__)


def bundle_filename(contract_name: str, locale: str) -> str:
    if not locale:
        return f"{contract_name}.json"
    return f"{contract_name}_{locale.replace('-', '_')}.json"


class DirectoryBundleSource:
    """Reads <ContractName>[_<locale>].json files from one directory."""

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)
        self._cache: dict[tuple[str, str], MappingBundle | None] = {}
        self._lock = threading.Lock()

    def get_bundle(self, contract: type, locale: str) -> TextBundle | None:
        key = (contract.__name__, locale)
        with self._lock:
            if key in self._cache:
                return self._cache[key]
        bundle = self._load(contract.__name__, locale)
        with self._lock:
            self._cache.setdefault(key, bundle)
            return self._cache[key]

    def _load(self, contract_name: str, locale: str) -> MappingBundle | None:
        merged: dict[str, str] = {}
        found = False
        for candidate in reversed(list(locale_candidates(locale))):
            entries = self._read(self.directory / bundle_filename(contract_name, candidate))
            if entries is not None:
                merged.update(entries)
                found = True
        return MappingBundle(merged) if found else None

    def _read(self, path: Path) -> dict[str, str] | None:
        if not path.is_file():
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable bundle {path}: {e}")
            return None
        if not isinstance(data, dict):
            logger.warning(f"Ignoring bundle {path}: top-level value is not an object")
            return None
        return {str(k): str(v) for k, v in data.items()}
