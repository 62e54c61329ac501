"""Key-value stores holding the JSON-serialized app data."""

from pathlib import Path
from typing import Dict, Optional, Union

import yaml

from .errors import StoreError


class KeyValueStore:
    """String key to string value store. Values are JSON documents."""

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    def remove(self, key: str) -> None:
        raise NotImplementedError


class MemoryStore(KeyValueStore):
    """In-process store, used by tests and dry runs."""

    def __init__(self, data: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(data or {})
        self.writes = 0

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.writes += 1
        self.data[key] = value

    def remove(self, key: str) -> None:
        self.writes += 1
        self.data.pop(key, None)


class YamlFileStore(KeyValueStore):
    """
    Store backed by a single YAML file mapping each key to its JSON string.

    Every call re-reads the file so the file stays the single source of
    truth; writes rewrite the whole mapping.
    """

    def __init__(self, filename: Union[str, Path]):
        self.filename = Path(filename)

    def _load(self) -> Dict[str, str]:
        if not self.filename.exists():
            return {}
        try:
            with open(self.filename, "r") as fp:
                data = yaml.load(fp, Loader=yaml.SafeLoader)
        except (OSError, yaml.YAMLError) as e:
            raise StoreError(f"Cannot read {self.filename}: {e}") from e
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise StoreError(f"{self.filename} does not hold a key-value mapping")
        return data

    def _dump(self, data: Dict[str, str]) -> None:
        try:
            with open(self.filename, "w") as fp:
                yaml.dump(
                    data,
                    fp,
                    default_flow_style=False,
                    allow_unicode=True,
                    sort_keys=False,
                    width=120,
                )
        except OSError as e:
            raise StoreError(f"Cannot write {self.filename}: {e}") from e

    def get(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._dump(data)

    def remove(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._dump(data)
