from datetime import datetime, timezone
import hashlib
import json
import logging
import threading
from collections import defaultdict, OrderedDict
from typing import Dict, List, Optional

from bigquery_orm.models import TableSchema

logger = logging.getLogger(__name__)


class SchemaStore:
    """Process-wide registry of table schemas.

    Keeps the last `max_versions` schemas for each table. Registering an
    identical column set keeps its existing version; a changed column set
    becomes a new latest version. Safe to share between threads.
    """
    def __init__(self, max_versions: int = 3):
        """Initialize the store.

        _fingerprint_index: table -> fingerprint -> version
        _registry: table -> version -> schema

        Args:
            max_versions (int): Maximum number of versions to keep per table.
        """
        self._registry: Dict[str, OrderedDict[str, TableSchema]] = defaultdict(OrderedDict)
        self._fingerprint_index: Dict[str, Dict[str, str]] = defaultdict(dict)
        self._max_versions = max_versions
        self._lock = threading.Lock()

    def register(self, schema: TableSchema) -> str:
        """Registers ``schema`` and returns its version."""
        fingerprint = self.fingerprint(schema)
        with self._lock:
            version = self._fingerprint_index[schema.name].get(fingerprint)
            if version:
                self._registry[schema.name].move_to_end(version)
                logger.debug(f"Schema for {schema.name} already registered as {version}")
                return version

            ts = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S")
            version = f"{ts}_{fingerprint[:8]}"
            logger.info(f"Registering schema for {schema.name} as version {version}")

            self._registry[schema.name][version] = schema
            self._fingerprint_index[schema.name][fingerprint] = version
            self._evict_old_versions(schema.name)
            return version

    @staticmethod
    def fingerprint(schema: TableSchema) -> str:
        payload = {
            "table": schema.name,
            "columns": [
                {
                    "name": c.name,
                    "type": c.relational_type.value,
                    "nullable": c.is_nullable,
                    "pk": c.is_primary_key,
                }
                for c in schema.columns
            ],
            "primary_key": list(schema.primary_key),
        }
        raw = json.dumps(payload, sort_keys=True)
        return hashlib.sha256(raw.encode()).hexdigest()

    def get(self, table: str, version: str) -> Optional[TableSchema]:
        with self._lock:
            return self._registry.get(table, {}).get(version)

    def get_latest(self, table: str) -> Optional[TableSchema]:
        with self._lock:
            versions = self._registry.get(table)
            if not versions:
                return None
            return next(reversed(versions.values()))

    def get_all_versions(self, table: str) -> List[str]:
        with self._lock:
            return list(self._registry.get(table, {}).keys())

    def _evict_old_versions(self, table: str) -> List[str]:
        versions = self._registry[table]
        fp_index = self._fingerprint_index[table]
        evicted_versions = []

        while len(versions) > self._max_versions:
            evicted_version, evicted_schema = versions.popitem(last=False)
            evicted_versions.append(evicted_version)
            fp_index.pop(self.fingerprint(evicted_schema), None)
            logger.info("Evicted old schema version for %s: %s", table, evicted_version)

        return evicted_versions


default_store = SchemaStore()
