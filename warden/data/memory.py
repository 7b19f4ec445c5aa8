import copy
import logging
import threading
from typing import Any, Callable, Dict, List, Optional, Tuple

from warden.data.base import DbAdapter

logger = logging.getLogger(__name__)

Table = Dict[str, Dict[str, Any]]


class MemoryAdapter(DbAdapter):
    """
    Thread-safe in-process adapter.

    Records are kept as plain dicts keyed by ``entity_id``. Every read returns
    a deep copy and every transaction is applied to a staged copy of the
    tables that replaces the live one only when all operations succeed, so a
    reader never sees half of a transaction.
    """

    def __init__(self):
        self._tables: Dict[str, Table] = {}
        self._lock = threading.RLock()
        self._staged: Optional[Dict[str, Table]] = None

    def __enter__(self) -> 'MemoryAdapter':
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        pass

    def _table(self, name: str) -> Table:
        tables = self._staged if self._staged is not None else self._tables
        return tables.setdefault(name, {})

    @staticmethod
    def _matches(record: Dict[str, Any], conditions: Optional[Dict[str, Any]]) -> bool:
        if not conditions:
            return True
        for key, expected in conditions.items():
            value = record.get(key)
            if isinstance(expected, (list, tuple, set)):
                if value not in expected:
                    return False
            elif value != expected:
                return False
        return True

    @staticmethod
    def _sorted(records: List[Dict[str, Any]], sort: Optional[List[Tuple[str, str]]]) -> List[Dict[str, Any]]:
        for key, direction in reversed(sort or []):
            records = sorted(
                records,
                key=lambda r: (r.get(key) is None, r.get(key)),
                reverse=str(direction).upper() == 'DESC'
            )
        return records

    def run_transaction(self, operations_list: List[Callable[[], Any]]):
        """
        Apply the callables returned by the ``get_*_query`` methods atomically.
        """
        with self._lock:
            self._staged = copy.deepcopy(self._tables)
            try:
                for operation in operations_list:
                    if operation is not None:
                        operation()
                self._tables = self._staged
            finally:
                self._staged = None

    def get_one(self, table: str, conditions: Dict[str, Any],
                sort: List[Tuple[str, str]] = None) -> Optional[Dict[str, Any]]:
        records = self.get_many(table, conditions, sort, limit=1)
        return records[0] if records else None

    def get_many(self, table: str, conditions: Dict[str, Any] = None, sort: List[Tuple[str, str]] = None,
                 limit: int = 100, offset: int = 0) -> List[Dict[str, Any]]:
        with self._lock:
            records = [r for r in self._table(table).values() if self._matches(r, conditions)]
            records = self._sorted(records, sort)
            if offset:
                records = records[offset:]
            if limit is not None:
                records = records[:limit]
            return copy.deepcopy(records)

    def get_count(self, table: str, conditions: Dict[str, Any] = None) -> int:
        with self._lock:
            return sum(1 for r in self._table(table).values() if self._matches(r, conditions))

    def get_move_entity_to_audit_table_query(self, table, entity_id):
        def move():
            current = self._table(table).get(entity_id)
            if current is not None:
                self._table(f"{table}_audit").setdefault(current['version'], copy.deepcopy(current))
        return move

    def get_save_query(self, table: str, data: Dict[str, Any]):
        record = copy.deepcopy(data)

        def save():
            self._table(table)[record['entity_id']] = record
        return save

    def save(self, table: str, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        self.run_transaction([self.get_save_query(table, data)])
        return data

    def delete(self, table: str, data: Dict[str, Any]) -> bool:
        data = dict(data, active=False)
        self.save(table, data)
        return True
