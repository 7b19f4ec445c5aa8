"""
base repository for warden
"""
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple, Type

from warden.data.base import DbAdapter
from warden.exceptions import StorageUnavailable
from warden.models.versioned_model import VersionedModel

logger = logging.getLogger(__name__)


class BaseRepository:
    """
    BaseRepository class
    """

    def __init__(
        self,
        adapter: DbAdapter,
        model: Type[VersionedModel],
        user_id: Optional[str] = None
    ):
        self.adapter = adapter
        self.model = model
        self.table_name = model.__name__.lower()
        self.user_id = user_id
        # Enable auditing by default
        self.use_audit_table = True

    def _execute_within_context(
        self,
        func,
        *args,
        **kwargs
    ):
        """Utility method to execute adapter methods within the context manager."""
        try:
            with self.adapter:
                return func(*args, **kwargs)
        except (ConnectionError, TimeoutError) as ex:
            logger.error("Storage unavailable for table %s: %s", self.table_name, ex)
            raise StorageUnavailable(str(ex)) from ex

    def _process_data_before_save(
        self,
        instance: VersionedModel
    ) -> Dict[str, Any]:
        """Convert a VersionedModel instance to a data dictionary for the adapter."""
        instance.prepare_for_save(changed_by_id=self.user_id)
        return instance.as_dict(convert_datetime_to_iso_string=True)

    def get_save_operations(self, instance: VersionedModel) -> List[Any]:
        """Queries that persist ``instance``, for use inside a larger transaction."""
        operations = []
        if self.use_audit_table:
            operations.append(self.adapter.get_move_entity_to_audit_table_query(
                self.table_name, instance.entity_id))
        data = self._process_data_before_save(instance)
        operations.append(self.adapter.get_save_query(self.table_name, data))
        return operations

    def get_one(
        self,
        conditions: Dict[str, Any],
        sort: List[Tuple[str, str]] = None
    ) -> Optional[VersionedModel]:
        """
        Fetches a single active record from the table based on given conditions.

        :param conditions: filter conditions
        :param sort: sort order
        :return: a VersionedModel instance if found, None otherwise
        """
        data = self._execute_within_context(
            self.adapter.get_one,
            self.table_name,
            {'active': True, **conditions},
            sort
        )
        if not data:
            return None
        return self.model.from_dict(data)

    def get_many(
        self,
        conditions: Dict[str, Any] = None,
        sort: List[Tuple[str, str]] = None,
        limit: int = 100,
        offset: int = 0
    ) -> List[VersionedModel]:
        """
        Fetches multiple active records from the table based on given conditions.

        :param conditions: filter conditions
        :param sort: sort order
        :param limit: maximum number of records to return
        :param offset: number of records to skip before returning results
        :return: list of VersionedModel instances
        """
        records = self._execute_within_context(
            self.adapter.get_many,
            self.table_name,
            {'active': True, **(conditions or {})},
            sort,
            limit,
            offset
        )
        return [self.model.from_dict(record) for record in records]

    def get_count(self, conditions: Dict[str, Any] = None) -> int:
        """Counts the active records matching ``conditions``."""
        return self._execute_within_context(
            self.adapter.get_count,
            self.table_name,
            {'active': True, **(conditions or {})}
        )

    def save(
        self,
        instance: VersionedModel,
        related: Sequence[Tuple['BaseRepository', VersionedModel]] = ()
    ) -> VersionedModel:
        """
        Saves a VersionedModel instance to the database.

        :param instance: The VersionedModel instance to save.
        :param related: (repository, instance) pairs saved in the same transaction.
            The repositories must share this repository's adapter.
        :return: The saved VersionedModel instance.
        """
        operations = self.get_save_operations(instance)
        for repository, other in related:
            if repository.adapter is not self.adapter:
                raise ValueError("Related saves must share the same adapter")
            operations.extend(repository.get_save_operations(other))
        self._execute_within_context(self.adapter.run_transaction, operations)
        return instance

    def save_many(self, instances: Sequence[VersionedModel]) -> List[VersionedModel]:
        """Saves every instance in a single transaction."""
        operations = []
        for instance in instances:
            operations.extend(self.get_save_operations(instance))
        self._execute_within_context(self.adapter.run_transaction, operations)
        return list(instances)

    def delete(
        self,
        instance: VersionedModel
    ) -> VersionedModel:
        """
        Logically deletes a VersionedModel instance from the database by setting its active flag to False.

        :param instance: The VersionedModel instance to delete.
        :return: The deleted VersionedModel instance, which is now in a logically deleted state.
        """
        instance.active = False
        return self.save(instance)
