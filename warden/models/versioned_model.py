import logging
from uuid import uuid4, UUID
from dataclasses import dataclass, field, fields, is_dataclass
from datetime import datetime, timezone
from dateutil.parser import isoparse
from typing import Any, Dict, List, Optional, Union, get_type_hints, get_origin, get_args
from enum import Enum

logger = logging.getLogger(__name__)

# UUID fields of the Big 6
BIG_6_UUID_FIELDS = ['entity_id', 'version',
                     'previous_version', 'changed_by_id']


def default_datetime():
    """
    Definition for default datetime
    """
    return datetime.now(timezone.utc)


def get_uuid_hex(_int=None):
    """
    Returns UUID in hex format. If _int is passed, it creates UUID with int base.
    """
    return uuid4().hex if _int is None else UUID(int=_int, version=4).hex


class ModelValidationError(Exception):
    """
    Exception raised when one or more validation errors occur in the model.

    Attributes:
        errors (list): A list of error messages returned from validation methods.
    """

    def __init__(self, errors):
        if isinstance(errors, str):
            errors = [errors]
        elif not isinstance(errors, list):
            raise ValueError("Errors should be a string or a list of strings")
        self.errors = errors
        super().__init__(self.format_errors())

    def format_errors(self):
        return "\n".join(self.errors)

    def __str__(self):
        return self.format_errors()


@dataclass(kw_only=True)
class VersionedModel:
    """A base class for versioned models with common (Big 6) attributes."""

    entity_id: str = field(default_factory=get_uuid_hex,
                           metadata={'field_type': 'entity_id'})
    version: str = field(default_factory=lambda: get_uuid_hex(
        0), metadata={'field_type': 'uuid'})
    previous_version: Optional[str] = field(
        default_factory=lambda: None, metadata={'field_type': 'uuid'})
    active: bool = True
    changed_by_id: str = field(default_factory=lambda: get_uuid_hex(
        0), metadata={'field_type': 'uuid'})
    changed_on: datetime = field(default_factory=default_datetime)

    def __repr__(self) -> str:
        """
        Return a string representation of the model.

        Fields flagged with ``sensitive`` metadata are masked so secrets and
        one-time codes never end up in logs.
        """
        field_strings = []
        for f in fields(type(self)):
            if f.metadata.get('sensitive'):
                field_strings.append(f"{f.name}='***'")
            else:
                field_strings.append(f"{f.name}={getattr(self, f.name)!r}")
        return f"{type(self).__name__}({', '.join(field_strings)})"

    @classmethod
    def fields(cls) -> List[str]:
        """
        Get a list of field names for this model.

        Returns:
            List[str]: A list of field names.
        """
        return [f.name for f in fields(cls)]

    def _convert_value_for_dict(self, v, convert_datetime_to_iso_string: bool, convert_uuids: bool):
        """Convert a value for dictionary output."""
        if convert_datetime_to_iso_string and isinstance(v, datetime):
            return v.isoformat()
        if convert_uuids and isinstance(v, UUID):
            return v.hex
        if isinstance(v, Enum):
            return v.value
        if is_dataclass(v) and hasattr(v, 'as_dict'):
            return v.as_dict(convert_datetime_to_iso_string)
        if isinstance(v, dict):
            return {
                self._convert_value_for_dict(key, convert_datetime_to_iso_string, convert_uuids):
                    self._convert_value_for_dict(item, convert_datetime_to_iso_string, convert_uuids)
                for key, item in v.items()
            }
        if isinstance(v, list):
            return [self._convert_value_for_dict(item, convert_datetime_to_iso_string, convert_uuids)
                    for item in v]
        return v

    def _export_properties_to_dict(self, result: Dict, convert_datetime_to_iso_string: bool, convert_uuids: bool):
        """Export @property methods to dictionary."""
        for attr_name in dir(type(self)):
            if attr_name.startswith('_') or attr_name in result:
                continue
            attr = getattr(type(self), attr_name, None)
            if not isinstance(attr, property):
                continue
            result[attr_name] = self._convert_value_for_dict(
                getattr(self, attr_name), convert_datetime_to_iso_string, convert_uuids)

    def as_dict(self, convert_datetime_to_iso_string: bool = False, convert_uuids: bool = True,
                export_properties: bool = False) -> Dict[str, Any]:
        """
        Convert this model to a dictionary.

        Args:
            convert_datetime_to_iso_string (bool, optional): Whether to convert datetime to ISO strings.
            convert_uuids (bool): Whether to convert UUIDs to strings.
            export_properties (bool): Whether to include @property methods in the output.

        Returns:
            Dict[str, Any]: A dictionary representation of this model.
        """
        result = {
            name: self._convert_value_for_dict(getattr(self, name), convert_datetime_to_iso_string, convert_uuids)
            for name in self.fields()
        }
        if export_properties:
            self._export_properties_to_dict(result, convert_datetime_to_iso_string, convert_uuids)
        return result

    @classmethod
    def _convert_uuid_field(cls, v) -> Any:
        """Convert a UUID field value."""
        if not v:
            return v
        if isinstance(v, UUID):
            return v.hex
        try:
            return UUID(v).hex
        except ValueError:
            logger.info(f"'{v}' is not a valid UUID.")
            return v

    @classmethod
    def _convert_typed_value(cls, v, expected_type) -> Any:
        """Convert string values to enum or datetime types."""
        if not isinstance(v, str):
            return v

        if get_origin(expected_type) is Union:
            for arg in get_args(expected_type):
                if arg is type(None):
                    continue
                result = cls._convert_typed_value(v, arg)
                if result is not v:
                    return result
            return v

        if isinstance(expected_type, type) and issubclass(expected_type, Enum):
            try:
                return expected_type(v)
            except ValueError:
                return v

        if expected_type is datetime:
            try:
                return isoparse(v)
            except (ValueError, TypeError):
                return v

        return v

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VersionedModel":
        """
        Load the model from a dict produced by ``as_dict``.
        """
        clean_data = {k: v for k, v in data.items() if k in cls.fields()}
        hints = get_type_hints(cls)

        for k, v in clean_data.items():
            if k in BIG_6_UUID_FIELDS:
                clean_data[k] = cls._convert_uuid_field(v)
            elif v is not None and hints.get(k):
                clean_data[k] = cls._convert_typed_value(v, hints[k])

        return cls(**clean_data)

    def validate(self):
        """
        Validate all fields by calling corresponding `validate_<field_name>` methods if defined.
        Raise `ModelValidationError` if any validations fail.
        """
        errors = []
        for name in self.fields():
            validator = getattr(self, f"validate_{name}", None)
            if callable(validator):
                error = validator()
                if error:
                    errors.append(error)

        if errors:
            raise ModelValidationError(errors)

    def prepare_for_save(self, changed_by_id: Optional[str] = None):
        """
        Prepare this model for saving to the database.

        Args:
            changed_by_id (str): The ID of the user making the change.
        """
        if not self.entity_id:
            self.entity_id = get_uuid_hex()
        if self.version:
            self.previous_version = self.version
        else:
            self.previous_version = get_uuid_hex(0)
        self.version = get_uuid_hex()
        self.changed_on = default_datetime()

        if changed_by_id:
            self.changed_by_id = changed_by_id
        self.validate()
