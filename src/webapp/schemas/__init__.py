"""
Marshmallow schemas normalizing backend records.

The backend spells the same field several ways (Tower_id, tower_id, id).
Each resource schema lists, for every canonical field, the aliases it may
arrive under; loading a record copies the first alias present onto the
canonical name. Unknown fields are kept as-is.

Usage:
    from webapp.schemas import TowerSchema, extract_items

    towers = TowerSchema(many=True).load(extract_items(payload, ['towers']))
"""

import logging
from typing import Any, Dict, Iterable, List, Tuple

from marshmallow import INCLUDE, Schema, ValidationError, fields, pre_load

logger = logging.getLogger(__name__)


class RecordSchema(Schema):
    """
    Base schema for all backend records.

    Subclasses set ALIASES: {canonical_field: (alias, ...)}. Every field is
    Raw, since the backend is not consistent about value types either.
    """
    ALIASES: Dict[str, Tuple[str, ...]] = {}

    class Meta:
        unknown = INCLUDE

    id = fields.Raw(allow_none=True)

    @pre_load
    def map_aliases(self, data, **kwargs):
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for canonical, aliases in self.ALIASES.items():
            if data.get(canonical) not in (None, ''):
                continue
            for alias in aliases:
                if data.get(alias) not in (None, ''):
                    data[canonical] = data[alias]
                    break
        return data

    def to_backend(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Rename canonical fields to the backend's primary spelling."""
        result = {}
        for name, value in data.items():
            aliases = self.ALIASES.get(name)
            result[aliases[0] if aliases else name] = value
        return result


def normalize_records(records: Iterable[Any], schema: Schema) -> List[Dict[str, Any]]:
    """
    Load a list of raw records through a schema.

    Non-object entries are dropped with a warning.
    """
    result = []
    for record in records:
        if not isinstance(record, dict):
            logger.warning(f"Skipping non-object record: {record!r}")
            continue
        try:
            result.append(schema.load(record))
        except ValidationError as e:
            logger.warning(f"Skipping record that failed normalization: {e.messages}")
    return result


from .envelope import extract_items, extract_record
from .records import SCHEMAS, schema_for

__all__ = [
    'RecordSchema',
    'normalize_records',
    'extract_items',
    'extract_record',
    'SCHEMAS',
    'schema_for',
]
