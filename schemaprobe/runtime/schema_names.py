"""
schemaprobe Schema Flattener

Turns schema and storage-template declarations into the same dotted-path
sets that flatten_json_keys() produces for payloads, so the two can be
compared with plain set operations.
"""

import json
from typing import Any, Callable, Dict, Iterable, List, Optional, Set, Union

from .schemas import FieldDescriptor, Schema
from .tree import str_concat

AddProperty = Callable[[Schema], bool]
AddField = Callable[[FieldDescriptor], bool]


def parse_schema(schema: Union[str, bytes, Dict[str, Any], Schema]) -> Schema:
    """Parse JSON Schema text (or an already decoded dict) into a Schema."""
    if isinstance(schema, Schema):
        return schema
    if isinstance(schema, (str, bytes)):
        schema = json.loads(schema)
    return Schema.model_validate(schema)


def add_all_prop_names(s: Schema) -> bool:
    return True


def add_length_restricted_props(s: Schema) -> bool:
    return s.max_length is not None


def flatten_schema_names(s: Schema, prefix: str = "",
                         include: AddProperty = add_all_prop_names) -> Set[str]:
    """
    Collect dotted property names of a schema.

    Properties are descended with the same prefix rule as payload keys. Array
    item schemas are only descended when the node declares no properties.
    """
    flattened: Set[str] = set()
    _flatten_schema_into(s, prefix, include, flattened)
    return flattened


def _flatten_schema_into(s: Union[Schema, bool], prefix: str, include: AddProperty,
                         flattened: Set[str]):
    # boolean subschemas declare nothing to descend into
    if isinstance(s, bool):
        return
    if s.properties:
        for name, prop in s.properties.items():
            key = str_concat(prefix, name)
            if include(prop if isinstance(prop, Schema) else Schema()):
                flattened.add(key)
            _flatten_schema_into(prop, key, include, flattened)
    elif s.items is not None:
        items = s.items if isinstance(s.items, list) else [s.items]
        for item in items:
            _flatten_schema_into(item, prefix, include, flattened)


def is_keyword_field(f: FieldDescriptor) -> bool:
    """True when the field, or one of its multi-fields, is stored as a keyword."""
    if f.type == "keyword" or f.object_type == "keyword":
        return True
    for mf in f.multi_fields:
        if mf.type == "keyword":
            return True
    return False


def flatten_field_names(fields: Iterable[FieldDescriptor], prefix: str = "",
                        include: Optional[AddField] = None) -> Set[str]:
    """Collect dotted names of template fields accepted by include (all when None)."""
    flattened: Set[str] = set()
    for f in fields:
        _flatten_field_into(f, prefix, include, flattened)
    return flattened


def _flatten_field_into(f: FieldDescriptor, prefix: str, include: Optional[AddField],
                        flattened: Set[str]):
    key = str_concat(prefix, f.name) if f.name else prefix
    if f.name and (include is None or include(f)):
        flattened.add(key)
    for child in f.fields:
        _flatten_field_into(child, key, include, flattened)


def fetch_flattened_field_names(paths: Iterable[str], include: Optional[AddField],
                                loader) -> Set[str]:
    """Load every template file through loader and union their field names."""
    names: Set[str] = set()
    for path in paths:
        fields: List[FieldDescriptor] = loader.load_fields(path)
        names |= flatten_field_names(fields, "", include)
    return names
