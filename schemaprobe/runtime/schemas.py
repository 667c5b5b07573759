"""
schemaprobe Schema Models

Pydantic models for the two declarations the harness reconciles payloads
against: the intake JSON Schema and the storage field template.
Only the parts the harness walks are modelled; other keywords are ignored.
"""

from typing import Any, Dict, List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field


class Schema(BaseModel):
    """
    Minimal JSON Schema node, nested through properties and items.

    Subschemas may also be the booleans true or false; those are leaves.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    title: str = Field(default="", description="Schema title")
    properties: Dict[str, Union["Schema", bool]] = Field(default_factory=dict, description="Declared object properties")
    additional_properties: Union[bool, Dict[str, Any], None] = Field(None, alias="additionalProperties")
    pattern_properties: Optional[Dict[str, Any]] = Field(None, alias="patternProperties")
    items: Union["Schema", bool, List[Union["Schema", bool]], None] = Field(None, description="Array item schema(s)")
    max_length: Optional[int] = Field(None, alias="maxLength")


class FieldDescriptor(BaseModel):
    """
    One entry of a storage template (fields.yml).

    Groups carry nested ``fields``. Top-level ``key:`` sections have no name
    and do not contribute a path segment.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str = Field(default="", description="Field name, dotted names allowed")
    key: Optional[str] = Field(None, description="Section key of a top-level template entry")
    type: str = Field(default="", description="Storage type, e.g. 'keyword', 'text', 'group'")
    object_type: str = Field(default="", description="Value type of an 'object' field")
    multi_fields: List["FieldDescriptor"] = Field(default_factory=list)
    fields: List["FieldDescriptor"] = Field(default_factory=list)


Schema.model_rebuild()
FieldDescriptor.model_rebuild()
