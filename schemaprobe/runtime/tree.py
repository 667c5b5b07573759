"""
schemaprobe Tree Walker

Dotted-path addressing over JSON-native trees: objects (dict), arrays (list)
and scalars. Array indices never appear in a path; a path such as
``transactions.spans.name`` matches the ``name`` key inside every element of
every ``spans`` array of every ``transactions`` element.

Every public operation returns a new tree. Callers can keep the tree they
passed in.
"""

import copy
import logging
from enum import Enum
from typing import Any, Callable, Dict, Set, Tuple

logger = logging.getLogger(__name__)

SCALAR_TYPES = (str, int, float, bool, type(None))


class NodeKind(Enum):
    OBJECT = "object"
    ARRAY = "array"
    SCALAR = "scalar"


class Operation(Enum):
    UPSERT = "upsert"
    DELETE = "delete"


def node_kind(node: Any) -> NodeKind:
    """Classify a tree node. Anything that is not JSON-native is rejected."""
    if isinstance(node, dict):
        return NodeKind.OBJECT
    if isinstance(node, list):
        return NodeKind.ARRAY
    if isinstance(node, SCALAR_TYPES):
        return NodeKind.SCALAR
    raise TypeError(f"Unsupported tree node type: {type(node).__name__}")


def str_concat(prefix: str, key: str, sep: str = ".") -> str:
    if prefix == "":
        return key
    return f"{prefix}{sep}{key}"


def split_key(path: str) -> Tuple[str, str]:
    """Split a dotted path into (parent, leaf). Root-level keys have parent ''."""
    idx = path.rfind(".")
    if idx == -1:
        return "", path
    return path[:idx], path[idx + 1:]


def flatten_json_keys(data: Any, prefix: str = "") -> Set[str]:
    """
    Collect the dotted path of every key in the tree.

    Container keys are included alongside their children, so
    {"a": {"b": 1}} flattens to {"a", "a.b"}.
    """
    flattened: Set[str] = set()
    _flatten_into(data, prefix, flattened)
    return flattened


def _flatten_into(data: Any, prefix: str, flattened: Set[str]):
    kind = node_kind(data)
    if kind is NodeKind.OBJECT:
        for key, value in data.items():
            path = str_concat(prefix, key)
            flattened.add(path)
            _flatten_into(value, path, flattened)
    elif kind is NodeKind.ARRAY:
        for item in data:
            _flatten_into(item, prefix, flattened)


KeyFn = Callable[[Dict[str, Any], str, Any], None]


def _upsert_key(obj: Dict[str, Any], key: str, value: Any):
    # each occurrence gets its own copy
    obj[key] = copy.deepcopy(value)


def _delete_key(obj: Dict[str, Any], key: str, _value: Any):
    obj.pop(key, None)


_KEY_FNS: Dict[Operation, KeyFn] = {
    Operation.UPSERT: _upsert_key,
    Operation.DELETE: _delete_key,
}


def _apply(node: Any, key: str, value: Any, fn: KeyFn) -> Any:
    """Apply fn to an object, or to every object held (at any depth) by an array."""
    kind = node_kind(node)
    if kind is NodeKind.OBJECT:
        fn(node, key, value)
    elif kind is NodeKind.ARRAY:
        for item in node:
            _apply(item, key, value, fn)
    return node


def _iterate(node: Any, prefix: str, parent: str, leaf: str, value: Any, fn: KeyFn) -> Any:
    kind = node_kind(node)

    if kind is NodeKind.OBJECT:
        for key in list(node):
            path = str_concat(prefix, key)
            child = _iterate(node[key], path, parent, leaf, value, fn)
            if path == parent:
                child = _apply(child, leaf, value, fn)
            node[key] = child

        # Root-level target: applied after the descent so the written value
        # is not walked again.
        if prefix == "" and parent == "":
            fn(node, leaf, value)

        # Objects left empty by their own descent collapse to null
        if node:
            return node
        return None

    if kind is NodeKind.ARRAY:
        reassembled = []
        for item in node:
            result = _iterate(item, prefix, parent, leaf, value, fn)
            if result is not None:
                reassembled.append(result)
        return reassembled

    return node


def mutate(tree: Any, path: str, value: Any = None,
           operation: Operation = Operation.UPSERT) -> Any:
    """
    Upsert or delete ``path`` at every place it occurs in ``tree``.

    Args:
        tree: JSON-native tree; it is deep-copied, never modified
        path: dotted path of the key to change
        value: value written by an upsert (ignored by delete)
        operation: Operation.UPSERT or Operation.DELETE (or their string values)

    Returns:
        The mutated copy. An upsert whose parent path never occurs is a no-op.
        Objects that come out of the walk empty are replaced by None, and
        arrays drop elements that come back empty or null. The root object
        itself is kept, even when empty.

    Keys that themselves contain a dot cannot be addressed: ``{"a.b": 1}``
    flattens to ``a.b``, but that path is split into parent ``a`` and leaf
    ``b``, so mutating it leaves the key untouched.
    """
    operation = Operation(operation)
    parent, leaf = split_key(path)
    logger.debug("%s %s", operation.value, path)

    result = _iterate(copy.deepcopy(tree), "", parent, leaf, value, _KEY_FNS[operation])
    if result is None and node_kind(tree) is NodeKind.OBJECT:
        return {}
    return result


def upsert(tree: Any, path: str, value: Any) -> Any:
    return mutate(tree, path, value, Operation.UPSERT)


def delete(tree: Any, path: str) -> Any:
    return mutate(tree, path, None, Operation.DELETE)
