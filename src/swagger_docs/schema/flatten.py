"""Flatten nested object/array schemas into dot/bracket leaf paths.

    {"address": {"type": "object", "properties": {"city": ...}}}
        -> address.city

    {"items": {"type": "array", "items": {"$ref": "#/.../LineItem"}}}
        -> items[0].sku, items[0].quantity
"""

import logging

from swagger_docs.parser.base import FlattenedProperty
from swagger_docs.schema.resolver import RefResolver

logger = logging.getLogger(__name__)


def flatten_schema(schema: dict, resolver: RefResolver) -> list[FlattenedProperty]:
    """Flatten a request/response body schema.

    Any schema with properties expands through them, whether or not it says
    ``type: object``; a top-level array of objects expands its item properties
    under a '[0]' prefix. Any other shape has no rows.
    """
    try:
        resolved, chain = resolver.deref(schema)
    except RecursionError as e:
        logger.warning("Cannot flatten schema: %s", e)
        return []
    if not isinstance(resolved, dict):
        return []

    if _has_properties(resolved):
        return _flatten(resolved["properties"], _required_set(resolved), resolver, "", chain, 1)

    if resolved.get("type") == "array":
        try:
            items, item_chain = resolver.deref(resolved.get("items"), chain)
        except RecursionError as e:
            logger.warning("Cannot flatten array items: %s", e)
            return []
        if _is_object_with_properties(items):
            return _flatten(items["properties"], _required_set(items), resolver, "[0]", item_chain, 1)

    return []


def flatten_properties(
    properties: dict,
    required,
    resolver: RefResolver,
    prefix: str = "",
) -> list[FlattenedProperty]:
    """Expand ``properties`` into leaf rows in declaration order, depth first.

    ``required`` is the property-name collection of this level only; nested
    objects use their own ``required`` list.
    """
    return _flatten(properties, _as_name_set(required), resolver, prefix, (), 1)


def _flatten(
    properties,
    required: set[str],
    resolver: RefResolver,
    prefix: str,
    chain: tuple[str, ...],
    depth: int,
) -> list[FlattenedProperty]:
    if not isinstance(properties, dict):
        return []

    rows: list[FlattenedProperty] = []
    for name, prop_schema in properties.items():
        path = f"{prefix}.{name}" if prefix else str(name)
        is_required = name in required
        if not isinstance(prop_schema, dict):
            prop_schema = {}

        try:
            resolver.check_depth(depth)
            resolved, prop_chain = resolver.deref(prop_schema, chain)
            nested = _expand(resolved, resolver, path, prop_chain, depth)
        except RecursionError as e:
            logger.warning("Not expanding '%s': %s", path, e)
            rows.append(FlattenedProperty(path=path, prop_schema=prop_schema, required=is_required))
            continue

        if nested is None:
            rows.append(FlattenedProperty(path=path, prop_schema=resolved, required=is_required))
        else:
            rows.extend(nested)
    return rows


def _expand(
    resolved: dict,
    resolver: RefResolver,
    path: str,
    chain: tuple[str, ...],
    depth: int,
) -> list[FlattenedProperty] | None:
    """Return the nested rows for an object or array-of-object property, None for a leaf."""
    if _is_object_with_properties(resolved):
        return _flatten(resolved["properties"], _required_set(resolved), resolver, path, chain, depth + 1)

    if resolved.get("type") == "array" and isinstance(resolved.get("items"), dict):
        items, item_chain = resolver.deref(resolved["items"], chain)
        if _is_object_with_properties(items):
            return _flatten(items["properties"], _required_set(items), resolver, f"{path}[0]", item_chain, depth + 1)

    return None


def _has_properties(schema) -> bool:
    return isinstance(schema, dict) and isinstance(schema.get("properties"), dict) and bool(schema["properties"])


def _is_object_with_properties(schema) -> bool:
    return _has_properties(schema) and schema.get("type") == "object"


def _required_set(schema: dict) -> set[str]:
    return _as_name_set(schema.get("required"))


def _as_name_set(required) -> set[str]:
    if isinstance(required, (list, tuple, set, frozenset)):
        return {r for r in required if isinstance(r, str)}
    return set()
