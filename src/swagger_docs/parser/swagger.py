"""OpenAPI / Swagger document loading and endpoint indexing.

Handles OpenAPI 3.x and Swagger 2.0 documents. Endpoints are grouped by
their primary tag and numbered so the table of contents and the endpoint
bodies link to the same anchors.
"""

import logging
from pathlib import Path

import yaml

from .base import OTHER_TAG, Endpoint, TagGroup
from .detect import detect_version
from swagger_docs.schema.resolver import InvalidDocumentError, RefResolver

logger = logging.getLogger(__name__)

HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")

DEFAULT_MEDIA_TYPE = "application/json"


def load_document(file_path: Path) -> dict:
    """Parse an OpenAPI/Swagger file (YAML or JSON) into a mapping."""
    text = file_path.read_text(encoding="utf-8")
    try:
        doc = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise InvalidDocumentError(f"Cannot parse {file_path}: {e}") from e

    if not isinstance(doc, dict):
        raise InvalidDocumentError(f"{file_path} does not contain an OpenAPI/Swagger object")
    return doc


def index_endpoints(document: dict) -> list[TagGroup]:
    """Group operations by primary tag and assign ordinals and anchor ids.

    Traversal follows document order: paths, then methods within each path.
    Operations without tags (or tagged "other") share the trailing "other"
    group.
    """
    paths = document.get("paths") if isinstance(document, dict) else None
    if not isinstance(paths, dict):
        return []

    grouped: dict[str, list[tuple[str, str, dict]]] = {}
    for path, methods in paths.items():
        if not isinstance(methods, dict):
            continue
        for method, operation in methods.items():
            if str(method).lower() not in HTTP_METHODS or not isinstance(operation, dict):
                continue
            grouped.setdefault(_primary_tag(operation), []).append((str(path), str(method), operation))

    # untagged endpoints go last
    order = [tag for tag in grouped if tag != OTHER_TAG]
    if OTHER_TAG in grouped:
        order.append(OTHER_TAG)

    groups = []
    for tag in order:
        endpoints = [
            Endpoint(
                path=path,
                method=method,
                operation=operation,
                tag=tag,
                ordinal=index + 1,
                anchor_id=f"endpoint-{tag}-{index + 1}",
            )
            for index, (path, method, operation) in enumerate(grouped[tag])
        ]
        groups.append(TagGroup(tag=tag, endpoints=endpoints))

    logger.debug("Indexed %d endpoints in %d groups", sum(len(g.endpoints) for g in groups), len(groups))
    return groups


def _primary_tag(operation: dict) -> str:
    tags = operation.get("tags")
    if isinstance(tags, list) and tags and tags[0] not in (None, ""):
        return str(tags[0])
    return OTHER_TAG


def operation_parameters(document: dict, endpoint: Endpoint) -> list[dict]:
    """Path-level parameters followed by the operation's own, later ones overriding by (name, in)."""
    path_item = document.get("paths", {}).get(endpoint.path, {})
    resolver = RefResolver(document)
    merged: dict[tuple, dict] = {}
    for params in (path_item.get("parameters"), endpoint.operation.get("parameters")):
        if not isinstance(params, list):
            continue
        for p in params:
            if isinstance(p, dict):
                target = _follow(p, resolver)
                merged[(target.get("name"), target.get("in"), target.get("$ref"))] = p
    return list(merged.values())


def request_body(document: dict, operation: dict) -> dict | None:
    """Return the operation's request body in OpenAPI 3 shape.

    Swagger 2.0 ``in: body`` / ``in: formData`` parameters are folded into a
    ``{"description", "required", "content": {media: {"schema"}}}`` mapping.
    """
    if detect_version(document) != "swagger2":
        body = operation.get("requestBody")
        return body if isinstance(body, dict) else None

    resolver = RefResolver(document)
    params = [_follow(p, resolver) for p in operation.get("parameters") or [] if isinstance(p, dict)]
    consumes = operation.get("consumes") or document.get("consumes") or [DEFAULT_MEDIA_TYPE]

    body_param = next((p for p in params if p.get("in") == "body"), None)
    if body_param:
        return {
            "description": body_param.get("description"),
            "required": body_param.get("required", False),
            "content": {media: {"schema": body_param.get("schema", {})} for media in consumes},
        }

    form_params = [p for p in params if p.get("in") == "formData"]
    if form_params:
        schema = {
            "type": "object",
            "properties": {p.get("name"): _inline_schema(p) for p in form_params},
            "required": [p.get("name") for p in form_params if p.get("required")],
        }
        return {"content": {media: {"schema": schema} for media in consumes}}
    return None


def responses(document: dict, operation: dict) -> dict:
    """Return responses keyed by status, each with OpenAPI 3 style ``content``."""
    raw = operation.get("responses")
    if not isinstance(raw, dict):
        return {}
    if detect_version(document) != "swagger2":
        return {str(status): resp for status, resp in raw.items() if isinstance(resp, dict)}

    produces = operation.get("produces") or document.get("produces") or [DEFAULT_MEDIA_TYPE]
    resolver = RefResolver(document)
    result = {}
    for status, resp in raw.items():
        if not isinstance(resp, dict):
            continue
        resp = _follow(resp, resolver)
        converted = {"description": resp.get("description", "")}
        if "schema" in resp:
            examples = resp.get("examples") if isinstance(resp.get("examples"), dict) else {}
            converted["content"] = {
                media: {"schema": resp["schema"], **({"example": examples[media]} if media in examples else {})}
                for media in produces
            }
        result[str(status)] = converted
    return result


def _inline_schema(param: dict) -> dict:
    """Swagger 2.0 non-body parameters carry their schema fields inline."""
    if isinstance(param.get("schema"), dict):
        return param["schema"]
    keys = ("type", "format", "items", "enum", "minimum", "maximum", "example", "description")
    return {k: param[k] for k in keys if k in param}


def _follow(node: dict, resolver: RefResolver) -> dict:
    """Follow a parameter/response $ref; the node itself when it leads nowhere usable."""
    try:
        target, _ = resolver.deref(node)
    except RecursionError as e:
        logger.warning("Cannot resolve %s: %s", node.get("$ref"), e)
        return node
    return target if isinstance(target, dict) else node
