"""Detect which OpenAPI dialect a parsed document uses."""


def detect_version(document: dict) -> str:
    """Return 'openapi3', 'swagger2' or 'unknown'."""
    if not isinstance(document, dict):
        return "unknown"
    if str(document.get("openapi", "")).startswith("3"):
        return "openapi3"
    if str(document.get("swagger", "")).startswith("2"):
        return "swagger2"
    return "unknown"


def schema_definitions(document: dict) -> dict:
    """Return the named schemas: components.schemas (3.x) or definitions (2.0)."""
    version = detect_version(document)
    if version == "openapi3":
        components = document.get("components")
        schemas = components.get("schemas") if isinstance(components, dict) else None
    elif version == "swagger2":
        schemas = document.get("definitions")
    else:
        schemas = None
    return schemas if isinstance(schemas, dict) else {}


def definition_ref(document: dict, name: str) -> str:
    """Build the local $ref pointing at the named schema."""
    escaped = name.replace("~", "~0").replace("/", "~1")
    if detect_version(document) == "swagger2":
        return f"#/definitions/{escaped}"
    return f"#/components/schemas/{escaped}"
