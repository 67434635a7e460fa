"""Short, human-readable type labels for schema nodes."""

from markupsafe import Markup

from swagger_docs.schema.resolver import ref_name


def describe_type(schema) -> str:
    """Return a display label such as 'string (email)' or 'array of <code>Pet</code>'.

    Referenced schemas are labelled with their name as a Markup code span;
    every other label is plain text and gets escaped by the template.
    """
    if not isinstance(schema, dict):
        return "unknown"

    ref = schema.get("$ref")
    if isinstance(ref, str):
        return Markup("<code>%s</code>") % ref_name(ref)

    schema_type = _type_name(schema.get("type"))

    if schema_type == "array" and "items" in schema:
        return "array of " + describe_type(schema["items"])

    if schema_type == "object":
        return "object"

    fmt = schema.get("format")
    if fmt:
        return f"{schema_type or 'unknown'} ({fmt})"

    return schema_type or "unknown"


def _type_name(value) -> str | None:
    if isinstance(value, str):
        return value or None
    # OpenAPI 3.1 allows a list of types, e.g. ["string", "null"]
    if isinstance(value, list):
        names = [v for v in value if isinstance(v, str)]
        return " | ".join(names) or None
    return None
