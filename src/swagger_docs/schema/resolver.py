"""Local $ref resolution against a single OpenAPI/Swagger document.

A RefResolver is built once per rendering pass and handed to every
component that needs to follow references, so two documents rendered
side by side never share resolution state.
"""

from typing import Any

from swagger_docs.config import MAX_SCHEMA_DEPTH


class InvalidDocumentError(ValueError):
    """The document root is not a mapping and cannot be rendered."""


class ReferenceCycleError(RecursionError):
    """A $ref chain leads back to a reference already being resolved."""

    def __init__(self, ref: str, chain: tuple[str, ...]):
        self.ref = ref
        self.chain = chain
        super().__init__(f"Reference cycle: {' -> '.join(chain + (ref,))}")


class SchemaDepthError(RecursionError):
    """Schema nesting exceeded the configured depth limit."""

    def __init__(self, depth: int, limit: int):
        self.depth = depth
        self.limit = limit
        super().__init__(f"Schema nesting depth {depth} exceeds limit {limit}")


def _unescape(token: str) -> str:
    # RFC 6901: ~1 before ~0
    return token.replace("~1", "/").replace("~0", "~")


def ref_name(ref: str) -> str:
    """Return the last segment of a reference, e.g. 'Pet' for '#/components/schemas/Pet'."""
    return _unescape(ref.rstrip("/").split("/")[-1])


class RefResolver:
    """Resolves same-document JSON pointers like '#/components/schemas/Pet'."""

    def __init__(self, document: Any, max_depth: int = MAX_SCHEMA_DEPTH):
        if not isinstance(document, dict):
            raise InvalidDocumentError(
                f"Document root must be a mapping, got {type(document).__name__}"
            )
        self.document = document
        self.max_depth = max_depth

    def resolve(self, ref: Any) -> Any | None:
        """Look up a local reference. Returns None when it cannot be followed."""
        if not isinstance(ref, str) or not ref.startswith("#/"):
            return None

        current: Any = self.document
        for segment in ref[2:].split("/"):
            key = _unescape(segment)
            if not isinstance(current, dict) or key not in current:
                return None
            current = current[key]
        return current

    def deref(self, node: Any, chain: tuple[str, ...] = ()) -> tuple[Any, tuple[str, ...]]:
        """Follow ``node``'s $ref (and any chained $ref) to a concrete schema.

        ``chain`` holds the references already being resolved on the current
        walk; the returned chain extends it with every reference followed
        here. A missing or non-mapping target leaves the $ref node itself
        as the result, which callers treat as an opaque schema.

        Raises ReferenceCycleError when a reference in ``chain`` comes up
        again and SchemaDepthError when the chain outgrows ``max_depth``.
        """
        while isinstance(node, dict) and isinstance(node.get("$ref"), str):
            ref = node["$ref"]
            if ref in chain:
                raise ReferenceCycleError(ref, chain)
            self.check_depth(len(chain) + 1)

            target = self.resolve(ref)
            if not isinstance(target, dict):
                return node, chain
            node = target
            chain = chain + (ref,)
        return node, chain

    def check_depth(self, depth: int) -> None:
        if depth > self.max_depth:
            raise SchemaDepthError(depth, self.max_depth)
