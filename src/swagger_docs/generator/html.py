"""HTML documentation generator: renders a whole document into one page."""

import json
import logging
from datetime import datetime
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from swagger_docs.generator.markdown import render_markdown
from swagger_docs.parser.base import Endpoint
from swagger_docs.parser.swagger import index_endpoints, operation_parameters, request_body, responses
from swagger_docs.schema.describe import describe_type
from swagger_docs.schema.examples import ExampleSynthesizer
from swagger_docs.schema.flatten import flatten_schema
from swagger_docs.schema.resolver import RefResolver, ref_name

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).parent.parent / "templates"

DEFAULT_TITLE = "API Documentation"
DEFAULT_DESCRIPTION = "Comprehensive API Reference Guide"


class HtmlGenerator:
    """Builds the documentation page for one OpenAPI/Swagger document per call."""

    def __init__(self, seed: int | None = None):
        self.seed = seed
        self.env = Environment(
            loader=FileSystemLoader(str(TEMPLATES_DIR)),
            autoescape=select_autoescape(["html", "j2"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def generate(self, document: dict) -> str:
        """Render ``document`` to a complete HTML page.

        Raises InvalidDocumentError when the document is not a mapping.
        """
        # a fresh resolver per call; nothing about the document outlives the render
        resolver = RefResolver(document)
        synthesizer = ExampleSynthesizer(resolver, seed=self.seed)

        info = document.get("info") if isinstance(document.get("info"), dict) else {}
        groups = index_endpoints(document)

        sections = []
        for group in groups:
            sections.append({
                "group": group,
                "endpoints": [
                    self._endpoint_view(document, endpoint, resolver, synthesizer)
                    for endpoint in group.endpoints
                ],
            })

        template = self.env.get_template("document.html.j2")
        html = template.render(
            title=info.get("title") or DEFAULT_TITLE,
            version=info.get("version"),
            description=render_markdown(info.get("description") or DEFAULT_DESCRIPTION),
            generated_at=datetime.now().strftime("%B %d, %Y %H:%M"),
            tags=_tag_names(document.get("tags")),
            groups=groups,
            sections=sections,
        )
        logger.info("Rendered %d endpoint groups", len(groups))
        return html

    def _endpoint_view(self, document, endpoint: Endpoint, resolver, synthesizer) -> dict:
        operation = endpoint.operation
        body = request_body(document, operation)
        if body is not None:
            body = _deref(body, resolver)

        return {
            "endpoint": endpoint,
            "method": endpoint.method.upper(),
            "method_class": f"method-{endpoint.method.lower()}",
            "summary": operation.get("summary"),
            "description": render_markdown(operation.get("description")),
            "parameters": [
                self._parameter_view(p, resolver)
                for p in operation_parameters(document, endpoint)
                if _parameter_location(p, resolver) not in ("body", "formData")
            ],
            "request_body": self._body_view(body, resolver, synthesizer) if isinstance(body, dict) else None,
            "responses": [
                self._response_view(status, resp, resolver, synthesizer)
                for status, resp in responses(document, operation).items()
            ],
        }

    def _parameter_view(self, param: dict, resolver: RefResolver) -> dict:
        param = _deref(param, resolver)
        schema = param.get("schema") if isinstance(param.get("schema"), dict) else param
        type_label = describe_type(schema)
        if type_label == "unknown":
            type_label = "string"
        ref = param.get("$ref")
        return {
            "name": param.get("name") or (ref_name(ref) if isinstance(ref, str) else "-"),
            "location": param.get("in") or "unknown",
            "required": bool(param.get("required")),
            "type": type_label,
            "description": render_markdown(param.get("description")) or "-",
        }

    def _body_view(self, body: dict, resolver, synthesizer) -> dict:
        required = body.get("required")
        return {
            "description": render_markdown(body.get("description")),
            "required": None if required is None else bool(required),
            **self._content_view(body.get("content"), resolver, synthesizer),
        }

    def _response_view(self, status: str, response: dict, resolver, synthesizer) -> dict:
        response = _deref(response, resolver)
        return {
            "status": status,
            "description": render_markdown(response.get("description")) or "No description",
            **self._content_view(response.get("content"), resolver, synthesizer),
        }

    def _content_view(self, content, resolver, synthesizer) -> dict:
        if not isinstance(content, dict):
            return {"content_types": [], "media": []}

        media = []
        for content_type, media_type in content.items():
            if not isinstance(media_type, dict):
                continue
            schema = media_type.get("schema")
            rows = [
                {
                    "path": row.path,
                    "type": describe_type(row.prop_schema),
                    "required": row.required,
                    "description": render_markdown(row.prop_schema.get("description")) or "-",
                }
                for row in (flatten_schema(schema, resolver) if isinstance(schema, dict) else [])
            ]
            example = _document_example(media_type)
            if example is None and isinstance(schema, dict):
                example = synthesizer.synthesize(schema)
            media.append({
                "content_type": content_type,
                "rows": rows,
                "example": format_example(example) if example is not None else None,
                "language": "json" if "json" in content_type else "text",
            })
        return {"content_types": list(content), "media": media}


def _document_example(media_type: dict):
    if media_type.get("example") is not None:
        return media_type["example"]
    examples = media_type.get("examples")
    if isinstance(examples, dict):
        for named in examples.values():
            if isinstance(named, dict) and named.get("value") is not None:
                return named["value"]
    return None


def format_example(example) -> str:
    """Pretty-print an example the way it is shown in the page."""
    if isinstance(example, (dict, list)):
        return json.dumps(example, indent=2, ensure_ascii=False, default=str)
    return str(example)


def _deref(node, resolver: RefResolver) -> dict:
    """Follow a parameter/response/body $ref; unusable targets become {}."""
    try:
        node, _ = resolver.deref(node)
    except RecursionError as e:
        logger.warning("Cannot resolve %s: %s", node.get("$ref"), e)
    return node if isinstance(node, dict) else {}


def _parameter_location(param, resolver: RefResolver):
    return _deref(param, resolver).get("in")


def _tag_names(tags) -> list[str]:
    if not isinstance(tags, list):
        return []
    names = []
    for tag in tags:
        name = tag.get("name") if isinstance(tag, dict) else tag
        if name:
            names.append(str(name))
    return names
