"""Runtime settings, overridable through environment variables."""

import os

MAX_DOCUMENT_SIZE = int(os.getenv("SWAGGER_DOCS_MAX_SIZE", str(5 * 1024 * 1024)))
FETCH_TIMEOUT = float(os.getenv("SWAGGER_DOCS_FETCH_TIMEOUT", "10"))
USER_AGENT = os.getenv("SWAGGER_DOCS_USER_AGENT", "Swagger-PDF-Generator/1.0")

# Longest $ref chain followed within one schema walk
MAX_SCHEMA_DEPTH = int(os.getenv("SWAGGER_DOCS_MAX_DEPTH", "64"))

LOG_LEVEL = os.getenv("SWAGGER_DOCS_LOG_LEVEL", "WARNING")
