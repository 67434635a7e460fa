"""Data models shared by the schema engine, the indexer and the HTML generator."""

from pydantic import BaseModel, computed_field

OTHER_TAG = "other"


class FlattenedProperty(BaseModel):
    """One leaf row of a flattened schema, e.g. 'address.city' or 'items[0].sku'."""

    path: str
    prop_schema: dict  # resolved node; still a $ref node if it could not be followed
    required: bool


class Endpoint(BaseModel):
    """A single operation with its position in the table of contents."""

    path: str  # /pets/{petId}
    method: str  # as written in the document, usually lower-case
    operation: dict
    tag: str  # primary tag, or "other"
    ordinal: int  # 1-based within the tag group
    anchor_id: str  # endpoint-<tag>-<ordinal>

    @computed_field
    @property
    def summary(self) -> str:
        summary = self.operation.get("summary")
        if isinstance(summary, str) and summary:
            return summary
        return f"{self.method.upper()} {self.path}"


class TagGroup(BaseModel):
    """Endpoints sharing a primary tag, in document order."""

    tag: str
    endpoints: list[Endpoint] = []

    @computed_field
    @property
    def title(self) -> str:
        return "Other Endpoints" if self.tag == OTHER_TAG else self.tag
