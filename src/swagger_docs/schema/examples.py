"""Example value synthesis for schemas that carry no author-supplied example.

Literal ``example`` and ``enum`` values and numeric bounds are honoured as
written; everything else is filled in with Faker data chosen by ``format``
or by keywords found in the property name.
"""

import logging
import math
import string
from datetime import timezone

from faker import Faker

from swagger_docs.schema.resolver import RefResolver

logger = logging.getLogger(__name__)

DEFAULT_ARRAY_SIZE = 3
MAX_ARRAY_SIZE = 5

_ALPHANUMERIC = string.ascii_letters + string.digits


def _alphanumeric(fake: Faker, length: int) -> str:
    return fake.lexify("?" * length, letters=_ALPHANUMERIC)


def _person_name(fake: Faker, name: str) -> str:
    if "first" in name:
        return fake.first_name()
    if "last" in name:
        return fake.last_name()
    if "full" in name:
        return fake.name()
    if "user" in name:
        return fake.user_name()
    return fake.name()


STRING_FORMATS = {
    "email": lambda fake: fake.email(),
    "date": lambda fake: fake.past_date().isoformat(),
    "date-time": lambda fake: fake.date_time_between(
        start_date="-1d", end_date="now", tzinfo=timezone.utc
    ).isoformat(),
    "uuid": lambda fake: fake.uuid4(),
    "uri": lambda fake: fake.url(),
    "url": lambda fake: fake.url(),
    "ipv4": lambda fake: fake.ipv4(),
    "ipv6": lambda fake: fake.ipv6(),
    "phone": lambda fake: fake.phone_number(),
}

# Checked in order against the lower-cased property name; first hit wins.
STRING_NAME_RULES = [
    (("name", "title"), _person_name),
    (("email",), lambda fake, name: fake.email()),
    (("phone", "mobile"), lambda fake, name: fake.phone_number()),
    (("address", "street"), lambda fake, name: fake.street_address()),
    (("city",), lambda fake, name: fake.city()),
    (("country",), lambda fake, name: fake.country()),
    (("zip", "postal"), lambda fake, name: fake.postcode()),
    (("company",), lambda fake, name: fake.company()),
    (("job", "position"), lambda fake, name: fake.job()),
    (("description", "bio"), lambda fake, name: fake.paragraph()),
    (("comment", "note"), lambda fake, name: fake.sentence()),
    (("url", "link"), lambda fake, name: fake.url()),
    (("avatar", "image"), lambda fake, name: fake.image_url()),
    (("password",), lambda fake, name: fake.password()),
    (("token", "key"), lambda fake, name: _alphanumeric(fake, 32)),
    (("id",), lambda fake, name: _alphanumeric(fake, 8)),
]

NUMBER_NAME_RULES = [
    (("age",), lambda fake: fake.random_int(min=18, max=80)),
    (("price", "cost", "amount"), lambda fake: round(fake.pyfloat(min_value=1, max_value=1000), 2)),
    (("rating", "score"), lambda fake: fake.random_int(min=1, max=5)),
    (("count", "total"), lambda fake: fake.random_int(min=0, max=100)),
]


def match_rule(rules, property_name: str | None):
    """Return the generator of the first rule whose keywords occur in ``property_name``."""
    if not property_name:
        return None
    name = property_name.lower()
    for keywords, generator in rules:
        if any(keyword in name for keyword in keywords):
            return generator
    return None


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _has_example(schema: dict) -> bool:
    return schema.get("example") is not None


class ExampleSynthesizer:
    """Builds representative values for schema nodes of one document."""

    def __init__(self, resolver: RefResolver, seed: int | None = None):
        self.resolver = resolver
        self.fake = Faker()
        if seed is not None:
            self.fake.seed_instance(seed)

    def synthesize(self, schema, property_name: str | None = None):
        """Return an example value for ``schema``, or None when no shape is known."""
        return self._synthesize(schema, property_name, (), 1)

    def _synthesize(self, schema, property_name, chain: tuple[str, ...], depth: int):
        if not isinstance(schema, dict):
            return None

        try:
            self.resolver.check_depth(depth)
            resolved, chain = self.resolver.deref(schema, chain)
        except RecursionError as e:
            logger.warning("No example for %s: %s", property_name or "schema", e)
            return None
        if "$ref" in resolved:
            return None

        schema_type = resolved.get("type")
        if schema_type == "string":
            return self._string(resolved, property_name)
        if schema_type in ("number", "integer"):
            return self._number(resolved, property_name)
        if schema_type == "boolean":
            return resolved["example"] if _has_example(resolved) else self.fake.pybool()
        if schema_type == "array":
            return self._array(resolved, property_name, chain, depth)
        if schema_type == "object":
            return self._object(resolved, chain, depth)
        return None

    def _string(self, schema: dict, property_name: str | None):
        if _has_example(schema):
            return schema["example"]

        enum = schema.get("enum")
        if isinstance(enum, list) and enum:
            return enum[0]

        fmt = schema.get("format")
        generator = STRING_FORMATS.get(fmt) if isinstance(fmt, str) else None
        if generator:
            return generator(self.fake)

        generator = match_rule(STRING_NAME_RULES, property_name)
        if generator:
            return generator(self.fake, property_name.lower())

        return self.fake.sentence()

    def _number(self, schema: dict, property_name: str | None):
        if _has_example(schema):
            return schema["example"]

        generator = match_rule(NUMBER_NAME_RULES, property_name)
        if generator:
            return generator(self.fake)

        minimum = schema.get("minimum")
        maximum = schema.get("maximum")
        if _is_number(minimum) and _is_number(maximum):
            return self._int_between(minimum, maximum)
        if _is_number(minimum):
            return self._int_between(minimum, minimum + 100)
        return self.fake.random_int(min=1, max=100)

    def _int_between(self, low, high):
        low_int, high_int = math.ceil(low), math.floor(high)
        if low_int > high_int:
            # no integer inside the bounds
            return low
        return self.fake.random_int(min=low_int, max=high_int)

    def _array(self, schema: dict, property_name, chain, depth):
        if _has_example(schema):
            return schema["example"]
        if "items" not in schema:
            return []

        item = self._synthesize(schema["items"], property_name, chain, depth + 1)
        size = schema.get("minItems") or schema.get("maxItems") or DEFAULT_ARRAY_SIZE
        if not _is_number(size):
            size = DEFAULT_ARRAY_SIZE
        size = max(0, min(int(size), MAX_ARRAY_SIZE))
        return [item for _ in range(size)]

    def _object(self, schema: dict, chain, depth):
        if _has_example(schema):
            return schema["example"]

        properties = schema.get("properties")
        if not isinstance(properties, dict):
            return {}
        return {
            name: self._synthesize(prop_schema, str(name), chain, depth + 1)
            for name, prop_schema in properties.items()
        }
