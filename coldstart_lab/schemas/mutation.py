"""
Schema mutations that defeat server-side schema and response caching.

Each strategy derives a new schema that no previous request has used, so the
first request with it takes the cold path. Both requests of a cold/warm pair
must be sent with the same mutated schema.
"""

import re
import secrets
import time
from dataclasses import replace
from typing import Callable

from pydantic import create_model
from pydantic.fields import FieldInfo

from .definitions import DescribedSchema

CacheBuster = Callable[[DescribedSchema, str], DescribedSchema]


def _slug(tag: str) -> str:
    return re.sub(r"[^0-9a-zA-Z]+", "_", tag).strip("_").lower()


def inject_unique_field(schema: DescribedSchema, tag: str) -> DescribedSchema:
    """Extend the schema with an extra required number field.

    The field name combines a millisecond timestamp, the tag and a random
    suffix; collisions are assumed not to happen.
    """
    field_name = f"nonce_{int(time.time() * 1000)}_{_slug(tag)}_{secrets.token_hex(3)}"
    model = create_model(
        f"{schema.model.__name__}Cold",
        __base__=schema.model,
        **{field_name: (float, ...)},
    )
    return replace(schema, model=model)


def randomize_description(schema: DescribedSchema, tag: str) -> DescribedSchema:
    """Re-declare the first field with a random description token.

    The field keeps its type, default, alias and constraints.
    """
    first_name, first_field = next(iter(schema.model.model_fields.items()))
    token = f"{_slug(tag)}_{secrets.token_hex(4)}"
    description = f"{first_field.description or first_name} ({token})"
    field_info = FieldInfo.merge_field_infos(first_field, description=description)
    model = create_model(
        f"{schema.model.__name__}Cold",
        __base__=schema.model,
        **{first_name: (first_field.annotation, field_info)},
    )
    return replace(schema, model=model)


CACHE_BUSTERS: dict[str, CacheBuster] = {
    "unique-field": inject_unique_field,
    "random-description": randomize_description,
}


def get_cache_buster(name: str) -> CacheBuster:
    """Look up a cache-defeat strategy by name."""
    if name not in CACHE_BUSTERS:
        raise ValueError(f"Unknown cache buster: {name} (choose from {', '.join(CACHE_BUSTERS)})")
    return CACHE_BUSTERS[name]
