"""
Target schemas and cache-defeating schema mutations.
"""

from .definitions import (
    DescribedSchema,
    SchemaModel,
    ALL_SCHEMAS,
    COMPLEX_SCHEMA,
    WIDE_SCHEMA,
    SUPER_COMPLEX_SCHEMA,
    get_schema,
    list_schemas,
)

from .mutation import (
    CacheBuster,
    CACHE_BUSTERS,
    inject_unique_field,
    randomize_description,
    get_cache_buster,
)

__all__ = [
    # Definitions
    "DescribedSchema",
    "SchemaModel",
    "ALL_SCHEMAS",
    "COMPLEX_SCHEMA",
    "WIDE_SCHEMA",
    "SUPER_COMPLEX_SCHEMA",
    "get_schema",
    "list_schemas",
    # Mutation
    "CacheBuster",
    "CACHE_BUSTERS",
    "inject_unique_field",
    "randomize_description",
    "get_cache_buster",
]
