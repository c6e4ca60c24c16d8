"""
Schema module for Entity Intelligence.

Provides the JSON-LD document builder.
"""

from entity_intel.schema.builder import SchemaBuilder, entity_to_thing

__all__ = [
    "SchemaBuilder",
    "entity_to_thing",
]
