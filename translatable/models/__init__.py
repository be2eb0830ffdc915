"""
Models package for translatable records.

Contains the two persisted translation tables, the attribute declarations and the
``Translatable`` mixin that record types inherit from.
"""

from .record_key import RecordKey
from .declaration import (
    TranslatableAttributeSpec,
    ResolvedTranslatableSpec,
    resolve_translatable_spec,
)
from .translation_attribute import TranslationAttribute
from .translation_index import TranslationIndex
from .mixin import Translatable

__all__ = [
    "RecordKey",
    "TranslatableAttributeSpec",
    "ResolvedTranslatableSpec",
    "resolve_translatable_spec",
    "TranslationAttribute",
    "TranslationIndex",
    "Translatable",
]
