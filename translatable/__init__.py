"""
Per-locale attribute overrides for SQLAlchemy records.

A record keeps its default-locale values in its own row; other locales are
stored as diff-only JSON blobs plus optional scalar index rows that make
translated fields filterable and sortable.
"""

from translatable.api import (
    active_locale,
    set_active_locale,
    get_translated_value,
    set_translated_value,
    is_translatable,
    dirty_locales,
    is_dirty,
)
from translatable.core.exceptions import (
    ErrorCode,
    TranslatableError,
    TranslatableConfigurationError,
    UnsupportedIndexValueError,
    UnsupportedOperatorError,
    DetachedRecordError,
)
from translatable.core.locale import LocaleService, Translator, get_translator, set_translator
from translatable.models import (
    RecordKey,
    Translatable,
    TranslatableAttributeSpec,
    TranslationAttribute,
    TranslationIndex,
)
from translatable.services.query import (
    filter_by_translated_index,
    filter_by_translated_index_no_fallback,
    order_by_translated_index,
    eager_load_translations,
)
from translatable.services.sync_engine import (
    SyncEngine,
    register_sync_events,
    unregister_sync_events,
)

__version__ = "1.0.0"

__all__ = [
    "active_locale",
    "set_active_locale",
    "get_translated_value",
    "set_translated_value",
    "is_translatable",
    "dirty_locales",
    "is_dirty",
    "ErrorCode",
    "TranslatableError",
    "TranslatableConfigurationError",
    "UnsupportedIndexValueError",
    "UnsupportedOperatorError",
    "DetachedRecordError",
    "LocaleService",
    "Translator",
    "get_translator",
    "set_translator",
    "RecordKey",
    "Translatable",
    "TranslatableAttributeSpec",
    "TranslationAttribute",
    "TranslationIndex",
    "filter_by_translated_index",
    "filter_by_translated_index_no_fallback",
    "order_by_translated_index",
    "eager_load_translations",
    "SyncEngine",
    "register_sync_events",
    "unregister_sync_events",
]
