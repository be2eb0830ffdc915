"""Record-level functions for callers that work with any translatable record."""
from typing import Any, List, Optional

from translatable.models.mixin import Translatable


def active_locale(record: Translatable) -> str:
    return record.active_locale()


def set_active_locale(record: Translatable, locale: str) -> str:
    """Switch ``record`` to ``locale``; returns the previous locale.

    Loaded relations named like a translatable attribute are expired so they
    reload under the new locale.
    """
    return record.set_active_locale(locale)


def get_translated_value(record: Translatable, attribute: str, locale: Optional[str] = None) -> Any:
    return record.get_attribute_translated(attribute, locale)


def set_translated_value(
    record: Translatable, attribute: str, value: Any, locale: Optional[str] = None
) -> Any:
    return record.set_attribute_translated(attribute, value, locale)


def is_translatable(record: Translatable, attribute: str) -> bool:
    return record.is_translatable(attribute)


def dirty_locales(record: Translatable) -> List[str]:
    return record.dirty_locales()


def is_dirty(record: Translatable, attribute: Optional[str] = None, locale: Optional[str] = None) -> bool:
    return record.is_translate_dirty(attribute, locale)
