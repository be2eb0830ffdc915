"""
Per-locale overlay maps for one record instance.

Each locale moves through ``UNLOADED -> LOADED (clean) -> LOADED (dirty) ->
FLUSHED (clean)``. A locale is loaded lazily through the ``loader`` callable
the first time it is read or written; the loaded map is copied into an
immutable-by-convention snapshot that serves as the dirty-diff baseline.
Locales that start without a snapshot (the record had no identity yet) are
dirty as soon as their map is non-empty.
"""

import copy
from typing import Any, Callable, Dict, List, Mapping, Optional

from translatable.core.paths import get_path, set_path

OverlayMap = Dict[str, Any]
Loader = Callable[[str], Optional[OverlayMap]]


class OverlayStore:
    """In-memory translated values keyed by locale."""

    def __init__(self, loader: Loader):
        # loader(locale) returns the persisted map, or None when the record
        # has no durable identity yet (no snapshot is taken then)
        self._loader = loader
        self._attributes: Dict[str, OverlayMap] = {}
        self._originals: Dict[str, OverlayMap] = {}
        self._materialized: Dict[str, OverlayMap] = {}
        self._all_materialized = False

    # -- loading ---------------------------------------------------------

    def is_loaded(self, locale: str) -> bool:
        return locale in self._attributes

    def load(self, locale: str) -> OverlayMap:
        """(Re)load ``locale``, preferring prefetched data over the loader."""
        if locale in self._materialized:
            data = self._materialized.pop(locale)
        elif self._all_materialized:
            data = {}
        else:
            data = self._loader(locale)
            if data is None:
                self._attributes[locale] = {}
                return self._attributes[locale]

        self._attributes[locale] = copy.deepcopy(data)
        self._originals[locale] = copy.deepcopy(data)
        return self._attributes[locale]

    def materialize(self, translations: Mapping[str, OverlayMap], complete: bool = False) -> None:
        """Stash prefetched maps for locales that are not loaded yet.

        ``complete`` states that ``translations`` holds every persisted locale,
        so any other locale is known to be empty.
        """
        for locale, data in translations.items():
            if locale not in self._attributes:
                self._materialized[locale] = dict(data)
        if complete:
            self._all_materialized = True

    def ensure(self, locale: str) -> OverlayMap:
        if locale not in self._attributes:
            return self.load(locale)
        return self._attributes[locale]

    # -- access ----------------------------------------------------------

    def get(self, locale: str, attribute: str, default: Any = None) -> Any:
        return get_path(self.ensure(locale), attribute, default)

    def set(self, locale: str, attribute: str, value: Any) -> Any:
        return set_path(self.ensure(locale), attribute, value)

    def merge(self, locale: str, values: Mapping[str, Any]) -> None:
        self.ensure(locale).update(values)

    def attributes(self, locale: str) -> OverlayMap:
        return self.ensure(locale)

    def locales(self) -> List[str]:
        """Loaded locales in first-access order."""
        return list(self._attributes)

    def originals(self, locale: Optional[str] = None):
        if locale is None:
            return self._originals
        return self._originals.get(locale)

    # -- dirty tracking --------------------------------------------------

    def dirty(self, locale: str) -> OverlayMap:
        if locale not in self._attributes:
            return {}

        current = self._attributes[locale]
        if locale not in self._originals:
            return dict(current)

        original = self._originals[locale]
        return {
            key: value
            for key, value in current.items()
            if key not in original or original[key] != value
        }

    def is_dirty(self, locale: str, attribute: Optional[str] = None) -> bool:
        dirty = self.dirty(locale)
        if attribute is None:
            return len(dirty) > 0
        return attribute in dirty

    def dirty_locales(self) -> List[str]:
        return [locale for locale in self._attributes if self.is_dirty(locale)]

    def mark_flushed(self, locale: str, stored: Optional[OverlayMap] = None) -> None:
        """The map was persisted; it becomes the new baseline.

        ``stored`` is the map as it was written, when the live map may have
        changed since.
        """
        source = self._attributes[locale] if stored is None else stored
        self._originals[locale] = copy.deepcopy(source)
