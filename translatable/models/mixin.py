"""
Translatable model mixin.

Usage::

    class Country(Translatable, Base):
        __tablename__ = "countries"
        __translatable__ = [("name", {"index": True}), ("states", {"jsonable": True})]

        id = Column(Integer, primary_key=True)
        name = Column(String(255))
        states = Column(Text)

    country.lang("fr").set_attribute("name", "La France")

Mapped columns always hold default-locale values. Under any other locale,
``get_attribute``/``set_attribute`` route translatable names through the
record's overlay store; everything else goes straight to the mapped columns.
Overlays are written to the translation tables by the sync engine when the
session flushes (see ``translatable.services.sync_engine``).
"""

import copy
import json
from collections.abc import Mapping, MutableMapping, MutableSequence
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import object_session
from sqlalchemy.orm.attributes import flag_dirty

from translatable.config.settings import get_settings
from translatable.core.exceptions import DetachedRecordError, TranslatableConfigurationError
from translatable.core.locale import LocaleContext, LocaleService, get_translator
from translatable.core.overlay import OverlayStore
from translatable.core.paths import get_path, root_name, set_path, split_path
from translatable.core.values import has_value
from translatable.models.record_key import RecordKey
from translatable.models.declaration import ResolvedTranslatableSpec, resolve_translatable_spec

RESERVED_ATTRIBUTE = "translatable"


class _RecordAttributes(Mapping):
    """Read-only view of a record's mapped attributes (the default-locale values)."""

    def __init__(self, record):
        self._record = record
        self._keys = sa_inspect(type(record)).attrs.keys()

    def __getitem__(self, key):
        if key not in self._keys:
            raise KeyError(key)
        return getattr(self._record, key)

    def __iter__(self):
        return iter(self._keys)

    def __len__(self):
        return len(self._keys)


class TranslatableState:
    """Per-instance translation state: locale context, overlays, deferred stores."""

    def __init__(self, record: "Translatable"):
        self.context = LocaleContext.from_service(record.translatable_locale_service())
        self.overlay = OverlayStore(record._load_translatable_data)
        self.use_fallback = get_settings().fallback_enabled
        # locale -> action(engine); drained once the record has an identity
        self.pending: Dict[str, Callable[[Any], None]] = {}
        self.context.on_switch(lambda previous, new: record._reload_translatable_relations())


class Translatable:
    __translatable__ = ()
    # model_type override; the class name when unset
    __translatable_type__ = None
    __translatable_spec__ = ResolvedTranslatableSpec()

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        cls.__translatable_spec__ = resolve_translatable_spec(
            cls.__translatable__, owner=cls.__name__
        )

    # -- type-level declaration -----------------------------------------

    @classmethod
    def translatable_locale_service(cls) -> LocaleService:
        return get_translator()

    @classmethod
    def translatable_model_type(cls) -> str:
        """Value stored in ``model_type`` columns for this record type."""
        return cls.__translatable_type__ or cls.__name__

    @classmethod
    def has_translatable_attributes(cls) -> bool:
        return bool(cls.__translatable_spec__)

    @classmethod
    def get_translatable_attributes(cls) -> List[str]:
        return list(cls.__translatable_spec__.names)

    @classmethod
    def get_translatable_attributes_with_options(cls) -> Dict[str, dict]:
        return {
            name: options.model_dump(exclude={"name"})
            for name, options in cls.__translatable_spec__.options.items()
        }

    # -- identity --------------------------------------------------------

    @property
    def translatable_state(self) -> TranslatableState:
        state = self.__dict__.get("_translatable_state")
        if state is None:
            state = TranslatableState(self)
            self.__dict__["_translatable_state"] = state
        return state

    def translatable_key(self) -> Optional[RecordKey]:
        """``(model_type, model_id)``, or ``None`` before the row exists."""
        state = sa_inspect(self)
        if not state.has_identity:
            return None
        identity = state.identity
        if len(identity) != 1:
            raise TranslatableConfigurationError(
                f"{type(self).__name__} has a composite primary key; translatable records need a single key",
                details={"model": type(self).__name__},
            )
        return RecordKey(self.translatable_model_type(), str(identity[0]))

    # -- locale context --------------------------------------------------

    def active_locale(self) -> str:
        return self.translatable_state.context.active()

    def default_locale(self) -> str:
        return self.translatable_state.context.default()

    def set_active_locale(self, locale: str) -> str:
        """Switch this record's locale; returns the previous one."""
        return self.translatable_state.context.set_active(locale)

    def translate_context(self, locale: Optional[str] = None) -> str:
        """Get the active locale, or switch to ``locale`` and return the previous one."""
        if locale is None:
            return self.active_locale()
        return self.set_active_locale(locale)

    def lang(self, locale: str) -> "Translatable":
        self.set_active_locale(locale)
        return self

    def should_translate(self) -> bool:
        return self.translatable_state.context.should_translate()

    def no_fallback_locale(self) -> "Translatable":
        self.translatable_state.use_fallback = False
        return self

    def with_fallback_locale(self) -> "Translatable":
        self.translatable_state.use_fallback = True
        return self

    def _reload_translatable_relations(self) -> None:
        state = sa_inspect(self)
        session = state.session
        if session is None:
            return
        names = self.__translatable_spec__.names
        loaded = [
            rel.key
            for rel in state.mapper.relationships
            if rel.key in names and rel.key not in state.unloaded
        ]
        if loaded:
            session.expire(self, loaded)

    # -- two-path accessor -----------------------------------------------

    def is_translatable(self, name: str) -> bool:
        if name == RESERVED_ATTRIBUTE or not self.should_translate():
            return False
        return name in self.__translatable_spec__

    def get_attribute(self, name: str) -> Any:
        if self.is_translatable(root_name(name)):
            return self.get_attribute_translated(name)
        if len(split_path(name)) == 1:
            return getattr(self, name)
        return get_path(_RecordAttributes(self), name)

    def set_attribute(self, name: str, value: Any) -> Any:
        if self.is_translatable(root_name(name)):
            return self.set_attribute_translated(name, value)
        return self._set_base_value(name, value)

    # -- translated values -----------------------------------------------

    def translatable_base_value(self, name: str) -> Any:
        """Default-locale value of ``name`` (a path), read from mapped attributes."""
        return get_path(_RecordAttributes(self), name)

    def get_attribute_translated(self, name: str, locale: Optional[str] = None) -> Any:
        state = self.translatable_state
        locale = locale or state.context.active()

        if state.context.is_default(locale):
            return self.translatable_base_value(name)

        spec = self.__translatable_spec__
        attribute = root_name(name)
        if self.has_translation(name, locale):
            result = state.overlay.get(locale, name)
        elif state.use_fallback and spec.uses_fallback(attribute):
            result = self.translatable_base_value(name)
        else:
            # never None, so truthiness checks downstream behave
            result = ""

        if isinstance(result, str) and result and spec.is_jsonable(attribute):
            result = json.loads(result)
        return result

    def set_attribute_translated(self, name: str, value: Any, locale: Optional[str] = None) -> Any:
        state = self.translatable_state
        locale = locale or state.context.active()

        if state.context.is_default(locale):
            return self._set_base_value(name, value)

        state.overlay.set(locale, name, value)
        if sa_inspect(self).persistent:
            flag_dirty(self)
        return value

    def has_translation(self, name: str, locale: str) -> bool:
        state = self.translatable_state
        if state.context.is_default(locale):
            data = _RecordAttributes(self)
        else:
            data = state.overlay.ensure(locale)
        return has_value(get_path(data, name))

    def get_translate_attributes(self, locale: str) -> dict:
        return self.translatable_state.overlay.attributes(locale)

    def _set_base_value(self, name: str, value: Any) -> Any:
        segments = split_path(name)
        if len(segments) <= 1:
            setattr(self, name, value)
            return value

        # copy the top-level value so the ORM sees an assignment
        top = copy.deepcopy(getattr(self, segments[0], None))
        if not isinstance(top, (MutableMapping, MutableSequence)):
            top = {}
        set_path(top, ".".join(segments[1:]), value)
        setattr(self, segments[0], top)
        return value

    def _load_translatable_data(self, locale: str) -> Optional[dict]:
        key = self.translatable_key()
        if key is None:
            return None
        session = object_session(self)
        if session is None:
            raise DetachedRecordError(key.model_type, key.model_id)

        from translatable.services.blob_repository import TranslationBlobRepository

        return TranslationBlobRepository(session).load(key, locale)

    # -- dirty tracking --------------------------------------------------

    def get_translate_dirty(self, locale: Optional[str] = None) -> dict:
        state = self.translatable_state
        return state.overlay.dirty(locale or state.context.active())

    def is_translate_dirty(self, attribute: Optional[str] = None, locale: Optional[str] = None) -> bool:
        state = self.translatable_state
        return state.overlay.is_dirty(locale or state.context.active(), attribute)

    def dirty_locales(self) -> List[str]:
        return self.translatable_state.overlay.dirty_locales()

    def get_translatable_originals(self, locale: Optional[str] = None):
        return self.translatable_state.overlay.originals(locale)

    # -- extension points ------------------------------------------------

    def resolve_computed_translations(self, locale: str) -> Optional[Dict[str, Any]]:
        """Values merged into ``locale``'s overlay right before it is stored."""
        return None
