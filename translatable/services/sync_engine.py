"""
Sync engine: flushes translation overlays alongside the ORM save.

Per flush, for every translatable record in the session:

1. each dirty locale is stored: blob first, then index rows;
2. records without an identity yet queue the store and run it once, right
   after the INSERT assigned their key;
3. when the record's active locale is not the default, translatable columns
   are reset to their loaded (default-locale) values so the base row never
   receives another locale's edits.

Deleted records have their blob and index rows removed in the same flush.

A stored locale becomes clean only when the transaction commits. If the
transaction ends any other way it stays dirty and the record is flagged
again, so the next flush rewrites it.
"""

import copy
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List

from sqlalchemy import event
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import Session, object_session
from sqlalchemy.orm.attributes import flag_dirty
from sqlalchemy.orm.base import NO_VALUE

from translatable.config.settings import get_settings
from translatable.core.paths import get_path
from translatable.models.mixin import Translatable
from translatable.models.record_key import RecordKey
from translatable.services.blob_repository import TranslationBlobRepository
from translatable.services.index_repository import TranslationIndexRepository

logger = logging.getLogger(__name__)

_PENDING_KEY = "translatable_pending_records"
_STORED_KEY = "translatable_stored_locales"


class SyncEngine:
    def __init__(self, session: Session):
        self.session = session
        self.blobs = TranslationBlobRepository(session)
        self.indexes = TranslationIndexRepository(session)

    def sync(self, record: Translatable) -> None:
        """Store every dirty locale, then restore default-locale column values."""
        state = record.translatable_state
        for locale in state.overlay.locales():
            if not state.overlay.is_dirty(locale):
                continue
            self.store_translatable_data(record, locale)

        if not state.context.should_translate():
            return

        self.restore_default_attributes(record)

    def store_translatable_data(self, record: Translatable, locale: str) -> None:
        key = record.translatable_key()
        if key is None:
            self._defer(record, locale)
            return

        overlay = record.translatable_state.overlay
        computed = record.resolve_computed_translations(locale)
        if computed:
            overlay.merge(locale, computed)

        self.store_basic_data(record, key, locale)
        self.store_index_data(record, key, locale)
        self._stored(record, locale)

    def store_basic_data(self, record: Translatable, key: RecordKey, locale: str) -> None:
        data = record.translatable_state.overlay.attributes(locale)
        self.blobs.upsert(key, locale, self.unique_translatable_data(record, data))

    def unique_translatable_data(self, record: Translatable, data: Dict[str, Any]) -> Dict[str, Any]:
        """Entries of ``data`` that differ from the default-locale values.

        JSON-text attributes are compared decoded. Attributes declared with
        ``fallback=False`` are kept even when equal, so reads under this
        locale never fall back for them. The comparison works on a copy; the
        record is not touched.
        """
        keep_always = set(record.__translatable_spec__.without_fallback())
        unique = {}
        for name, value in data.items():
            base = record.translatable_base_value(name)
            if name in keep_always or _comparable(record, name, value) != _comparable(record, name, base):
                unique[name] = value
        return unique

    def store_index_data(self, record: Translatable, key: RecordKey, locale: str) -> None:
        indexed = record.__translatable_spec__.indexed()
        if not indexed:
            return

        data = record.translatable_state.overlay.attributes(locale)
        for name in indexed:
            self.indexes.upsert(key, locale, name, get_path(data, name))

    def restore_default_attributes(self, record: Translatable) -> None:
        state = sa_inspect(record)
        if not state.persistent:
            return

        columns = state.mapper.column_attrs
        for name in record.__translatable_spec__.names:
            if name not in columns:
                continue
            original = state.committed_state.get(name, NO_VALUE)
            if original is NO_VALUE:
                continue
            logger.debug(f"Restoring default-locale value of {name} on {record.translatable_key()}")
            setattr(record, name, original)

    def touch(self, record: Translatable) -> None:
        if not get_settings().touch_timestamps:
            return
        if "updated_at" in sa_inspect(type(record)).column_attrs:
            record.updated_at = datetime.now(timezone.utc)

    def purge(self, record: Translatable) -> None:
        key = record.translatable_key()
        if key is None:
            return
        blobs = self.blobs.delete_for_record(key)
        indexes = self.indexes.delete_for_record(key)
        logger.debug(f"Purged translations for {key}: {blobs} blobs, {indexes} index rows")

    def _stored(self, record: Translatable, locale: str) -> None:
        # the baseline moves when the transaction commits, not at flush time
        data = copy.deepcopy(record.translatable_state.overlay.attributes(locale))
        self.session.info.setdefault(_STORED_KEY, []).append((record, locale, data))

    def _defer(self, record: Translatable, locale: str) -> None:
        pending = record.translatable_state.pending
        if locale in pending:
            return
        pending[locale] = lambda engine: engine.store_translatable_data(record, locale)

        records: List[Translatable] = self.session.info.setdefault(_PENDING_KEY, [])
        if not any(r is record for r in records):
            records.append(record)
        logger.debug(f"Deferred {locale} translations for new {type(record).__name__}")

    def drain_pending(self) -> None:
        """Run deferred stores for records that now have an identity."""
        records = self.session.info.pop(_PENDING_KEY, [])
        waiting = []
        for record in records:
            if record.translatable_key() is None:
                waiting.append(record)
                continue
            pending = record.translatable_state.pending
            record.translatable_state.pending = {}
            for action in pending.values():
                action(self)
        if waiting:
            self.session.info[_PENDING_KEY] = waiting


def _comparable(record: Translatable, name: str, value: Any) -> Any:
    if isinstance(value, str) and value and record.__translatable_spec__.is_jsonable(name):
        try:
            return json.loads(value)
        except ValueError:
            return value
    return value


def _translatable_records(objects) -> List[Translatable]:
    return [
        obj for obj in objects
        if isinstance(obj, Translatable) and obj.has_translatable_attributes()
    ]


def _before_flush(session: Session, flush_context, instances) -> None:
    engine = SyncEngine(session)
    for record in _translatable_records(list(session.new) + list(session.dirty)):
        stored = record.dirty_locales()
        engine.sync(record)
        if stored and record.translatable_key() is not None:
            engine.touch(record)


def _after_flush(session: Session, flush_context) -> None:
    deleted = _translatable_records(session.deleted)
    if not deleted:
        return
    engine = SyncEngine(session)
    for record in deleted:
        engine.purge(record)


def _after_flush_postexec(session: Session, flush_context) -> None:
    if session.info.get(_PENDING_KEY):
        SyncEngine(session).drain_pending()


def _after_commit(session: Session) -> None:
    for record, locale, data in session.info.pop(_STORED_KEY, []):
        record.translatable_state.overlay.mark_flushed(locale, data)


def _after_transaction_end(session: Session, transaction) -> None:
    # after_commit has already consumed the stores of a committed transaction
    if transaction.parent is not None:
        return
    stored = session.info.pop(_STORED_KEY, [])
    deferred = session.info.pop(_PENDING_KEY, [])
    for record in deferred:
        record.translatable_state.pending = {}

    for record, locale, _ in stored:
        if object_session(record) is session and sa_inspect(record).persistent:
            flag_dirty(record)
    if stored:
        logger.debug(f"Transaction ended without commit; {len(stored)} translation stores stay dirty")


def register_sync_events(target) -> None:
    """Attach the sync engine to a ``Session``, ``sessionmaker`` or the ``Session`` class."""
    if event.contains(target, "before_flush", _before_flush):
        return
    event.listen(target, "before_flush", _before_flush)
    event.listen(target, "after_flush", _after_flush)
    event.listen(target, "after_flush_postexec", _after_flush_postexec)
    event.listen(target, "after_commit", _after_commit)
    event.listen(target, "after_transaction_end", _after_transaction_end)


def unregister_sync_events(target) -> None:
    if not event.contains(target, "before_flush", _before_flush):
        return
    event.remove(target, "before_flush", _before_flush)
    event.remove(target, "after_flush", _after_flush)
    event.remove(target, "after_flush_postexec", _after_flush_postexec)
    event.remove(target, "after_commit", _after_commit)
    event.remove(target, "after_transaction_end", _after_transaction_end)
