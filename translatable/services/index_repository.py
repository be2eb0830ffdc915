"""Translation index persistence: one scalar row per (record, locale, attribute)."""
import logging
from typing import Any, Set

from sqlalchemy import delete, insert, select, update
from sqlalchemy.orm import Session

from translatable.core.operators import compare
from translatable.core.values import index_scalar
from translatable.models.record_key import RecordKey
from translatable.models.translation_index import TranslationIndex

logger = logging.getLogger(__name__)


class TranslationIndexRepository:
    def __init__(self, session: Session):
        self._session = session

    def _where_item(self, key: RecordKey, locale: str, item: str):
        return (
            TranslationIndex.locale == locale,
            TranslationIndex.model_id == key.model_id,
            TranslationIndex.model_type == key.model_type,
            TranslationIndex.item == item,
        )

    def upsert(self, key: RecordKey, locale: str, item: str, value: Any) -> None:
        """Write the indexed value, or delete the row when the value is empty.

        Raises:
            UnsupportedIndexValueError: if ``value`` is not a scalar.
        """
        scalar = index_scalar(item, value)
        existing = self._session.execute(
            select(TranslationIndex.id).where(*self._where_item(key, locale, item))
        ).scalar_one_or_none()

        if scalar is None:
            if existing is not None:
                self._session.execute(
                    delete(TranslationIndex)
                    .where(TranslationIndex.id == existing)
                    .execution_options(synchronize_session=False)
                )
                logger.debug(f"Removed index {item} for {key} locale={locale}")
            return

        if existing is not None:
            self._session.execute(
                update(TranslationIndex)
                .where(TranslationIndex.id == existing)
                .values(value=scalar)
                .execution_options(synchronize_session=False)
            )
        else:
            self._session.execute(
                insert(TranslationIndex).values(
                    locale=locale,
                    model_id=key.model_id,
                    model_type=key.model_type,
                    item=item,
                    value=scalar,
                )
            )
        logger.debug(f"Indexed {item} for {key} locale={locale}")

    def find_keys_matching(
        self, model_type: str, locale: str, item: str, operator: str, value: Any
    ) -> Set[str]:
        """Model ids whose indexed ``item`` satisfies ``<operator> value``.

        Index values are text, so range operators compare lexicographically.
        """
        needle = value if isinstance(value, str) else index_scalar(item, value)
        stmt = select(TranslationIndex.model_id).where(
            TranslationIndex.model_type == model_type,
            TranslationIndex.locale == locale,
            TranslationIndex.item == item,
            compare(TranslationIndex.value, operator, needle),
        )
        with self._session.no_autoflush:
            return set(self._session.execute(stmt).scalars())

    def exists(self, key: RecordKey, locale: str, item: str) -> bool:
        stmt = select(TranslationIndex.id).where(*self._where_item(key, locale, item)).limit(1)
        with self._session.no_autoflush:
            return self._session.execute(stmt).first() is not None

    def delete_for_record(self, key: RecordKey) -> int:
        result = self._session.execute(
            delete(TranslationIndex)
            .where(
                TranslationIndex.model_id == key.model_id,
                TranslationIndex.model_type == key.model_type,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount
