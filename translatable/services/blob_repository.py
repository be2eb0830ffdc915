"""Translation blob persistence: one JSON document per (record, locale)."""
import json
import logging
from collections.abc import Mapping
from typing import Dict, Iterable, Optional

from sqlalchemy import delete, insert, select, update
from sqlalchemy.orm import Session

from translatable.models.record_key import RecordKey
from translatable.models.translation_attribute import TranslationAttribute

logger = logging.getLogger(__name__)


def encode_document(document: Mapping) -> str:
    return json.dumps(dict(document), ensure_ascii=False)


def decode_document(raw: Optional[str]) -> dict:
    if not raw:
        return {}
    data = json.loads(raw)
    return dict(data) if isinstance(data, Mapping) else {}


class TranslationBlobRepository:
    def __init__(self, session: Session):
        self._session = session

    def _where_record(self, key: RecordKey):
        return (
            TranslationAttribute.model_id == key.model_id,
            TranslationAttribute.model_type == key.model_type,
        )

    def load(self, key: RecordKey, locale: str) -> dict:
        """Decoded overlay map for ``locale``; ``{}`` when no row exists."""
        stmt = select(TranslationAttribute.attribute_data).where(
            *self._where_record(key), TranslationAttribute.locale == locale
        )
        with self._session.no_autoflush:
            raw = self._session.execute(stmt).scalar_one_or_none()
        logger.debug(f"Loaded translations for {key} locale={locale} found={raw is not None}")
        return decode_document(raw)

    def load_many(
        self, model_type: str, model_ids: Iterable[str], locales: Optional[Iterable[str]] = None
    ) -> Dict[str, Dict[str, dict]]:
        """Decoded maps for many records of one type: ``{model_id: {locale: map}}``."""
        ids = list(dict.fromkeys(model_ids))
        if not ids:
            return {}

        stmt = select(
            TranslationAttribute.model_id,
            TranslationAttribute.locale,
            TranslationAttribute.attribute_data,
        ).where(
            TranslationAttribute.model_type == model_type,
            TranslationAttribute.model_id.in_(ids),
        )
        if locales is not None:
            stmt = stmt.where(TranslationAttribute.locale.in_(list(locales)))

        result: Dict[str, Dict[str, dict]] = {model_id: {} for model_id in ids}
        with self._session.no_autoflush:
            for model_id, locale, raw in self._session.execute(stmt):
                result[model_id][locale] = decode_document(raw)
        logger.debug(f"Prefetched translations for {len(ids)} {model_type} records")
        return result

    def upsert(self, key: RecordKey, locale: str, document: Mapping) -> None:
        """Insert the locale's document, or update it in place when a row exists."""
        data = encode_document(document)
        existing = self._session.execute(
            select(TranslationAttribute.id).where(
                *self._where_record(key), TranslationAttribute.locale == locale
            )
        ).scalar_one_or_none()

        if existing is not None:
            self._session.execute(
                update(TranslationAttribute)
                .where(TranslationAttribute.id == existing)
                .values(attribute_data=data)
                .execution_options(synchronize_session=False)
            )
        else:
            self._session.execute(
                insert(TranslationAttribute).values(
                    locale=locale,
                    model_id=key.model_id,
                    model_type=key.model_type,
                    attribute_data=data,
                )
            )
        logger.debug(f"Stored translations for {key} locale={locale} keys={sorted(document)}")

    def delete_for_record(self, key: RecordKey) -> int:
        result = self._session.execute(
            delete(TranslationAttribute)
            .where(*self._where_record(key))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount
