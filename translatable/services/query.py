"""
Locale-aware query helpers for translatable record types.

All helpers take and return SQLAlchemy 2.0 ``select()`` statements::

    stmt = select(Country)
    stmt = filter_by_translated_index(session, stmt, Country, "name", "La France", locale="fr")
    stmt = order_by_translated_index(stmt, Country, "name", "desc", locale="fr")
"""

import logging
import re
from collections import defaultdict
from typing import Any, Iterable, Optional, Set

from sqlalchemy import String, and_, cast, func, inspect as sa_inspect
from sqlalchemy.orm import Session, aliased
from sqlalchemy.sql import Select

from translatable.core.exceptions import TranslatableConfigurationError, UnsupportedOperatorError
from translatable.core.locale import get_translator
from translatable.core.operators import compare
from translatable.models.translation_index import TranslationIndex
from translatable.services.blob_repository import TranslationBlobRepository
from translatable.services.index_repository import TranslationIndexRepository

logger = logging.getLogger(__name__)

_ALIAS_UNSAFE = re.compile(r"\W")
_JOINED_OPTION = "translatable_index_joins"


def _primary_key(model):
    columns = sa_inspect(model).primary_key
    if len(columns) != 1:
        raise TranslatableConfigurationError(
            f"{model.__name__} needs a single-column primary key for translated queries",
            details={"model": model.__name__},
        )
    return columns[0]


def _coerce_keys(column, keys: Set[str]) -> list:
    try:
        python_type = column.type.python_type
    except NotImplementedError:
        return sorted(keys)
    if python_type is str:
        return sorted(keys)
    return [python_type(key) for key in sorted(keys)]


def _filter(session, stmt, model, attribute, value, locale, operator, no_fallback) -> Select:
    translator = get_translator()
    locale = locale or translator.current_locale()
    column = getattr(model, attribute)

    # The default locale lives in the base columns; there is no index for it
    if locale == translator.default_locale():
        return stmt.where(compare(column, operator, value))

    keys = TranslationIndexRepository(session).find_keys_matching(
        model.translatable_model_type(), locale, attribute, operator, value
    )
    if keys or no_fallback:
        pk = _primary_key(model)
        return stmt.where(pk.in_(_coerce_keys(pk, keys)))

    logger.debug(f"No {locale} index match for {model.__name__}.{attribute}; filtering base column")
    return stmt.where(compare(column, operator, value))


def filter_by_translated_index(
    session: Session,
    stmt: Select,
    model,
    attribute: str,
    value: Any,
    locale: Optional[str] = None,
    operator: str = "=",
) -> Select:
    """Constrain ``stmt`` to records whose translated ``attribute`` matches.

    When no index row matches, falls back to filtering the base column, which
    covers records whose translation equals the default-locale value.
    """
    return _filter(session, stmt, model, attribute, value, locale, operator, no_fallback=False)


def filter_by_translated_index_no_fallback(
    session: Session,
    stmt: Select,
    model,
    attribute: str,
    value: Any,
    locale: Optional[str] = None,
    operator: str = "=",
) -> Select:
    """Like ``filter_by_translated_index`` but always constrains to the index matches."""
    return _filter(session, stmt, model, attribute, value, locale, operator, no_fallback=True)


def _index_alias_name(attribute: str, locale: str) -> str:
    return _ALIAS_UNSAFE.sub("_", f"translate_indexes_{attribute}_{locale}")


def _joined_indexes(stmt: Select) -> tuple:
    # index aliases already joined onto stmt, recorded as an execution option
    return stmt.get_execution_options().get(_JOINED_OPTION, ())


def order_by_translated_index(
    stmt: Select,
    model,
    attribute: str,
    direction: str = "asc",
    locale: Optional[str] = None,
) -> Select:
    """Sort by the translated value, falling back to the base column.

    Calling it again with the same attribute and locale returns ``stmt``
    unchanged.
    """
    if direction.lower() not in ("asc", "desc"):
        raise UnsupportedOperatorError(direction, ["asc", "desc"])

    locale = locale or get_translator().current_locale()
    alias_name = _index_alias_name(attribute, locale)
    joined = _joined_indexes(stmt)
    if alias_name in joined:
        return stmt

    index = aliased(TranslationIndex, name=alias_name)
    pk = _primary_key(model)
    stmt = stmt.outerjoin(
        index,
        and_(
            index.model_id == cast(pk, String),
            index.model_type == model.translatable_model_type(),
            index.item == attribute,
            index.locale == locale,
        ),
    )
    stmt = stmt.execution_options(**{_JOINED_OPTION: joined + (alias_name,)})
    sort_key = func.coalesce(index.value, cast(getattr(model, attribute), String))
    return stmt.order_by(sort_key.desc() if direction.lower() == "desc" else sort_key.asc())


def eager_load_translations(
    session: Session, records: Iterable, locales: Optional[Iterable[str]] = None
) -> None:
    """Prefetch translation blobs for many records with one query per record type.

    Later reads under a prefetched locale use the in-memory copy instead of
    querying per record. Without ``locales`` every locale is prefetched, so
    locales absent from the store read as empty without a query.
    """
    wanted = list(locales) if locales is not None else None
    by_type = defaultdict(list)
    for record in records:
        key = record.translatable_key()
        if key is not None:
            by_type[key.model_type].append((key, record))

    repository = TranslationBlobRepository(session)
    for model_type, keyed in by_type.items():
        found = repository.load_many(model_type, [key.model_id for key, _ in keyed], wanted)
        for key, record in keyed:
            translations = found.get(key.model_id, {})
            if wanted is not None:
                translations = {locale: translations.get(locale, {}) for locale in wanted}
            record.translatable_state.overlay.materialize(translations, complete=wanted is None)
