"""
Integration tests for locale-aware filtering, ordering and prefetching
"""
import pytest
from sqlalchemy import event, select

from translatable import (
    UnsupportedOperatorError,
    eager_load_translations,
    filter_by_translated_index,
    filter_by_translated_index_no_fallback,
    order_by_translated_index,
)
from tests.fixture_models import Country


@pytest.fixture
def countries(session):
    france = Country(name="France", code="FR")
    germany = Country(name="Germany", code="DE")
    spain = Country(name="Spain", code="ES")
    session.add_all([france, germany, spain])
    session.commit()

    france.lang("fr").set_attribute("name", "La France")
    germany.lang("fr").set_attribute("name", "Allemagne")
    session.commit()
    return {"france": france, "germany": germany, "spain": spain}


@pytest.fixture
def statements(engine):
    seen = []

    def record(conn, cursor, statement, parameters, context, executemany):
        seen.append(statement)

    event.listen(engine, "before_cursor_execute", record)
    yield seen
    event.remove(engine, "before_cursor_execute", record)


def _codes(session, stmt):
    return [country.code for country in session.execute(stmt).scalars()]


def test_filter_matches_translated_index(session, countries):
    stmt = filter_by_translated_index(session, select(Country), Country, "name", "La France", locale="fr")

    assert _codes(session, stmt) == ["FR"]


def test_filter_uses_the_current_locale_by_default(session, countries, translator):
    translator.set_locale("fr")

    stmt = filter_by_translated_index(session, select(Country), Country, "name", "Allemagne")

    assert _codes(session, stmt) == ["DE"]


def test_filter_falls_back_to_base_column_without_index_match(session, countries):
    stmt = filter_by_translated_index(session, select(Country), Country, "name", "Spain", locale="fr")

    assert _codes(session, stmt) == ["ES"]


def test_no_fallback_filter_only_returns_index_matches(session, countries):
    stmt = filter_by_translated_index_no_fallback(
        session, select(Country), Country, "name", "Spain", locale="fr"
    )
    assert _codes(session, stmt) == []

    stmt = filter_by_translated_index_no_fallback(
        session, select(Country), Country, "name", "Allemagne", locale="fr"
    )
    assert _codes(session, stmt) == ["DE"]


def test_default_locale_filters_base_column(session, countries):
    stmt = filter_by_translated_index(session, select(Country), Country, "name", "France", locale="en")

    assert _codes(session, stmt) == ["FR"]
    assert "translate_indexes" not in str(stmt)


def test_filter_supports_comparison_operators(session, countries):
    stmt = filter_by_translated_index(
        session, select(Country), Country, "name", "%France%", locale="fr", operator="LIKE"
    )
    assert _codes(session, stmt) == ["FR"]

    stmt = filter_by_translated_index(
        session, select(Country).order_by(Country.code), Country, "name", "B", locale="fr", operator=">"
    )
    assert _codes(session, stmt) == ["FR"]


def test_filter_rejects_unknown_operator(session, countries):
    with pytest.raises(UnsupportedOperatorError) as exc:
        filter_by_translated_index(session, select(Country), Country, "name", "x", locale="fr", operator="regexp")

    assert "=" in exc.value.details["supported_operators"]


@pytest.mark.parametrize(
    "direction, expected",
    [("asc", ["DE", "FR", "ES"]), ("desc", ["ES", "FR", "DE"])],
)
def test_order_by_translated_value_with_base_fallback(session, countries, direction, expected):
    stmt = order_by_translated_index(select(Country), Country, "name", direction, locale="fr")

    assert _codes(session, stmt) == expected


def test_order_join_is_added_once(session, countries):
    once = order_by_translated_index(select(Country), Country, "name", locale="fr")
    twice = order_by_translated_index(once, Country, "name", locale="fr")

    assert twice is once
    assert str(twice) == str(once)
    assert str(once).count("translate_indexes_name_fr") >= 1


def test_order_by_different_locales_joins_each(session, countries):
    stmt = order_by_translated_index(select(Country), Country, "name", locale="fr")
    stmt = order_by_translated_index(stmt, Country, "name", locale="de")

    sql = str(stmt)
    assert "translate_indexes_name_fr" in sql
    assert "translate_indexes_name_de" in sql


def test_order_rejects_unknown_direction():
    with pytest.raises(UnsupportedOperatorError):
        order_by_translated_index(select(Country), Country, "name", "sideways", locale="fr")


def test_eager_load_avoids_per_record_queries(session_factory, countries, statements):
    with session_factory() as fresh:
        records = fresh.execute(select(Country).order_by(Country.code)).scalars().all()
        eager_load_translations(fresh, records, ["fr"])
        statements.clear()

        names = [record.lang("fr").get_attribute("name") for record in records]
        queries = list(statements)

    assert names == ["Allemagne", "Spain", "La France"]
    assert queries == []


def test_eager_load_without_locales_marks_missing_locales_empty(session_factory, countries, statements):
    with session_factory() as fresh:
        records = fresh.execute(select(Country).order_by(Country.code)).scalars().all()
        eager_load_translations(fresh, records)
        statements.clear()

        italian = [record.get_attribute_translated("name", "it") for record in records]
        french = records[2].get_attribute_translated("name", "fr")
        queries = list(statements)

    assert italian == ["Germany", "Spain", "France"]
    assert french == "La France"
    assert queries == []
