"""
Integration tests for storing overlays when the session flushes
"""
import json

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from translatable import (
    SyncEngine,
    UnsupportedIndexValueError,
    dirty_locales,
    is_dirty,
    set_translated_value,
)
from translatable.models import RecordKey, TranslationAttribute, TranslationIndex
from tests.fixture_models import Country, Product


def _blobs(session, model_type="Country"):
    rows = session.execute(
        select(
            TranslationAttribute.model_id,
            TranslationAttribute.locale,
            TranslationAttribute.attribute_data,
        ).where(TranslationAttribute.model_type == model_type)
    )
    return {(model_id, locale): json.loads(data) for model_id, locale, data in rows}


def _indexes(session, model_type="Country"):
    rows = session.execute(
        select(
            TranslationIndex.model_id,
            TranslationIndex.locale,
            TranslationIndex.item,
            TranslationIndex.value,
        ).where(TranslationIndex.model_type == model_type)
    )
    return {(model_id, locale, item): value for model_id, locale, item, value in rows}


def test_translated_save_keeps_base_row_and_writes_overlay(session, session_factory):
    country = Country(id=7, name="France", code="FR")
    session.add(country)
    session.commit()

    country.lang("fr").set_attribute("name", "La France")
    session.commit()

    with session_factory() as fresh:
        assert fresh.get(Country, 7).name == "France"
        assert _blobs(fresh) == {("7", "fr"): {"name": "La France"}}
        assert _indexes(fresh) == {("7", "fr", "name"): "La France"}

        reloaded = fresh.get(Country, 7).lang("fr")
        assert reloaded.get_attribute("name") == "La France"


def test_blob_holds_only_values_that_differ_from_default(session):
    country = Country(name="France", notes="Republic", states={"capital": "Paris"})
    session.add(country)
    session.commit()

    country.lang("fr")
    country.set_attribute("name", "France")
    country.set_attribute("notes", "Republic")
    country.set_attribute("states", {"capital": "Paris (fr)"})
    session.commit()

    blob = _blobs(session)[(str(country.id), "fr")]
    assert blob == {"notes": "Republic", "states": {"capital": "Paris (fr)"}}
    # the index follows the overlay, not the diff
    assert _indexes(session) == {(str(country.id), "fr", "name"): "France"}


def test_emptied_index_value_removes_the_row(session):
    country = Country(name="France")
    session.add(country)
    session.commit()

    country.lang("fr").set_attribute("name", "La France")
    session.commit()
    assert len(_indexes(session)) == 1

    country.set_attribute("name", "")
    session.commit()

    assert _indexes(session) == {}
    assert country.get_attribute("name") == "France"


def test_new_record_translations_are_stored_after_insert(session):
    country = Country(name="Germany", code="DE")
    country.lang("de").set_attribute("name", "Deutschland")
    assert country.dirty_locales() == ["de"]

    session.add(country)
    session.commit()

    key = str(country.id)
    assert _blobs(session) == {(key, "de"): {"name": "Deutschland"}}
    assert _indexes(session) == {(key, "de", "name"): "Deutschland"}
    assert country.name == "Germany"
    assert country.dirty_locales() == []
    assert country.translatable_state.pending == {}


def test_direct_column_write_under_other_locale_is_reverted(session, session_factory):
    country = Country(name="France")
    session.add(country)
    session.commit()

    country.lang("fr")
    country.name = "La France"
    session.commit()

    with session_factory() as fresh:
        assert fresh.get(Country, country.id).name == "France"
        assert _blobs(fresh) == {}


def test_default_locale_save_writes_base_columns_only(session):
    country = Country(name="France")
    session.add(country)
    session.commit()

    country.set_attribute("name", "French Republic")
    session.commit()

    assert _blobs(session) == {}
    assert session.execute(select(Country.name)).scalar_one() == "French Republic"


def test_computed_translations_are_merged_before_storing(session):
    product = Product(title="City Bike", slug="city-bike")
    session.add(product)
    session.commit()

    product.lang("fr").set_attribute("title", "Vélo de ville")
    session.commit()

    key = str(product.id)
    assert _blobs(session, "Product") == {
        (key, "fr"): {"title": "Vélo de ville", "slug": "vélo-de-ville"}
    }
    assert _indexes(session, "Product") == {
        (key, "fr", "title"): "Vélo de ville",
        (key, "fr", "slug"): "vélo-de-ville",
    }
    assert product.get_attribute("slug") == "vélo-de-ville"
    assert product.slug == "city-bike"


def test_storing_translations_touches_updated_at(session):
    country = Country(name="France")
    session.add(country)
    session.commit()
    assert country.updated_at is None

    country.lang("fr").set_attribute("name", "La France")
    session.commit()

    assert country.updated_at is not None


def test_structured_index_value_aborts_the_save(session):
    product = Product(title="Bike")
    session.add(product)
    session.commit()

    product.lang("fr").set_attribute("title", {"short": "Vélo"})

    with pytest.raises(UnsupportedIndexValueError) as exc:
        session.commit()
    session.rollback()

    assert exc.value.details["attribute"] == "title"
    assert _blobs(session, "Product") == {}
    assert _indexes(session, "Product") == {}


def test_saved_locale_is_no_longer_dirty(session):
    country = Country(name="France")
    session.add(country)
    session.commit()

    set_translated_value(country, "name", "La France", "fr")
    assert dirty_locales(country) == ["fr"]
    assert is_dirty(country, "name", "fr")
    assert country.get_translatable_originals("fr") == {}

    session.commit()

    assert dirty_locales(country) == []
    assert not is_dirty(country, locale="fr")
    assert country.get_translatable_originals("fr") == {"name": "La France"}
    assert country.get_translate_dirty("fr") == {}


def test_second_save_updates_existing_rows(session):
    country = Country(name="France")
    session.add(country)
    session.commit()

    country.lang("fr").set_attribute("name", "La France")
    session.commit()
    country.set_attribute("name", "République française")
    session.commit()

    key = str(country.id)
    assert _blobs(session) == {(key, "fr"): {"name": "République française"}}
    assert _indexes(session) == {(key, "fr", "name"): "République française"}
    assert len(session.execute(select(TranslationAttribute)).scalars().all()) == 1


def test_sync_engine_can_be_driven_directly(session):
    country = Country(name="France")
    session.add(country)
    session.commit()

    country.lang("it").set_attribute("name", "Francia")
    engine = SyncEngine(session)
    engine.store_translatable_data(country, "it")

    key = RecordKey("Country", str(country.id))
    assert engine.blobs.load(key, "it") == {"name": "Francia"}
    assert engine.indexes.exists(key, "it", "name")
    assert country.is_translate_dirty(locale="it")

    session.commit()

    assert not country.is_translate_dirty(locale="it")


def test_failed_flush_keeps_translation_for_next_commit(session):
    product = Product(title="Bike")
    session.add(product)
    session.commit()

    product.lang("fr").set_attribute("title", "Vélo")
    product.lang("en")
    product.title = None

    with pytest.raises(IntegrityError):
        session.commit()
    session.rollback()

    assert product.dirty_locales() == ["fr"]

    product.title = "Bike"
    session.commit()

    key = str(product.id)
    assert _blobs(session, "Product") == {(key, "fr"): {"title": "Vélo", "slug": "vélo"}}
    assert product.dirty_locales() == []


def test_rolled_back_store_is_rewritten_without_further_changes(session):
    country = Country(name="France")
    session.add(country)
    session.commit()

    country.lang("fr").set_attribute("name", "La France")
    session.flush()
    session.rollback()

    assert country.is_translate_dirty("name", "fr")

    session.commit()

    assert _blobs(session) == {(str(country.id), "fr"): {"name": "La France"}}


def test_unchanged_json_text_attribute_is_left_out_of_the_blob(session):
    product = Product(title="Bike", meta='{"color": "red"}')
    session.add(product)
    session.commit()

    product.lang("fr")
    product.set_attribute("title", "Vélo")
    product.set_attribute("meta", {"color": "red"})
    session.commit()

    blob = _blobs(session, "Product")[(str(product.id), "fr")]
    assert "meta" not in blob
    assert blob["title"] == "Vélo"

    product.set_attribute("meta", '{"color": "rouge"}')
    session.commit()

    blob = _blobs(session, "Product")[(str(product.id), "fr")]
    assert blob["meta"] == '{"color": "rouge"}'
    assert product.get_attribute("meta") == {"color": "rouge"}
