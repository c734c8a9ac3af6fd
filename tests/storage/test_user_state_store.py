import pytest
from PySide6.QtCore import QSettings

from news_client.models import DEFAULT_CATEGORIES, NewsCategory
from news_client.storage.user_state_store import UserStateStore


@pytest.fixture
def settings(tmp_path, qapp):
    return QSettings(str(tmp_path / "user_state.ini"), QSettings.Format.IniFormat)


@pytest.fixture
def store(settings):
    return UserStateStore(settings=settings)


def test_defaults_when_nothing_saved(store):
    assert store.get_selected_categories() == DEFAULT_CATEGORIES
    assert store.get_category_order() == DEFAULT_CATEGORIES
    assert store.get_read_ids() == set()


def test_selected_categories_round_trip(store, settings, tmp_path):
    store.set_selected_categories([NewsCategory.HEALTH, NewsCategory.MILITARY])

    reopened = UserStateStore(settings=QSettings(str(tmp_path / "user_state.ini"), QSettings.Format.IniFormat))
    assert reopened.get_selected_categories() == [NewsCategory.HEALTH, NewsCategory.MILITARY]


def test_empty_selection_is_kept(store):
    store.set_selected_categories([])
    assert store.get_selected_categories() == []


def test_category_order_falls_back_to_selection(store):
    store.set_selected_categories([NewsCategory.CULTURE])
    assert store.get_category_order() == [NewsCategory.CULTURE]

    store.set_category_order([NewsCategory.SOCIETY, NewsCategory.CULTURE])
    assert store.get_category_order() == [NewsCategory.SOCIETY, NewsCategory.CULTURE]


def test_unknown_and_duplicate_categories_are_dropped(store, settings):
    settings.setValue(UserStateStore.SELECTED_CATEGORIES_KEY, '["科技", "天气", "科技", "体育"]')

    assert store.get_selected_categories() == [NewsCategory.TECHNOLOGY, NewsCategory.SPORTS]


def test_corrupt_value_falls_back_to_default(store, settings):
    settings.setValue(UserStateStore.SELECTED_CATEGORIES_KEY, "not json")

    assert store.get_selected_categories() == DEFAULT_CATEGORIES


def test_read_ids_round_trip(store):
    store.set_read_ids({"b", "a"})

    assert store.get_read_ids() == {"a", "b"}
