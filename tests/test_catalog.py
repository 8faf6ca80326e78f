import json
import random

import pytest

from backend.imposter.config import Config
from backend.imposter.game.catalog import CatalogError, load_catalog, parse_catalog

from conftest import CATALOG_DATA


def test_load_catalog_from_file(tmp_path):
    path = tmp_path / "words.json"
    path.write_text(json.dumps(CATALOG_DATA), encoding="utf-8")

    catalog = load_catalog(path)

    assert catalog.category_names() == ["Fruit", "Sports"]
    fruit = catalog.categories[0]
    assert [i.word for i in fruit.items] == ["Apple", "Banana"]
    assert fruit.items[1].imposter_hint == "Yellow"


def test_bundled_word_list_loads():
    catalog = load_catalog(Config.WORDS_PATH)
    assert len(catalog.categories) >= 1
    assert all(c.items for c in catalog.categories)


def test_missing_file(tmp_path):
    with pytest.raises(CatalogError):
        load_catalog(tmp_path / "nope.json")


def test_invalid_json(tmp_path):
    path = tmp_path / "words.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(CatalogError):
        load_catalog(path)


@pytest.mark.parametrize(
    "data",
    [
        [],
        {},
        {"categories": []},
        {"categories": ["Fruit"]},
        {"categories": [{"name": "", "items": [{"word": "a", "imposterHint": "b"}]}]},
        {"categories": [{"name": "Fruit", "items": []}]},
        {"categories": [{"name": "Fruit", "items": [{"word": "Apple"}]}]},
        {"categories": [{"name": "Fruit", "items": [{"word": 3, "imposterHint": "b"}]}]},
    ],
)
def test_malformed_catalogs(data):
    with pytest.raises(CatalogError):
        parse_catalog(data)


def test_pick_returns_item_from_its_category(catalog):
    rng = random.Random(3)
    for _ in range(50):
        category, item = catalog.pick(rng)
        assert item in category.items


def test_pick_covers_every_category(catalog):
    rng = random.Random(11)
    names = {catalog.pick(rng)[0].name for _ in range(100)}
    assert names == {"Fruit", "Sports"}


def test_catalog_is_immutable(catalog):
    item = catalog.categories[0].items[0]
    with pytest.raises(AttributeError):
        item.word = "Pear"
    assert isinstance(catalog.categories[0].items, tuple)
