from __future__ import annotations

import json
import random
from pathlib import Path
from typing import Any

from .models import WordCategory, WordItem


class CatalogError(Exception):
    """The word list is missing or malformed."""


class WordCatalog:
    def __init__(self, categories: list[WordCategory]) -> None:
        if not categories:
            raise CatalogError("catalog has no categories")
        self._categories = tuple(categories)

    @property
    def categories(self) -> tuple[WordCategory, ...]:
        return self._categories

    def category_names(self) -> list[str]:
        return [c.name for c in self._categories]

    def pick(self, rng: random.Random | None = None) -> tuple[WordCategory, WordItem]:
        r = rng or random
        category = self._categories[int(r.random() * len(self._categories))]
        item = category.items[int(r.random() * len(category.items))]
        return category, item


def _require_text(raw: Any, what: str) -> str:
    if not isinstance(raw, str) or not raw.strip():
        raise CatalogError(f"{what} must be a non-empty string")
    return raw.strip()


def parse_catalog(data: Any) -> WordCatalog:
    if not isinstance(data, dict) or not isinstance(data.get("categories"), list):
        raise CatalogError("expected an object with a 'categories' list")

    categories: list[WordCategory] = []
    for i, raw_cat in enumerate(data["categories"]):
        if not isinstance(raw_cat, dict):
            raise CatalogError(f"category #{i} is not an object")
        name = _require_text(raw_cat.get("name"), f"category #{i} name")

        raw_items = raw_cat.get("items")
        if not isinstance(raw_items, list) or not raw_items:
            raise CatalogError(f"category {name!r} has no items")

        items: list[WordItem] = []
        for j, raw_item in enumerate(raw_items):
            if not isinstance(raw_item, dict):
                raise CatalogError(f"item #{j} of {name!r} is not an object")
            items.append(
                WordItem(
                    word=_require_text(raw_item.get("word"), f"{name!r} item #{j} word"),
                    imposter_hint=_require_text(
                        raw_item.get("imposterHint"), f"{name!r} item #{j} imposterHint"
                    ),
                )
            )
        categories.append(WordCategory(name=name, items=tuple(items)))

    return WordCatalog(categories)


def load_catalog(path: str | Path) -> WordCatalog:
    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except OSError as e:
        raise CatalogError(f"cannot read {p}: {e}") from e

    try:
        data = json.loads(text)
    except ValueError as e:
        raise CatalogError(f"{p} is not valid JSON: {e}") from e

    return parse_catalog(data)
