"""Category registry: resolves the parser's category keys to Category records."""

from typing import Optional, Union

from src.models.expense import Category, CategoryKey


DEFAULT_CATEGORIES: tuple[Category, ...] = (
    Category(id="cat-food", key=CategoryKey.FOOD, label="Food", color="#ff6f61"),
    Category(id="cat-fun", key=CategoryKey.FUN, label="Fun", color="#50e3c2"),
    Category(id="cat-bills", key=CategoryKey.BILLS, label="Bills", color="#ffd166"),
)


class CategoryRegistry:
    """Fixed set of spending categories, looked up by id or key."""

    def __init__(self, categories: Optional[list[Category]] = None):
        self._categories = list(DEFAULT_CATEGORIES if categories is None else categories)

    def list_categories(self) -> list[Category]:
        return list(self._categories)

    def get_by_id(self, category_id: Optional[str]) -> Optional[Category]:
        if category_id is None:
            return None
        return next((c for c in self._categories if c.id == category_id), None)

    def get_by_key(self, key: Optional[Union[CategoryKey, str]]) -> Optional[Category]:
        if key is None:
            return None
        return next((c for c in self._categories if c.key == key), None)
