# -*- coding: utf-8 -*-
# news_client/ui/viewmodels/category_viewmodel.py
import logging
from typing import List, Optional

from PySide6.QtCore import QObject, Signal as pyqtSignal, Slot as pyqtSlot

from news_client.exceptions import PersistenceFailure
from news_client.models import DEFAULT_CATEGORIES, NewsCategory
from news_client.storage.user_state_store import UserStateStore


class CategoryManagementViewModel(QObject):
    """ViewModel for managing the user's category tabs.

    The selected categories are kept in display order. At least one category
    always remains selected.
    """

    categories_changed = pyqtSignal(list)            # List[NewsCategory], display order
    available_categories_changed = pyqtSignal(list)  # categories not yet selected
    error_occurred = pyqtSignal(str)

    def __init__(self, user_state_store: UserStateStore, parent: Optional[QObject] = None):
        super().__init__(parent)
        self.logger = logging.getLogger('news_client.ui.viewmodels.category')
        self.user_state_store = user_state_store
        self._categories: List[NewsCategory] = self._load()

    def _load(self) -> List[NewsCategory]:
        selected = self.user_state_store.get_selected_categories()
        order = self.user_state_store.get_category_order()
        ordered = [c for c in order if c in selected]
        ordered += [c for c in selected if c not in ordered]
        self.logger.debug(f"Loaded categories: {[c.value for c in ordered]}")
        return ordered

    @property
    def categories(self) -> List[NewsCategory]:
        return list(self._categories)

    @property
    def available_categories(self) -> List[NewsCategory]:
        return [c for c in NewsCategory if c not in self._categories]

    def _commit(self, categories: List[NewsCategory]):
        self._categories = list(categories)
        try:
            self.user_state_store.set_selected_categories(self._categories)
            self.user_state_store.set_category_order(self._categories)
        except PersistenceFailure as e:
            self.logger.error(f"Failed to save categories: {e}")
            self.error_occurred.emit(f"保存分类失败: {e}")
        self.categories_changed.emit(self.categories)
        self.available_categories_changed.emit(self.available_categories)

    @pyqtSlot(object)
    def add_category(self, category: NewsCategory) -> bool:
        if category in self._categories:
            return False
        self.logger.info(f"Adding category {category.value}")
        self._commit(self._categories + [category])
        return True

    @pyqtSlot(object)
    def remove_category(self, category: NewsCategory) -> bool:
        if category not in self._categories:
            return False
        if len(self._categories) <= 1:
            self.logger.warning(f"Refusing to remove the last category {category.value}.")
            self.error_occurred.emit("至少需要保留一个分类")
            return False
        self.logger.info(f"Removing category {category.value}")
        self._commit([c for c in self._categories if c != category])
        return True

    @pyqtSlot()
    def reset_to_default(self):
        self.logger.info("Resetting categories to default.")
        self._commit(list(DEFAULT_CATEGORIES))

    @pyqtSlot(int, int)
    def reorder(self, from_index: int, to_index: int) -> bool:
        """Move the category at ``from_index`` to ``to_index``."""
        if not (0 <= from_index < len(self._categories) and 0 <= to_index < len(self._categories)):
            return False
        if from_index == to_index:
            return False
        categories = list(self._categories)
        categories.insert(to_index, categories.pop(from_index))
        self._commit(categories)
        return True
