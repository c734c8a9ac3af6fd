# -*- coding: utf-8 -*-
# news_client/ui/viewmodels/favorites_viewmodel.py
import logging
from functools import partial
from typing import Optional

from PySide6.QtCore import QObject, Signal as pyqtSignal, Slot as pyqtSlot

from news_client.core.feed_repository import FeedRepository
from news_client.core.task_runner import TaskRunner
from news_client.ui.ui_state import Empty, Error, Loading, Success, UiState


class FavoritesViewModel(QObject):
    """ViewModel for the favorites screen."""

    state_changed = pyqtSignal(object)
    error_occurred = pyqtSignal(str)

    def __init__(self, repository: FeedRepository, task_runner: TaskRunner, parent: Optional[QObject] = None):
        super().__init__(parent)
        self.logger = logging.getLogger('news_client.ui.viewmodels.favorites')
        self.repository = repository
        self.task_runner = task_runner
        self._state: UiState = Empty()

    @property
    def state(self) -> UiState:
        return self._state

    def _set_state(self, state: UiState):
        self._state = state
        self.state_changed.emit(state)

    @pyqtSlot()
    def load(self):
        self._set_state(Loading())
        self.task_runner.submit(
            self.repository.get_bookmarked,
            on_success=self._on_loaded,
            on_error=self._on_failed,
        )

    def _on_loaded(self, articles):
        self._set_state(Success(list(articles)) if articles else Empty())

    def _on_failed(self, error: Exception):
        self.logger.error(f"Error loading favorites: {error}")
        self._set_state(Error(f"加载收藏失败: {error}"))

    @pyqtSlot(str)
    def remove(self, article_id: str):
        """Un-bookmark an article and reload the list."""
        self.task_runner.submit(
            partial(self.repository.set_bookmark, article_id, False),
            on_success=lambda _found: self.load(),
            on_error=self._on_remove_failed,
        )

    def _on_remove_failed(self, error: Exception):
        self.logger.error(f"Error removing favorite: {error}")
        self.error_occurred.emit(f"取消收藏失败: {error}")

    @pyqtSlot()
    def clear_all(self):
        """Un-bookmark every article. The articles stay in the history."""
        self.task_runner.submit(
            self.repository.clear_bookmarks,
            on_success=self._on_cleared,
            on_error=self._on_clear_failed,
        )

    def _on_cleared(self, cleared: int):
        self.logger.info(f"Cleared {cleared} favorites.")
        self.load()

    def _on_clear_failed(self, error: Exception):
        self.logger.error(f"Error clearing favorites: {error}")
        self.error_occurred.emit(f"清空收藏失败: {error}")
