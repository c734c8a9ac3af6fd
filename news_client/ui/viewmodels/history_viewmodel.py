# -*- coding: utf-8 -*-
# news_client/ui/viewmodels/history_viewmodel.py
import logging
from functools import partial
from typing import Optional

from PySide6.QtCore import QObject, Signal as pyqtSignal, Slot as pyqtSlot

from news_client.core.feed_repository import FeedRepository
from news_client.core.task_runner import TaskRunner
from news_client.ui.ui_state import Empty, Error, Loading, Success, UiState

HISTORY_PAGE_SIZE = 10


class HistoryViewModel(QObject):
    """ViewModel for the browsing history screen.

    Lists cached articles by last view time, deletes single entries and clears the unbookmarked ones.
    """

    state_changed = pyqtSignal(object)
    error_occurred = pyqtSignal(str)

    def __init__(self, repository: FeedRepository, task_runner: TaskRunner,
                 page_size: int = HISTORY_PAGE_SIZE, parent: Optional[QObject] = None):
        super().__init__(parent)
        self.logger = logging.getLogger('news_client.ui.viewmodels.history')
        self.repository = repository
        self.task_runner = task_runner
        self.page_size = page_size
        self._state: UiState = Empty()
        self._page = 1
        self._request = 0

    @property
    def state(self) -> UiState:
        return self._state

    @property
    def page(self) -> int:
        return self._page

    def _set_state(self, state: UiState):
        self._state = state
        self.state_changed.emit(state)

    def load(self, page: int = 1):
        self.logger.debug(f"Loading browsing history page {page}...")
        self._request += 1
        self._page = page
        self._set_state(Loading())
        self.task_runner.submit(
            partial(self.repository.get_recent, page, self.page_size),
            on_success=partial(self._on_loaded, self._request),
            on_error=partial(self._on_failed, self._request),
        )

    def _on_loaded(self, request: int, articles):
        if request != self._request:
            return
        self.logger.info(f"Loaded {len(articles)} history items.")
        self._set_state(Success(list(articles)) if articles else Empty())

    def _on_failed(self, request: int, error: Exception):
        if request != self._request:
            return
        self.logger.error(f"Error loading browse history: {error}")
        self._set_state(Error(f"加载浏览历史失败: {error}"))

    @pyqtSlot()
    def clear_history(self):
        """Delete every unbookmarked cached article, then reload."""
        self.logger.debug("Request to clear browsing history.")
        self.task_runner.submit(
            self.repository.clear_history,
            on_success=self._on_cleared,
            on_error=self._on_clear_failed,
        )

    def _on_cleared(self, deleted: int):
        self.logger.info(f"Cleared {deleted} history items.")
        self.load(1)

    def _on_clear_failed(self, error: Exception):
        self.logger.error(f"Error clearing browse history: {error}")
        self.error_occurred.emit(f"清空浏览历史失败: {error}")

    @pyqtSlot(str)
    def delete_item(self, article_id: str):
        """Remove one article from the history and reload the current page."""
        self.logger.debug(f"Request to delete history item {article_id}.")
        self.task_runner.submit(
            partial(self.repository.delete_history_item, article_id),
            on_success=self._on_item_deleted,
            on_error=self._on_delete_failed,
        )

    def _on_item_deleted(self, deleted: bool):
        if not deleted:
            self.logger.info("History item was bookmarked or already gone, nothing deleted.")
        self.load(self._page)

    def _on_delete_failed(self, error: Exception):
        self.logger.error(f"Error deleting history item: {error}")
        self.error_occurred.emit(f"删除历史记录失败: {error}")
