# -*- coding: utf-8 -*-
# news_client/ui/viewmodels/search_viewmodel.py
import logging
from functools import partial
from typing import Optional

from PySide6.QtCore import QObject, Signal as pyqtSignal, Slot as pyqtSlot

from news_client.core.feed_repository import FeedRepository
from news_client.core.task_runner import TaskRunner
from news_client.models import (CombinedQuery, DateQuery, DateRange, KeywordQuery, NewsCategory,
                                PaginatedResult, SearchMode, SearchQuery, build_search_query)
from news_client.ui.ui_state import Empty, Error, Loading, Success, UiState


class SearchViewModel(QObject):
    """ViewModel for the search screen.

    Search results live in their own slot and always replace the previous
    result. Each query is a fresh remote call; a response that belongs to an
    older query is dropped.
    """

    state_changed = pyqtSignal(object)  # UiState

    def __init__(self, repository: FeedRepository, task_runner: TaskRunner, parent: Optional[QObject] = None):
        super().__init__(parent)
        self.logger = logging.getLogger('news_client.ui.viewmodels.search')
        self.repository = repository
        self.task_runner = task_runner

        self._state: UiState = Empty()
        self._mode = SearchMode.NO_QUERY
        self._query: Optional[SearchQuery] = None
        self._generation = 0

    @property
    def state(self) -> UiState:
        return self._state

    @property
    def mode(self) -> SearchMode:
        return self._mode

    @property
    def query(self) -> Optional[SearchQuery]:
        return self._query

    def _set_state(self, state: UiState):
        self._state = state
        self.state_changed.emit(state)

    def _call_for(self, query: SearchQuery):
        if isinstance(query, CombinedQuery):
            return partial(self.repository.search_combined, query.keyword, query.date_range, query.category)
        if isinstance(query, DateQuery):
            return partial(self.repository.search_by_date_range, query.date_range, query.category)
        if isinstance(query, KeywordQuery):
            return partial(self.repository.search, query.keyword, query.category)
        raise TypeError(f"Unsupported search query: {query!r}")

    def search(self, query: Optional[SearchQuery]):
        """Issue a search. ``None`` (no keyword and no date) clears the results."""
        if query is None:
            self.clear()
            return
        self._generation += 1
        generation = self._generation
        self._query = query
        self._mode = query.mode
        self.logger.info(f"Searching ({query.mode.value}): {query}")
        self._set_state(Loading())
        self.task_runner.submit(
            self._call_for(query),
            on_success=partial(self._on_search_done, generation),
            on_error=partial(self._on_search_failed, generation),
        )

    def search_text(self, keyword: Optional[str], date_range: Optional[DateRange] = None,
                    category: Optional[NewsCategory] = None):
        """Build the query from raw inputs and search."""
        self.search(build_search_query(keyword, date_range, category))

    @pyqtSlot()
    def clear(self):
        """Reset to the initial state and drop any in-flight response."""
        self._generation += 1
        self._query = None
        self._mode = SearchMode.NO_QUERY
        self._set_state(Empty())

    def _on_search_done(self, generation: int, result: PaginatedResult):
        if generation != self._generation:
            self.logger.debug("Discarding result of a superseded search.")
            return
        if result.error:
            self._set_state(Error(result.error))
        elif not result.articles:
            self._set_state(Empty())
        else:
            self._set_state(Success(list(result.articles)))

    def _on_search_failed(self, generation: int, error: Exception):
        if generation != self._generation:
            return
        self.logger.error(f"Search failed: {error}")
        self._set_state(Error(f"搜索失败: {error}"))
