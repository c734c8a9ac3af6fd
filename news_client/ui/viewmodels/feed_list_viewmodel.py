#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
新闻列表 ViewModel - 管理刷新、加载更多、分类切换和已读状态
"""

import logging
from functools import partial
from typing import Iterable, List, Optional, Tuple

from PySide6.QtCore import QObject, Signal as pyqtSignal, Slot as pyqtSlot

from news_client.core.feed_repository import FeedRepository
from news_client.core.read_state import ReadStateSet
from news_client.core.task_runner import TaskRunner
from news_client.models import (Article, FeedListState, ListPhase, NewsCategory, PaginatedResult,
                                ResultSource)
from news_client.storage.user_state_store import UserStateStore

DEFAULT_PAGE_SIZE = 15

_CURRENT = object()


def merge_unique(existing: Iterable[Article], incoming: Iterable[Article]) -> Tuple[Article, ...]:
    """按 id 去重追加: 已存在的 id 保持原位置，新文章按获取顺序排在后面。"""
    merged: List[Article] = []
    seen = set()
    for article in list(existing) + list(incoming):
        if article.id in seen:
            continue
        seen.add(article.id)
        merged.append(article)
    return tuple(merged)


class FeedListViewModel(QObject):
    """
    新闻列表的 ViewModel。

    状态机 IDLE / REFRESHING / APPENDING 叠加在 FeedListState 快照上。
    每个请求带有代号 (generation) 和发起时的分类；完成时两者有一项不再匹配就丢弃结果。
    所有状态修改都发生在所属线程，阻塞调用通过 TaskRunner 在线程池中执行。
    """

    state_changed = pyqtSignal(object)  # FeedListState
    error_occurred = pyqtSignal(str)

    def __init__(self, repository: FeedRepository, user_state_store: UserStateStore, task_runner: TaskRunner,
                 page_size: int = DEFAULT_PAGE_SIZE, read_state: Optional[ReadStateSet] = None,
                 parent: Optional[QObject] = None):
        super().__init__(parent)
        self.logger = logging.getLogger('news_client.ui.viewmodels.feed_list')
        self.repository = repository
        self.user_state_store = user_state_store
        self.task_runner = task_runner
        self.page_size = page_size
        self.read_state = read_state if read_state is not None else ReadStateSet(user_state_store)

        self._phase = ListPhase.IDLE
        self._category: Optional[NewsCategory] = None
        self._page = 1
        self._generation = 0
        self._categories: List[NewsCategory] = []
        self._state = FeedListState(read_ids=self.read_state.snapshot())

        self._start()

    def _start(self):
        """加载已保存的分类；有分类时自动选中第一个并刷新。"""
        self._categories = list(self.user_state_store.get_selected_categories())
        self.logger.info(f"Saved categories: {[c.value for c in self._categories]}")
        if self._category is None and self._categories:
            self.select_category(self._categories[0])
        else:
            self.logger.info("No saved categories, staying idle with an empty list.")

    # --- 属性 ---

    @property
    def state(self) -> FeedListState:
        return self._state

    @property
    def phase(self) -> ListPhase:
        return self._phase

    @property
    def current_category(self) -> Optional[NewsCategory]:
        return self._category

    @property
    def current_page(self) -> int:
        return self._page

    @property
    def categories(self) -> List[NewsCategory]:
        return list(self._categories)

    def _set_state(self, **changes):
        self._state = self._state.with_changes(**changes)
        self.state_changed.emit(self._state)

    def _next_generation(self) -> int:
        self._generation += 1
        return self._generation

    def _is_stale(self, generation: int, category: Optional[NewsCategory]) -> bool:
        return generation != self._generation or category != self._category

    # --- 意图 ---

    def refresh(self, category=_CURRENT) -> bool:
        """
        刷新列表 (第 1 页替换现有列表)。

        不传参数时刷新当前分类；传入其他分类等同于 select_category。
        正在刷新时再次调用不做任何事；正在加载更多时，加载更多的结果会被丢弃。

        Returns:
            是否发出了新的请求。
        """
        if category is not _CURRENT and category != self._category:
            return self.select_category(category)
        if self._phase is ListPhase.REFRESHING:
            self.logger.debug("Refresh already in flight, ignoring.")
            return False
        if self._phase is ListPhase.APPENDING:
            self.logger.debug("Refresh supersedes in-flight append.")
        self._start_refresh()
        return True

    def _start_refresh(self):
        generation = self._next_generation()
        category = self._category
        self._phase = ListPhase.REFRESHING
        self._page = 1
        self._set_state(is_refreshing=True, is_loading_more=False, error=None, category=category)
        self.logger.info(f"Refreshing category {category.value if category else '全部'} (generation {generation}).")
        self.task_runner.submit(
            partial(self.repository.fetch_page, category, None, 1, self.page_size),
            on_success=partial(self._on_refresh_done, generation, category),
            on_error=partial(self._on_refresh_failed, generation, category),
        )

    def _on_refresh_done(self, generation: int, category: Optional[NewsCategory], result: PaginatedResult):
        if self._is_stale(generation, category):
            self.logger.debug(f"Discarding stale refresh result (generation {generation}).")
            return
        self._phase = ListPhase.IDLE
        if result.source is ResultSource.NONE and result.error:
            # 远程和缓存都不可用: 保留现有列表
            self.logger.warning(f"Refresh failed: {result.error}")
            self._set_state(is_refreshing=False, error=result.error)
            self.error_occurred.emit(result.error)
            return
        self._set_state(
            articles=merge_unique((), result.articles),
            is_refreshing=False,
            has_more=result.has_more,
            from_cache=result.is_from_cache,
            error=result.error,
        )
        if result.error:
            self.error_occurred.emit(result.error)

    def _on_refresh_failed(self, generation: int, category: Optional[NewsCategory], error: Exception):
        if self._is_stale(generation, category):
            return
        self._phase = ListPhase.IDLE
        message = f"刷新失败: {error}"
        self.logger.error(message)
        self._set_state(is_refreshing=False, error=message)
        self.error_occurred.emit(message)

    @pyqtSlot()
    def load_more(self) -> bool:
        """
        加载下一页并去重追加。只在 IDLE 且 has_more 时生效。

        Returns:
            是否发出了新的请求。
        """
        if self._phase is not ListPhase.IDLE or not self._state.has_more:
            self.logger.debug(f"load_more ignored (phase={self._phase.value}, has_more={self._state.has_more}).")
            return False
        generation = self._next_generation()
        category = self._category
        page = self._page + 1
        self._phase = ListPhase.APPENDING
        self._set_state(is_loading_more=True, error=None)
        self.logger.info(f"Loading page {page} of {category.value if category else '全部'}.")
        self.task_runner.submit(
            partial(self.repository.fetch_page, category, None, page, self.page_size),
            on_success=partial(self._on_append_done, generation, category, page),
            on_error=partial(self._on_append_failed, generation, category),
        )
        return True

    def _on_append_done(self, generation: int, category: Optional[NewsCategory], page: int,
                        result: PaginatedResult):
        if self._is_stale(generation, category):
            self.logger.debug(f"Discarding stale append result for page {page}.")
            return
        self._phase = ListPhase.IDLE
        if result.source is not ResultSource.REMOTE:
            # 远程失败时的缓存回退不算新的一页: 游标不前进，has_more 不变，下次滚动到底部时重试
            message = result.error or "加载更多失败"
            self.logger.warning(f"Append of page {page} failed: {message}")
            self._set_state(is_loading_more=False, error=message)
            self.error_occurred.emit(message)
            return
        self._page = page
        self._set_state(
            articles=merge_unique(self._state.articles, result.articles),
            is_loading_more=False,
            has_more=result.has_more,
            from_cache=False,
            error=None,
        )

    def _on_append_failed(self, generation: int, category: Optional[NewsCategory], error: Exception):
        if self._is_stale(generation, category):
            return
        self._phase = ListPhase.IDLE
        message = f"加载更多失败: {error}"
        self.logger.error(message)
        self._set_state(is_loading_more=False, error=message)
        self.error_occurred.emit(message)

    @pyqtSlot(object)
    def select_category(self, category: Optional[NewsCategory]) -> bool:
        """
        切换分类并刷新。分类未变时不做任何事。

        切换会重置分页，并使上一个分类的所有在途请求失效。
        """
        if category == self._category:
            return False
        self.logger.info(f"Category selected: {category.value if category else '全部'}")
        self._category = category
        self._page = 1
        self._state = self._state.with_changes(articles=(), has_more=False, from_cache=False,
                                               is_loading_more=False, category=category, error=None)
        self._start_refresh()
        return True

    @pyqtSlot(list)
    def set_categories(self, categories: List[NewsCategory]):
        """分类列表变化后调用；当前分类被移除时切换到第一个分类。"""
        self._categories = list(categories)
        if self._category is not None and self._category not in self._categories:
            if self._categories:
                self.select_category(self._categories[0])
            else:
                self.logger.info("All categories removed.")
        elif self._category is None and self._categories and not self._generation:
            self.select_category(self._categories[0])

    @pyqtSlot(str)
    def mark_read(self, article_id: str):
        """标记已读。持久化失败只记录日志，不影响界面。"""
        if self.read_state.add(article_id):
            self._set_state(read_ids=self.read_state.snapshot())

    def is_read(self, article_id: str) -> bool:
        return article_id in self.read_state
