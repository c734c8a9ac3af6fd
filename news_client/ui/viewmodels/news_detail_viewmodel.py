#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
News Detail ViewModel - 新闻详情页的 ViewModel。

文章通过 FeedRepository.get_article_by_id 从本地缓存解析，不依赖任何全局共享的文章表。
摘要按文章 id 缓存在 ViewModel 中，同一篇文章不会重复请求摘要服务。
"""

import logging
from functools import partial
from typing import Dict, Optional, Tuple

from PySide6.QtCore import QObject, Signal as pyqtSignal

from news_client.core.feed_repository import FeedRepository
from news_client.core.task_runner import TaskRunner
from news_client.models import Article
from news_client.ui.ui_state import Error, Idle, Loading, Success, UiState

NOT_FOUND_MESSAGE = "新闻未找到"
MISSING_API_KEY_MESSAGE = "请先设置GLM API密钥"
NO_ARTICLE_MESSAGE = "新闻尚未加载，无法生成摘要"


class NewsDetailViewModel(QObject):
    """
    新闻详情的 ViewModel。
    负责按 id 加载文章、记录浏览、标记已读、切换收藏和生成摘要。
    """
    # --- Signals ---
    state_changed = pyqtSignal(object)     # Loading / Success(Article) / Error
    bookmark_changed = pyqtSignal(bool)
    error_occurred = pyqtSignal(str)
    summary_state_changed = pyqtSignal(object)   # Idle / Loading / Success(str) / Error

    def __init__(self, repository: FeedRepository, task_runner: TaskRunner,
                 feed_list_viewmodel=None, parent: Optional[QObject] = None):
        """
        Args:
            repository: 新闻仓库。
            task_runner: 后台任务执行器。
            feed_list_viewmodel: 打开文章时用于标记已读的列表 ViewModel (可选)。
            parent: 父对象。
        """
        super().__init__(parent)
        self.logger = logging.getLogger('news_client.ui.viewmodels.news_detail')
        self.repository = repository
        self.task_runner = task_runner
        self.feed_list_viewmodel = feed_list_viewmodel

        self._state: UiState = Loading()
        self._article: Optional[Article] = None
        self._is_bookmarked = False
        self._request = 0
        self._summary_state: UiState = Idle()
        self._summary_cache: Dict[str, str] = {}
        self._summary_request = 0

    @property
    def state(self) -> UiState:
        return self._state

    @property
    def summary_state(self) -> UiState:
        return self._summary_state

    @property
    def article(self) -> Optional[Article]:
        return self._article

    @property
    def is_bookmarked(self) -> bool:
        return self._is_bookmarked

    def _set_state(self, state: UiState):
        self._state = state
        self.state_changed.emit(state)

    def _set_summary_state(self, state: UiState):
        self._summary_state = state
        self.summary_state_changed.emit(state)

    def _load(self, article_id: str) -> Tuple[Optional[Article], bool]:
        article = self.repository.get_article_by_id(article_id)
        if article is None:
            return None, False
        self.repository.mark_viewed(article_id)
        return article, self.repository.is_bookmarked(article_id)

    def open(self, article_id: str):
        """加载文章。找到时记录浏览并标记已读。"""
        self._request += 1
        self._article = None
        self._set_state(Loading())
        self.reset_summary()
        self.task_runner.submit(
            partial(self._load, article_id),
            on_success=partial(self._on_loaded, self._request, article_id),
            on_error=partial(self._on_load_failed, self._request),
        )

    def _on_loaded(self, request: int, article_id: str, loaded: Tuple[Optional[Article], bool]):
        if request != self._request:
            return
        article, bookmarked = loaded
        if article is None:
            self.logger.warning(f"Article {article_id} not found in cache.")
            self._set_state(Error(NOT_FOUND_MESSAGE))
            return
        self._article = article
        self._is_bookmarked = bookmarked
        self._set_state(Success(article))
        self.bookmark_changed.emit(bookmarked)
        if self.feed_list_viewmodel is not None:
            self.feed_list_viewmodel.mark_read(article_id)

    def _on_load_failed(self, request: int, error: Exception):
        if request != self._request:
            return
        self.logger.error(f"Failed to load article: {error}")
        self._set_state(Error(f"加载新闻失败: {error}"))

    def toggle_bookmark(self):
        if self._article is None:
            self.logger.debug("toggle_bookmark ignored, no article loaded.")
            return
        self.task_runner.submit(
            partial(self.repository.toggle_bookmark, self._article.id),
            on_success=self._on_bookmark_toggled,
            on_error=self._on_bookmark_failed,
        )

    def _on_bookmark_toggled(self, bookmarked: bool):
        self._is_bookmarked = bookmarked
        self.bookmark_changed.emit(bookmarked)

    def _on_bookmark_failed(self, error: Exception):
        self.logger.error(f"Failed to toggle bookmark: {error}")
        self.error_occurred.emit(f"收藏操作失败: {error}")

    # --- 摘要 ---

    def generate_summary(self, api_key: str):
        """为当前文章生成摘要。已缓存的摘要直接返回，不再请求服务。"""
        article = self._article
        if article is None:
            self._set_summary_state(Error(NO_ARTICLE_MESSAGE))
            return
        cached = self._summary_cache.get(article.id)
        if cached is not None:
            self.logger.debug(f"Summary for {article.id} served from cache.")
            self._set_summary_state(Success(cached))
            return
        if not api_key or not api_key.strip():
            self._set_summary_state(Error(MISSING_API_KEY_MESSAGE))
            return

        self._summary_request += 1
        self._set_summary_state(Loading())
        self.task_runner.submit(
            partial(self.repository.generate_summary, article, api_key),
            on_success=partial(self._on_summary_done, self._summary_request, article.id),
            on_error=partial(self._on_summary_failed, self._summary_request),
        )

    def _on_summary_done(self, request: int, article_id: str, summary: str):
        self._summary_cache[article_id] = summary
        if request != self._summary_request:
            return
        self._set_summary_state(Success(summary))

    def _on_summary_failed(self, request: int, error: Exception):
        if request != self._summary_request:
            return
        self.logger.error(f"Failed to generate summary: {error}")
        self._set_summary_state(Error(str(error) or "生成摘要失败"))

    def reset_summary(self):
        """回到 Idle，正在进行的摘要请求结果将被丢弃。"""
        self._summary_request += 1
        if not isinstance(self._summary_state, Idle):
            self._set_summary_state(Idle())

    def clear_summary_cache(self):
        self._summary_cache.clear()
