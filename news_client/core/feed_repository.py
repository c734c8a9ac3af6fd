#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
新闻仓库模块 - 协调远程新闻 API 与本地缓存

远程获取成功时把文章写入缓存 (尽力而为)；远程失败时回退到缓存。
任何暂时性失败都不会从这里抛出，所有路径都返回结构完整的 PaginatedResult。
"""

import logging
from typing import Callable, List, Optional

from news_client.exceptions import ConnectivityFailure, PersistenceFailure, RemoteProtocolFailure, SummaryError
from news_client.models import (Article, DateRange, FeedResponse, NewsCategory, PaginatedResult,
                                category_param)
from news_client.remote.news_api_client import NewsApiClient
from news_client.remote.summary_client import SummaryClient
from news_client.storage.news_cache import NewsCache
from news_client.utils.date_utils import end_of_today

DEFAULT_START_DATE = "2024-06-15 00:00:00"

_REMOTE_FAILURES = (ConnectivityFailure, RemoteProtocolFailure)


def _describe_failure(error: Exception) -> str:
    if isinstance(error, ConnectivityFailure):
        return "网络不可用"
    if isinstance(error, RemoteProtocolFailure) and error.status_code:
        return f"服务器错误 (HTTP {error.status_code})"
    return "服务器响应异常"


class FeedRepository:
    """新闻数据仓库

    所有方法都是阻塞调用，由 ViewModel 通过 TaskRunner 放到线程池中执行。
    """

    def __init__(self, client: NewsApiClient, cache: NewsCache,
                 start_date: str = DEFAULT_START_DATE, end_date: Optional[str] = None,
                 today_end: Callable[[], str] = end_of_today, summary_client: Optional[SummaryClient] = None):
        self.logger = logging.getLogger('news_client.core.feed_repository')
        self.client = client
        self.cache = cache
        self.start_date = start_date or DEFAULT_START_DATE
        self.end_date = end_date or None
        self._today_end = today_end
        self.summary_client = summary_client
        self.logger.info(f"FeedRepository initialized. Feed window starts at {self.start_date}")

    def _feed_end_date(self) -> str:
        return self.end_date or self._today_end()

    def _cache_quietly(self, articles: List[Article]):
        """缓存是副作用，写入失败只记录日志。"""
        if not articles:
            return
        try:
            self.cache.upsert(articles)
        except PersistenceFailure as e:
            self.logger.error(f"Failed to cache {len(articles)} articles, continuing without cache: {e}")

    # --- 分页获取 ---

    def fetch_page(self, category: Optional[NewsCategory], keyword: Optional[str],
                   page: int, page_size: int) -> PaginatedResult:
        """
        获取一页新闻。

        远程失败时回退到缓存中匹配分类和关键词的文章，并作为唯一的最后一页返回
        (has_more 永远为 False)。回退读取本身失败时返回带错误信息的空结果。
        """
        self.logger.debug(f"fetch_page(category={category}, keyword={keyword!r}, page={page}, size={page_size})")
        try:
            response = self.client.list_page(
                page=page,
                page_size=page_size,
                start_date=self.start_date,
                end_date=self._feed_end_date(),
                keyword=keyword or "",
                categories=category_param(category),
            )
        except _REMOTE_FAILURES as e:
            reason = _describe_failure(e)
            self.logger.warning(f"Remote fetch failed ({e}), falling back to cache.")
            return self._fallback_to_cache(category, keyword, reason)

        self._cache_quietly(response.data)
        result = PaginatedResult.from_page(response.data, response.total, page, page_size)
        self.logger.info(f"Fetched page {page} ({len(result.articles)} articles, total={result.total_count}, "
                         f"has_more={result.has_more}).")
        return result

    def _fallback_to_cache(self, category: Optional[NewsCategory], keyword: Optional[str],
                           reason: str) -> PaginatedResult:
        try:
            articles = self.cache.query_by_category_and_keyword(category_param(category) or None, keyword or None)
        except PersistenceFailure as e:
            self.logger.error(f"Cache fallback read failed: {e}", exc_info=True)
            return PaginatedResult.empty(error=f"{reason}，且无法读取本地缓存")
        self.logger.info(f"Serving {len(articles)} cached articles.")
        return PaginatedResult.from_cache(articles, error=f"{reason}，显示缓存内容")

    # --- 搜索 (只走远程) ---

    def _run_search(self, label: str, call: Callable[[], FeedResponse]) -> PaginatedResult:
        try:
            response = call()
        except _REMOTE_FAILURES as e:
            self.logger.warning(f"{label} failed: {e}")
            return PaginatedResult.empty(error=f"搜索失败: {_describe_failure(e)}")
        self._cache_quietly(response.data)
        self.logger.info(f"{label} returned {len(response.data)} articles (total={response.total}).")
        return PaginatedResult.from_search(response.data, response.total)

    def search(self, keyword: str, category: Optional[NewsCategory] = None) -> PaginatedResult:
        return self._run_search(
            f"Keyword search {keyword!r}",
            lambda: self.client.search(keyword=keyword, categories=category_param(category)),
        )

    def search_by_date_range(self, date_range: DateRange, category: Optional[NewsCategory] = None) -> PaginatedResult:
        """日期范围由调用方预先规范化，这里不做日期计算。"""
        return self._run_search(
            f"Date search {date_range.as_query()}",
            lambda: self.client.search_by_date(start_date=date_range.start, end_date=date_range.end,
                                               categories=category_param(category)),
        )

    def search_combined(self, keyword: str, date_range: DateRange,
                        category: Optional[NewsCategory] = None) -> PaginatedResult:
        return self._run_search(
            f"Combined search {keyword!r} @ {date_range.as_query()}",
            lambda: self.client.search_combined(keyword=keyword, start_date=date_range.start,
                                                end_date=date_range.end, categories=category_param(category)),
        )

    # --- 本地操作 ---

    def get_article_by_id(self, article_id: str) -> Optional[Article]:
        """只查本地缓存。不存在 (或读取失败) 时返回 None。"""
        try:
            return self.cache.get_by_id(article_id)
        except PersistenceFailure as e:
            self.logger.error(f"Failed to read article {article_id} from cache: {e}")
            return None

    def toggle_bookmark(self, article_id: str) -> bool:
        """
        切换收藏状态，返回新值。

        缓存中不存在的 id 视为"切换为 False"，不做任何修改。
        """
        cached = self.cache.get_cached(article_id)
        if cached is None:
            self.logger.debug(f"toggle_bookmark: {article_id} not in cache, nothing to toggle.")
            return False
        new_value = not cached.is_bookmarked
        self.cache.set_bookmark(article_id, new_value)
        self.logger.info(f"Article {article_id} bookmarked={new_value}")
        return new_value

    def set_bookmark(self, article_id: str, bookmarked: bool) -> bool:
        """直接设置收藏状态。返回文章是否存在于缓存中。"""
        return self.cache.set_bookmark(article_id, bookmarked)

    def is_bookmarked(self, article_id: str) -> bool:
        cached = self.cache.get_cached(article_id)
        return bool(cached and cached.is_bookmarked)

    def clear_history(self) -> int:
        """删除所有未收藏的缓存文章。"""
        return self.cache.delete_unbookmarked()

    def delete_history_item(self, article_id: str) -> bool:
        """从浏览历史中删除单篇文章。已收藏的文章保留，返回是否删除。"""
        deleted = self.cache.delete(article_id)
        self.logger.info(f"History item {article_id} deleted={deleted}")
        return deleted

    def clear_bookmarks(self) -> int:
        """取消全部收藏，返回取消的数量。"""
        return self.cache.clear_bookmarks()

    def get_bookmarked(self) -> List[Article]:
        return self.cache.query_bookmarked()

    def get_recent(self, page: int = 1, page_size: int = 10) -> List[Article]:
        """按最后浏览时间倒序分页读取缓存，page 从 1 开始。"""
        offset = max(page - 1, 0) * page_size
        return self.cache.query_recent(page_size=page_size, offset=offset)

    def mark_viewed(self, article_id: str) -> bool:
        """更新最后浏览时间，失败只记录日志。"""
        try:
            return self.cache.touch(article_id)
        except PersistenceFailure as e:
            self.logger.warning(f"Failed to record view of {article_id}: {e}")
            return False

    # --- 摘要 ---

    def generate_summary(self, article: Article, api_key: str) -> str:
        """
        调用摘要服务为文章生成摘要。

        Raises:
            SummaryError: 未配置摘要服务、缺少 API 密钥或文章没有可摘要的内容。
            ConnectivityFailure / RemoteProtocolFailure: 摘要服务调用失败。
        """
        if self.summary_client is None:
            raise SummaryError("摘要服务未配置")
        if not (article.title or article.content):
            raise SummaryError("新闻内容为空，无法生成摘要")
        self.logger.debug(f"Generating summary for {article.id}")
        return self.summary_client.summarize(article.title, article.content, api_key)
