#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
数据模型模块 - 定义新闻客户端数据层使用的数据结构
"""

import json
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional, Tuple, Union


class NewsCategory(Enum):
    """新闻 API 支持的分类 (value 即接口中的分类名)"""
    ENTERTAINMENT = "娱乐"
    MILITARY = "军事"
    EDUCATION = "教育"
    CULTURE = "文化"
    HEALTH = "健康"
    FINANCE = "财经"
    SPORTS = "体育"
    AUTOMOBILE = "汽车"
    TECHNOLOGY = "科技"
    SOCIETY = "社会"

    @classmethod
    def from_value(cls, value: str) -> Optional["NewsCategory"]:
        for category in cls:
            if category.value == value:
                return category
        return None


# 用户未保存过偏好时使用的默认分类
DEFAULT_CATEGORIES: List[NewsCategory] = [
    NewsCategory.ENTERTAINMENT,
    NewsCategory.TECHNOLOGY,
    NewsCategory.SPORTS,
    NewsCategory.FINANCE,
    NewsCategory.SOCIETY,
]


def category_param(category: Optional[NewsCategory]) -> str:
    """None 表示"全部"分类，接口中以空字符串传递。"""
    return category.value if category else ""


@dataclass(frozen=True)
class Keyword:
    """新闻关键词及其相关度"""
    word: str
    score: float = 0.0


@dataclass(frozen=True)
class Article:
    """新闻文章数据模型

    image 字段保留接口返回的原始字符串 (可能是单个 URL，也可能是 "[url1, url2]" 形式)，
    核心层不做任何改写。
    """
    id: str
    title: str = ""
    content: str = ""
    video_url: str = ""
    image: str = ""
    publish_time: str = ""
    category: str = ""
    keywords: Tuple[Keyword, ...] = ()
    publisher: str = ""

    @classmethod
    def from_api_dict(cls, data: Dict[str, Any]) -> "Article":
        """从新闻 API 返回的 JSON 对象构造 Article。"""
        def _text(key: str) -> str:
            value = data.get(key)
            return "" if value is None else str(value)

        keywords = []
        for item in data.get("keywords") or []:
            if not isinstance(item, dict):
                continue
            try:
                score = float(item.get("score", 0.0) or 0.0)
            except (TypeError, ValueError):
                score = 0.0
            keywords.append(Keyword(word=str(item.get("word", "")), score=score))

        return cls(
            id=_text("newsID"),
            title=_text("title"),
            content=_text("content"),
            video_url=_text("video"),
            image=_text("image"),
            publish_time=_text("publishTime"),
            category=_text("category"),
            keywords=tuple(keywords),
            publisher=_text("publisher"),
        )

    def keywords_json(self) -> str:
        return json.dumps([{"word": k.word, "score": k.score} for k in self.keywords], ensure_ascii=False)

    @staticmethod
    def keywords_from_json(raw: Optional[str]) -> Tuple[Keyword, ...]:
        if not raw:
            return ()
        try:
            items = json.loads(raw)
        except (TypeError, ValueError):
            return ()
        return tuple(Keyword(word=str(i.get("word", "")), score=float(i.get("score", 0.0))) for i in items if isinstance(i, dict))

    def image_urls(self) -> List[str]:
        """解析原始 image 字段，返回其中所有 http(s) 地址。"""
        raw = (self.image or "").strip()
        if not raw or raw == "[]":
            return []
        if raw.startswith("[") and raw.endswith("]"):
            parts = [p.strip().strip('"') for p in raw[1:-1].split(",")]
        else:
            parts = [raw]
        return [p for p in parts if p.startswith("http://") or p.startswith("https://")]

    @property
    def primary_image_url(self) -> str:
        urls = self.image_urls()
        return urls[0] if urls else ""


@dataclass(frozen=True)
class CachedArticle:
    """本地缓存中的文章: 附带收藏标记和最后浏览时间戳"""
    article: Article
    is_bookmarked: bool = False
    viewed_at: float = 0.0


@dataclass(frozen=True)
class FeedResponse:
    """新闻 API 单次请求的响应"""
    data: List[Article]
    total: int
    page_size: int


class ResultSource(Enum):
    REMOTE = "remote"
    CACHE = "cache"
    NONE = "none"


@dataclass(frozen=True)
class PaginatedResult:
    """分页结果

    has_more 的计算方式取决于来源:
    - 分页获取: page * page_size < total
    - 搜索 (无游标): total > len(articles)
    - 缓存回退: 永远为 False，离线浏览不声称还有更多数据
    """
    articles: Tuple[Article, ...] = ()
    total_count: int = 0
    has_more: bool = False
    source: ResultSource = ResultSource.NONE
    error: Optional[str] = None

    @classmethod
    def from_page(cls, articles: List[Article], total: int, page: int, page_size: int) -> "PaginatedResult":
        return cls(
            articles=tuple(articles),
            total_count=total,
            has_more=(page * page_size) < total,
            source=ResultSource.REMOTE,
        )

    @classmethod
    def from_search(cls, articles: List[Article], total: int) -> "PaginatedResult":
        return cls(
            articles=tuple(articles),
            total_count=total,
            has_more=total > len(articles),
            source=ResultSource.REMOTE,
        )

    @classmethod
    def from_cache(cls, articles: List[Article], error: Optional[str] = None) -> "PaginatedResult":
        return cls(
            articles=tuple(articles),
            total_count=len(articles),
            has_more=False,
            source=ResultSource.CACHE,
            error=error,
        )

    @classmethod
    def empty(cls, error: Optional[str] = None) -> "PaginatedResult":
        return cls(error=error)

    @property
    def is_from_cache(self) -> bool:
        return self.source is ResultSource.CACHE


@dataclass(frozen=True)
class DateRange:
    """闭区间日期范围，格式 YYYY-MM-DD"""
    start: str
    end: str

    def as_query(self) -> str:
        return f"{self.start},{self.end}"


class SearchMode(Enum):
    NO_QUERY = "no_query"
    KEYWORD_ONLY = "keyword_only"
    DATE_ONLY = "date_only"
    COMBINED = "combined"


@dataclass(frozen=True)
class KeywordQuery:
    keyword: str
    category: Optional[NewsCategory] = None
    mode = SearchMode.KEYWORD_ONLY


@dataclass(frozen=True)
class DateQuery:
    date_range: DateRange
    category: Optional[NewsCategory] = None
    mode = SearchMode.DATE_ONLY


@dataclass(frozen=True)
class CombinedQuery:
    keyword: str
    date_range: DateRange
    category: Optional[NewsCategory] = None
    mode = SearchMode.COMBINED


SearchQuery = Union[KeywordQuery, DateQuery, CombinedQuery]


def build_search_query(keyword: Optional[str], date_range: Optional[DateRange],
                       category: Optional[NewsCategory] = None) -> Optional[SearchQuery]:
    """根据输入的关键词和日期范围确定搜索类型；两者都为空时返回 None (无查询)。"""
    keyword = (keyword or "").strip()
    if keyword and date_range:
        return CombinedQuery(keyword=keyword, date_range=date_range, category=category)
    if keyword:
        return KeywordQuery(keyword=keyword, category=category)
    if date_range:
        return DateQuery(date_range=date_range, category=category)
    return None


class ListPhase(Enum):
    IDLE = "idle"
    REFRESHING = "refreshing"
    APPENDING = "appending"


@dataclass(frozen=True)
class FeedListState:
    """新闻列表状态快照 (只由 FeedListViewModel 修改)"""
    articles: Tuple[Article, ...] = ()
    is_refreshing: bool = False
    is_loading_more: bool = False
    has_more: bool = False
    read_ids: FrozenSet[str] = field(default_factory=frozenset)
    category: Optional[NewsCategory] = None
    from_cache: bool = False
    error: Optional[str] = None

    def with_changes(self, **changes) -> "FeedListState":
        return replace(self, **changes)

    def is_read(self, article_id: str) -> bool:
        return article_id in self.read_ids
