# tests/conftest.py
import logging
import os
import sys
from typing import Any, Callable, List, Optional, Tuple
from unittest.mock import MagicMock

import pytest

# 无显示环境下使用 offscreen 平台运行 Qt
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

# 将项目根目录添加到 Python 路径
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from news_client.core.feed_repository import FeedRepository
from news_client.models import Article, Keyword, NewsCategory
from news_client.storage.news_cache import NewsCache
from news_client.storage.user_state_store import UserStateStore

# 测试期间输出 news_client 的调试日志，便于 caplog 断言
logging.getLogger('news_client').setLevel(logging.DEBUG)


def make_article(article_id: str, **overrides) -> Article:
    """构造测试用文章，未指定的字段使用合理的默认值。"""
    fields = dict(
        title=f"新闻{article_id}",
        content=f"内容{article_id}",
        publish_time="2025-03-01 08:00:00",
        category="科技",
        keywords=(Keyword(word="测试", score=0.5),),
        publisher="新华网",
    )
    fields.update(overrides)
    return Article(id=article_id, **fields)


class ManualTaskRunner:
    """按调用顺序手动执行任务的 TaskRunner 替身，用于控制异步完成顺序。"""

    def __init__(self):
        self.queue: List[Tuple[Callable[[], Any], Optional[Callable], Optional[Callable]]] = []
        self.submitted = 0

    @property
    def pending_count(self) -> int:
        return len(self.queue)

    def submit(self, fn, on_success=None, on_error=None) -> int:
        self.submitted += 1
        self.queue.append((fn, on_success, on_error))
        return self.submitted

    def run_at(self, index: int):
        fn, on_success, on_error = self.queue.pop(index)
        try:
            result = fn()
        except Exception as e:
            if on_error:
                on_error(e)
            return None
        if on_success:
            on_success(result)
        return result

    def run_next(self):
        return self.run_at(0)

    def run_all(self):
        while self.queue:
            self.run_next()

    def wait_for_done(self, msecs: int = -1) -> bool:
        return True


@pytest.fixture
def article_factory():
    return make_article


@pytest.fixture
def sample_articles():
    return [make_article("a1"), make_article("a2"), make_article("a3")]


@pytest.fixture
def manual_runner():
    return ManualTaskRunner()


@pytest.fixture
def mock_repository():
    return MagicMock(spec=FeedRepository)


@pytest.fixture
def mock_user_state():
    store = MagicMock(spec=UserStateStore)
    store.get_selected_categories.return_value = [NewsCategory.TECHNOLOGY, NewsCategory.SPORTS]
    store.get_category_order.return_value = [NewsCategory.TECHNOLOGY, NewsCategory.SPORTS]
    store.get_read_ids.return_value = set()
    return store


@pytest.fixture
def memory_cache():
    cache = NewsCache(db_name=":memory:")
    yield cache
    cache.close()
