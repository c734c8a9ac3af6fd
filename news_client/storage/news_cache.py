"""
新闻本地缓存

使用 SQLite 保存最近获取的新闻，用于离线回退、浏览历史和收藏。
"""

import logging
import os
import sqlite3
import threading
import time
from typing import Iterable, List, Optional

from news_client.exceptions import PersistenceFailure
from news_client.models import Article, CachedArticle

SCHEMA_FILE = os.path.join(os.path.dirname(os.path.abspath(__file__)), "news_cache_schema.sql")

_ARTICLE_COLUMNS = [
    'id', 'title', 'content', 'video_url', 'image', 'publish_time',
    'category', 'keywords', 'publisher', 'viewed_at'
]



def _escape_like(text: str) -> str:
    """转义 LIKE 通配符，关键词按字面匹配。"""
    return text.replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')


class NewsCache:
    """新闻缓存类 - 使用 SQLite

    所有写操作都由 FeedRepository 发起；连接在线程池线程之间共享，由 RLock 串行化。
    """

    DB_FILE_NAME = "news_cache.db"

    def __init__(self, data_dir: str = "data", db_name: Optional[str] = None, ddl_file_path: Optional[str] = None):
        """初始化缓存

        Args:
            data_dir: 数据存储目录
            db_name: 数据库文件名 (":memory:" 用于测试, 默认为 DB_FILE_NAME)
            ddl_file_path: DDL 文件路径 (默认为包内的 news_cache_schema.sql)
        """
        self.logger = logging.getLogger('news_client.storage.news_cache')
        self.lock = threading.RLock()
        self._last_stamp = 0.0

        if db_name == ":memory:":
            self.db_path = ":memory:"
        else:
            self.data_dir = os.path.abspath(data_dir)
            os.makedirs(self.data_dir, exist_ok=True)
            self.db_path = os.path.join(self.data_dir, db_name if db_name else self.DB_FILE_NAME)

        self.conn: Optional[sqlite3.Connection] = None
        try:
            self._connect_db()
            self._create_tables(ddl_file_path or SCHEMA_FILE)
        except sqlite3.Error as e:
            self.logger.error(f"SQLite error during NewsCache setup for {self.db_path}: {e}", exc_info=True)
            self.close()
            raise PersistenceFailure(f"无法打开新闻缓存: {e}") from e
        self.logger.info(f"NewsCache initialized. DB path: {self.db_path}")

    def _connect_db(self):
        """连接到 SQLite 数据库"""
        self.conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self.logger.info(f"成功连接到 SQLite 数据库: {self.db_path}")

    def _create_tables(self, ddl_file_path: str):
        """从 DDL 文件创建表 (CREATE TABLE IF NOT EXISTS)"""
        with open(ddl_file_path, 'r', encoding='utf-8') as f:
            ddl_content = f.read()
        with self.lock:
            self.conn.executescript(ddl_content)
            self.conn.commit()
        self.logger.debug(f"Schema applied from {ddl_file_path}")

    def close(self):
        """关闭数据库连接"""
        if self.conn:
            try:
                self.conn.close()
                self.logger.info("SQLite 数据库连接已关闭.")
            except sqlite3.Error as e:
                self.logger.error(f"关闭数据库连接时出错: {e}", exc_info=True)
            finally:
                self.conn = None

    def _next_stamp(self) -> float:
        """严格递增的时间戳，保证同一批次内的顺序也可区分。多个线程池线程共用，需持锁。"""
        with self.lock:
            stamp = max(time.time(), self._last_stamp + 1e-6)
            self._last_stamp = stamp
            return stamp

    def _execute(self, sql: str, params: Iterable = (), commit: bool = False) -> sqlite3.Cursor:
        if not self.conn:
            raise PersistenceFailure("新闻缓存未连接")
        with self.lock:
            try:
                cursor = self.conn.execute(sql, tuple(params))
                if commit:
                    self.conn.commit()
                return cursor
            except sqlite3.Error as e:
                self.logger.error(f"SQLite error executing '{sql.strip()[:60]}...': {e}", exc_info=True)
                if commit:
                    try:
                        self.conn.rollback()
                    except sqlite3.Error as re:
                        self.logger.error(f"Rollback failed: {re}", exc_info=True)
                raise PersistenceFailure(f"缓存操作失败: {e}") from e

    @staticmethod
    def _article_from_row(row: sqlite3.Row) -> Article:
        return Article(
            id=row['id'],
            title=row['title'],
            content=row['content'],
            video_url=row['video_url'],
            image=row['image'],
            publish_time=row['publish_time'],
            category=row['category'],
            keywords=Article.keywords_from_json(row['keywords']),
            publisher=row['publisher'],
        )

    def _fetch_articles(self, sql: str, params: Iterable = ()) -> List[Article]:
        with self.lock:
            rows = self._execute(sql, params).fetchall()
        return [self._article_from_row(row) for row in rows]

    # --- 写操作 ---

    def upsert(self, articles: List[Article]) -> int:
        """
        按 id 插入或替换文章内容。收藏标记不会被重新获取覆盖。

        批次中靠前的文章获得更新的时间戳，使按最近排序的查询保持获取顺序。

        Returns:
            写入的文章数量。
        """
        if not articles:
            return 0
        stamps = {}
        for article in reversed(articles):
            stamps[article.id] = self._next_stamp()

        sql = f"""
            INSERT INTO news ({', '.join(_ARTICLE_COLUMNS)})
            VALUES ({', '.join('?' for _ in _ARTICLE_COLUMNS)})
            ON CONFLICT(id) DO UPDATE SET
                title=excluded.title,
                content=excluded.content,
                video_url=excluded.video_url,
                image=excluded.image,
                publish_time=excluded.publish_time,
                category=excluded.category,
                keywords=excluded.keywords,
                publisher=excluded.publisher,
                viewed_at=excluded.viewed_at
        """
        rows = [
            (a.id, a.title, a.content, a.video_url, a.image, a.publish_time,
             a.category, a.keywords_json(), a.publisher, stamps[a.id])
            for a in articles
        ]
        if not self.conn:
            raise PersistenceFailure("新闻缓存未连接")
        with self.lock:
            try:
                self.conn.executemany(sql, rows)
                self.conn.commit()
            except sqlite3.Error as e:
                self.logger.error(f"Failed to upsert {len(rows)} articles: {e}", exc_info=True)
                try:
                    self.conn.rollback()
                except sqlite3.Error as re:
                    self.logger.error(f"Rollback failed: {re}", exc_info=True)
                raise PersistenceFailure(f"缓存写入失败: {e}") from e
        self.logger.debug(f"Upserted {len(rows)} articles into cache.")
        return len(rows)

    def set_bookmark(self, article_id: str, bookmarked: bool) -> bool:
        """设置收藏标记。返回是否找到该文章。"""
        cursor = self._execute(
            "UPDATE news SET is_bookmarked = ? WHERE id = ?",
            (1 if bookmarked else 0, article_id),
            commit=True,
        )
        return cursor.rowcount > 0

    def touch(self, article_id: str) -> bool:
        """更新最后浏览时间。返回是否找到该文章。"""
        cursor = self._execute(
            "UPDATE news SET viewed_at = ? WHERE id = ?",
            (self._next_stamp(), article_id),
            commit=True,
        )
        return cursor.rowcount > 0

    def clear_bookmarks(self) -> int:
        """取消所有文章的收藏标记，返回受影响的数量。"""
        cursor = self._execute("UPDATE news SET is_bookmarked = 0 WHERE is_bookmarked = 1", commit=True)
        self.logger.info(f"Cleared bookmark flag on {cursor.rowcount} articles.")
        return cursor.rowcount

    def delete(self, article_id: str) -> bool:
        """删除单条未收藏的文章。收藏的文章保留，返回是否删除了记录。"""
        cursor = self._execute("DELETE FROM news WHERE id = ? AND is_bookmarked = 0", (article_id,), commit=True)
        return cursor.rowcount > 0

    def delete_unbookmarked(self) -> int:
        """删除所有未收藏的文章，返回删除数量。"""
        cursor = self._execute("DELETE FROM news WHERE is_bookmarked = 0", commit=True)
        self.logger.info(f"Deleted {cursor.rowcount} unbookmarked articles from cache.")
        return cursor.rowcount

    # --- 读操作 ---

    def get_by_id(self, article_id: str) -> Optional[Article]:
        cached = self.get_cached(article_id)
        return cached.article if cached else None

    def get_cached(self, article_id: str) -> Optional[CachedArticle]:
        with self.lock:
            row = self._execute("SELECT * FROM news WHERE id = ?", (article_id,)).fetchone()
        if row is None:
            return None
        return CachedArticle(
            article=self._article_from_row(row),
            is_bookmarked=bool(row['is_bookmarked']),
            viewed_at=row['viewed_at'],
        )

    def query_by_category_and_keyword(self, category: Optional[str] = None, keyword: Optional[str] = None) -> List[Article]:
        """按分类和关键词 (标题或内容包含) 查询，最近的在前。空值表示不过滤。"""
        clauses = []
        params: List[str] = []
        if category:
            clauses.append("category = ?")
            params.append(category)
        if keyword:
            clauses.append("(title LIKE ? ESCAPE '\\' OR content LIKE ? ESCAPE '\\')")
            pattern = f"%{_escape_like(keyword)}%"
            params.extend([pattern, pattern])
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        return self._fetch_articles(f"SELECT * FROM news {where} ORDER BY viewed_at DESC", params)

    def query_bookmarked(self) -> List[Article]:
        return self._fetch_articles("SELECT * FROM news WHERE is_bookmarked = 1 ORDER BY viewed_at DESC")

    def query_recent(self, page_size: int = 10, offset: int = 0) -> List[Article]:
        return self._fetch_articles(
            "SELECT * FROM news ORDER BY viewed_at DESC LIMIT ? OFFSET ?",
            (page_size, offset),
        )
