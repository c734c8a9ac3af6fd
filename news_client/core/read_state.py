#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
已读状态模块 - 单调增长的已读新闻 ID 集合
"""

import logging
from typing import FrozenSet, Optional

from news_client.exceptions import PersistenceFailure
from news_client.storage.user_state_store import UserStateStore


class ReadStateSet:
    """
    已读新闻 ID 集合。

    启动时从 UserStateStore 读取一次，之后只在内存中做并集，
    每次变更后写回完整集合。会话内集合只增不减。
    """

    def __init__(self, store: Optional[UserStateStore]):
        self.logger = logging.getLogger('news_client.core.read_state')
        if store is None:
            self.logger.warning("UserStateStore is None. Read state will not be persisted.")
        self._store = store
        self._ids = set()
        self._load()

    def _load(self):
        if not self._store:
            return
        try:
            self._ids |= self._store.get_read_ids()
            self.logger.debug(f"Loaded {len(self._ids)} read ids.")
        except Exception as e:
            self.logger.error(f"Error loading read ids, starting with an empty set: {e}", exc_info=True)

    def __contains__(self, article_id: str) -> bool:
        return article_id in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def snapshot(self) -> FrozenSet[str]:
        return frozenset(self._ids)

    def add(self, article_id: str) -> bool:
        """
        将文章标记为已读并写回完整集合。

        持久化失败只记录日志：已读状态只用于列表显示，不是事务性数据。

        Returns:
            集合是否发生变化。
        """
        if not article_id or article_id in self._ids:
            return False
        self._ids.add(article_id)
        if self._store:
            try:
                self._store.set_read_ids(set(self._ids))
            except PersistenceFailure as e:
                self.logger.error(f"Error persisting read ids after marking {article_id}: {e}")
        return True
