# news_client/storage/user_state_store.py
import json
import logging
from typing import List, Optional, Set

from PySide6.QtCore import QSettings

from news_client.exceptions import PersistenceFailure
from news_client.models import DEFAULT_CATEGORIES, NewsCategory

logger = logging.getLogger('news_client.storage.user_state_store')


class UserStateStore:
    """持久化用户选择的分类和已读新闻 ID。

    值以 JSON 字符串形式保存在 QSettings 中。
    """

    SELECTED_CATEGORIES_KEY = "user/selected_categories"
    CATEGORY_ORDER_KEY = "user/category_order"
    READ_IDS_KEY = "user/read_news_ids"

    def __init__(self, settings: Optional[QSettings] = None,
                 organization: str = "NewsClient", application: str = "NewsReader"):
        self.settings = settings if settings is not None else QSettings(organization, application)
        logger.info(f"UserStateStore initialized. Settings file: {self.settings.fileName()}")

    def _load_json_list(self, key: str) -> Optional[list]:
        raw = self.settings.value(key, None)
        if raw is None:
            return None
        try:
            values = json.loads(raw)
        except (TypeError, ValueError) as e:
            logger.warning(f"Stored value for '{key}' is not valid JSON, ignoring it: {e}")
            return None
        if not isinstance(values, list):
            logger.warning(f"Stored value for '{key}' is not a list, ignoring it.")
            return None
        return values

    def _save_json_list(self, key: str, values: list):
        self.settings.setValue(key, json.dumps(values, ensure_ascii=False))
        self.settings.sync()
        if self.settings.status() != QSettings.Status.NoError:
            raise PersistenceFailure(f"无法保存设置 '{key}' (status={self.settings.status()})")

    @staticmethod
    def _to_categories(values: list) -> List[NewsCategory]:
        categories = []
        for value in values:
            category = NewsCategory.from_value(str(value))
            if category is not None and category not in categories:
                categories.append(category)
        return categories

    # --- 分类 ---

    def get_selected_categories(self) -> List[NewsCategory]:
        """获取用户选择的分类；从未保存过时返回默认分类。"""
        values = self._load_json_list(self.SELECTED_CATEGORIES_KEY)
        if values is None:
            return list(DEFAULT_CATEGORIES)
        return self._to_categories(values)

    def set_selected_categories(self, categories: List[NewsCategory]):
        self._save_json_list(self.SELECTED_CATEGORIES_KEY, [c.value for c in categories])
        logger.debug(f"Saved selected categories: {[c.value for c in categories]}")

    def get_category_order(self) -> List[NewsCategory]:
        """分类显示顺序；未保存时与已选分类相同。"""
        values = self._load_json_list(self.CATEGORY_ORDER_KEY)
        if values is None:
            return self.get_selected_categories()
        return self._to_categories(values)

    def set_category_order(self, categories: List[NewsCategory]):
        self._save_json_list(self.CATEGORY_ORDER_KEY, [c.value for c in categories])

    # --- 已读状态 ---

    def get_read_ids(self) -> Set[str]:
        values = self._load_json_list(self.READ_IDS_KEY)
        if values is None:
            return set()
        return {str(v) for v in values}

    def set_read_ids(self, read_ids: Set[str]):
        self._save_json_list(self.READ_IDS_KEY, sorted(read_ids))
