#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
配置模块 - 默认配置和环境变量覆盖

默认值写入容器的 providers.Configuration，环境变量 (可来自 .env) 覆盖其中的部分键。
"""

import copy
import logging
from typing import Any, Dict

from dependency_injector import providers

logger = logging.getLogger('news_client.config.settings')

DEFAULT_CONFIG: Dict[str, Any] = {
    "api": {
        "base_url": "https://api2.newsminer.net/",
        "endpoint": "svc/news/queryNewsList",
        "timeout_seconds": 30,
    },
    "summary": {
        "api_url": "https://open.bigmodel.cn/api/paas/v4/chat/completions",
        "model": "glm-4-plus",
        "max_tokens": 200,
        "timeout_seconds": 60,
    },
    "feed": {
        "page_size": 15,
        "search_page_size": 100,
        "start_date": "2024-06-15 00:00:00",
        "end_date": "",  # 为空时使用当天 23:59:59
    },
    "paths": {
        "data_dir": "data",
        "db_name": "news_cache.db",
    },
    "settings": {
        "organization": "NewsClient",
        "application": "NewsReader",
    },
    "logging": {
        "level": "INFO",
    },
}

# 环境变量 -> 配置项
ENV_OVERRIDES = {
    "NEWS_CLIENT_API_BASE_URL": ("api", "base_url", str),
    "NEWS_CLIENT_API_TIMEOUT": ("api", "timeout_seconds", int),
    "NEWS_CLIENT_PAGE_SIZE": ("feed", "page_size", int),
    "NEWS_CLIENT_DATA_DIR": ("paths", "data_dir", str),
    "NEWS_CLIENT_LOG_LEVEL": ("logging", "level", str),
    "NEWS_CLIENT_SUMMARY_MODEL": ("summary", "model", str),
}


def default_config() -> Dict[str, Any]:
    """返回默认配置的深拷贝。"""
    return copy.deepcopy(DEFAULT_CONFIG)


def load_config(config: providers.Configuration) -> providers.Configuration:
    """
    将默认配置加载到 Configuration provider，然后应用环境变量覆盖。

    Args:
        config: 容器中的 Configuration provider。

    Returns:
        同一个 Configuration provider，便于链式调用。
    """
    config.from_dict(default_config())
    for env_name, (section, key, converter) in ENV_OVERRIDES.items():
        option = getattr(getattr(config, section), key)
        option.from_env(env_name, as_=converter, default=DEFAULT_CONFIG[section][key])
    logger.debug(f"Configuration loaded: {config()}")
    return config
