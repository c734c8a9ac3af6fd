"""
新闻 API 客户端

封装 svc/news/queryNewsList 接口的分页、关键词、日期和组合查询。
"""

import json
import logging
from typing import Any, Dict
from urllib.parse import urljoin

import requests

from news_client.exceptions import ConnectivityFailure, RemoteProtocolFailure
from news_client.models import Article, FeedResponse

DEFAULT_BASE_URL = "https://api2.newsminer.net/"
DEFAULT_ENDPOINT = "svc/news/queryNewsList"
SEARCH_PAGE_SIZE = 100


class NewsApiClient:
    """
    新闻 API 客户端类。

    所有查询都走同一个端点，只是参数组合不同。空过滤条件以空字符串传递，不省略参数。

    Attributes:
        logger: 用于记录日志的 logger 实例。
        session: 用于执行 HTTP 请求的 `requests.Session` 实例。
    """

    def __init__(self, base_url: str = DEFAULT_BASE_URL, endpoint: str = DEFAULT_ENDPOINT,
                 timeout: float = 30, search_page_size: int = SEARCH_PAGE_SIZE,
                 session: requests.Session = None):
        self.logger = logging.getLogger('news_client.remote.news_api_client')
        self.url = urljoin(base_url if base_url.endswith('/') else base_url + '/', endpoint)
        self.timeout = timeout
        self.search_page_size = search_page_size
        self.session = session or requests.Session()
        self.session.headers.update({
            'User-Agent': 'NewsClient/0.1 (+python-requests)',
            'Accept': 'application/json',
        })
        self.logger.info(f"NewsApiClient initialized. Endpoint: {self.url}, timeout: {self.timeout}s")

    def _get(self, params: Dict[str, Any]) -> FeedResponse:
        """
        发送 GET 请求并解析为 FeedResponse。

        Raises:
            ConnectivityFailure: 无法连接或请求超时。
            RemoteProtocolFailure: 非 2xx 响应，或响应体不是预期的 JSON。
        """
        self.logger.debug(f"GET {self.url} params={params}")
        try:
            response = self.session.get(self.url, params=params, timeout=self.timeout)
        except (requests.exceptions.ConnectionError, requests.exceptions.Timeout) as e:
            self.logger.warning(f"News API unreachable: {e}")
            raise ConnectivityFailure(f"网络连接异常: {e}") from e
        except requests.exceptions.RequestException as e:
            self.logger.error(f"News API request failed: {e}", exc_info=True)
            raise ConnectivityFailure(f"请求失败: {e}") from e

        if not 200 <= response.status_code < 300:
            body = response.text or ""
            self.logger.warning(f"News API returned HTTP {response.status_code}: {body[:200]}")
            raise RemoteProtocolFailure(f"服务器返回错误 (HTTP {response.status_code})",
                                        status_code=response.status_code, body=body)

        try:
            payload = response.json()
        except (json.JSONDecodeError, ValueError) as e:
            self.logger.error(f"Failed to decode JSON response from {self.url}: {e}")
            raise RemoteProtocolFailure(f"无法解析服务器响应: {e}", status_code=response.status_code,
                                        body=response.text or "") from e

        return self._parse_response(payload)

    def _parse_response(self, payload: Any) -> FeedResponse:
        if not isinstance(payload, dict):
            raise RemoteProtocolFailure("服务器响应格式错误: 顶层不是对象")
        items = payload.get("data") or []
        if not isinstance(items, list):
            raise RemoteProtocolFailure("服务器响应格式错误: 'data' 不是列表")

        articles = []
        for item in items:
            if not isinstance(item, dict) or not item.get("newsID"):
                self.logger.warning(f"Skipping news item without newsID: {str(item)[:100]}")
                continue
            try:
                articles.append(Article.from_api_dict(item))
            except (TypeError, ValueError, AttributeError) as e:
                self.logger.warning(f"Skipping malformed news item {item.get('newsID')!r}: {e}")

        try:
            total = int(payload.get("total", len(articles)) or 0)
            page_size = int(payload.get("pageSize", len(articles)) or 0)
        except (TypeError, ValueError) as e:
            raise RemoteProtocolFailure(f"服务器响应格式错误: {e}") from e

        self.logger.debug(f"Parsed {len(articles)} articles (total={total}, pageSize={page_size}).")
        return FeedResponse(data=articles, total=total, page_size=page_size)

    def list_page(self, page: int, page_size: int, start_date: str = "", end_date: str = "",
                  keyword: str = "", categories: str = "") -> FeedResponse:
        """分页获取新闻列表。"""
        return self._get({
            "page": page,
            "size": page_size,
            "startDate": start_date or "",
            "endDate": end_date or "",
            "words": keyword or "",
            "categories": categories or "",
        })

    def search(self, keyword: str, categories: str = "") -> FeedResponse:
        """按关键词搜索，单批返回。"""
        return self._get({
            "page": 1,
            "size": self.search_page_size,
            "startDate": "",
            "endDate": "",
            "words": keyword or "",
            "categories": categories or "",
        })

    def search_by_date(self, start_date: str, end_date: str, categories: str = "") -> FeedResponse:
        """按日期范围搜索，单批返回。"""
        return self._get({
            "page": 1,
            "size": self.search_page_size,
            "startDate": start_date,
            "endDate": end_date,
            "words": "",
            "categories": categories or "",
        })

    def search_combined(self, keyword: str, start_date: str, end_date: str, categories: str = "") -> FeedResponse:
        """关键词 + 日期范围组合搜索，单批返回。"""
        return self._get({
            "page": 1,
            "size": self.search_page_size,
            "startDate": start_date,
            "endDate": end_date,
            "words": keyword or "",
            "categories": categories or "",
        })

    def close(self):
        self.session.close()
