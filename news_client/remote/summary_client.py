"""
新闻摘要客户端 - 调用 GLM (OpenAI 兼容) chat/completions 接口生成新闻摘要
"""

import json
import logging
from typing import Any, Dict, List, Optional

import requests

from news_client.exceptions import ConnectivityFailure, RemoteProtocolFailure, SummaryError

DEFAULT_API_URL = "https://open.bigmodel.cn/api/paas/v4/chat/completions"
DEFAULT_MODEL = "glm-4-plus"

SYSTEM_PROMPT = ("你是一个专业的新闻摘要助手。请为用户提供的新闻生成简洁、准确的摘要，要求："
                 "1. 摘要长度控制在100-150字 2. 突出新闻的核心要点 3. 语言简洁明了 4. 保持客观中立")

logger = logging.getLogger('news_client.remote.summary_client')


class SummaryClient:
    """GLM 摘要客户端。API 密钥按调用传入，不保存在客户端中。"""

    def __init__(self, api_url: str = DEFAULT_API_URL, model: str = DEFAULT_MODEL,
                 max_tokens: int = 200, timeout: float = 60, session: Optional[requests.Session] = None):
        self.api_url = api_url
        self.model = model
        self.max_tokens = max_tokens
        self.timeout = timeout
        self.session = session or requests.Session()
        logger.info(f"SummaryClient initialized. URL: {self.api_url}, model: {self.model}")

    @staticmethod
    def get_headers(api_key: str) -> Dict[str, str]:
        return {
            'Content-Type': 'application/json',
            'Authorization': f'Bearer {api_key}',
        }

    def prepare_request_payload(self, title: str, content: str) -> Dict[str, Any]:
        messages: List[Dict[str, str]] = [
            {'role': 'system', 'content': SYSTEM_PROMPT},
            {'role': 'user', 'content': f"请为以下新闻生成摘要：\n\n标题：{title}\n\n内容：{content}"},
        ]
        return {
            'model': self.model,
            'messages': messages,
            'max_tokens': self.max_tokens,
            'stream': False,
        }

    @staticmethod
    def parse_response(response_data: Any) -> str:
        """取第一个 choice 的 message.content，缺失或为空时抛出 RemoteProtocolFailure。"""
        try:
            content = response_data['choices'][0]['message']['content']
        except (IndexError, KeyError, TypeError) as e:
            logger.error(f"Failed to extract summary from response: {e}. Response: {str(response_data)[:200]}")
            raise RemoteProtocolFailure(f"摘要响应格式错误: {e}") from e
        if not content or not str(content).strip():
            raise RemoteProtocolFailure("摘要响应内容为空")
        return str(content).strip()

    def summarize(self, title: str, content: str, api_key: str) -> str:
        """
        生成一篇新闻的摘要。

        Raises:
            SummaryError: 未提供 API 密钥。
            ConnectivityFailure: 无法连接或请求超时。
            RemoteProtocolFailure: 非 2xx 响应或响应体无法解析。
        """
        if not api_key or not api_key.strip():
            raise SummaryError("请先设置GLM API密钥")

        payload = self.prepare_request_payload(title, content)
        logger.debug(f"POST {self.api_url} model={self.model} content_length={len(content)}")
        try:
            response = self.session.post(self.api_url, headers=self.get_headers(api_key.strip()),
                                         json=payload, timeout=self.timeout)
        except (requests.exceptions.ConnectionError, requests.exceptions.Timeout) as e:
            logger.warning(f"Summary API unreachable: {e}")
            raise ConnectivityFailure(f"网络连接异常: {e}") from e
        except requests.exceptions.RequestException as e:
            logger.error(f"Summary request failed: {e}", exc_info=True)
            raise ConnectivityFailure(f"请求失败: {e}") from e

        if not 200 <= response.status_code < 300:
            body = response.text or ""
            logger.warning(f"Summary API returned HTTP {response.status_code}: {body[:200]}")
            raise RemoteProtocolFailure(f"摘要服务返回错误 (HTTP {response.status_code})",
                                        status_code=response.status_code, body=body)
        try:
            data = response.json()
        except (json.JSONDecodeError, ValueError) as e:
            raise RemoteProtocolFailure(f"无法解析摘要响应: {e}", status_code=response.status_code,
                                        body=response.text or "") from e
        summary = self.parse_response(data)
        logger.info(f"Summary generated ({len(summary)} chars).")
        return summary

    def close(self):
        self.session.close()
