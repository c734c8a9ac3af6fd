# news_client/ui/ui_state.py
"""
ViewModel 对外发布的界面状态: Idle / Loading / Success / Empty / Error
"""

from dataclasses import dataclass
from typing import Any


class UiState:
    """界面状态基类，具体状态见下面的子类。"""


@dataclass(frozen=True)
class Idle(UiState):
    """尚未发起请求 (用于摘要状态)。"""


@dataclass(frozen=True)
class Loading(UiState):
    pass


@dataclass(frozen=True)
class Success(UiState):
    data: Any


@dataclass(frozen=True)
class Empty(UiState):
    pass


@dataclass(frozen=True)
class Error(UiState):
    message: str
