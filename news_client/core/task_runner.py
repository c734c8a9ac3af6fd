#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
后台任务执行器 - 在 QThreadPool 中运行阻塞调用，并把结果送回所属线程
"""

import itertools
import logging
from typing import Any, Callable, Dict, Optional, Tuple

from PySide6.QtCore import QObject, QRunnable, QThreadPool, Signal as pyqtSignal, Slot as pyqtSlot

SuccessCallback = Callable[[Any], None]
ErrorCallback = Callable[[Exception], None]


class _WorkerSignals(QObject):
    """工作线程信号。在所属线程中创建，跨线程 emit 时以队列方式投递。"""
    finished = pyqtSignal(int, object)  # (task_id, result)
    failed = pyqtSignal(int, object)    # (task_id, exception)


class _TaskWorker(QRunnable):
    """执行单个函数调用的 QRunnable。"""

    def __init__(self, task_id: int, fn: Callable[[], Any], signals: _WorkerSignals):
        super().__init__()
        self.task_id = task_id
        self.fn = fn
        self.signals = signals
        self.logger = logging.getLogger('news_client.core.task_worker')

    @pyqtSlot()
    def run(self):
        self.logger.debug(f"Task {self.task_id} starting: {getattr(self.fn, '__name__', self.fn)}")
        try:
            result = self.fn()
        except Exception as e:
            self.logger.error(f"Task {self.task_id} raised: {e}", exc_info=True)
            self.signals.failed.emit(self.task_id, e)
            return
        self.signals.finished.emit(self.task_id, result)
        self.logger.debug(f"Task {self.task_id} finished.")


class TaskRunner(QObject):
    """
    在线程池中运行阻塞函数，并在 TaskRunner 所在线程中调用回调。

    ViewModel 只在所属线程修改状态，因此回调总是经过 Qt 的队列连接回到该线程。
    """

    def __init__(self, thread_pool: Optional[QThreadPool] = None, parent: Optional[QObject] = None):
        super().__init__(parent)
        self.logger = logging.getLogger('news_client.core.task_runner')
        self.thread_pool = thread_pool or QThreadPool.globalInstance()
        self._ids = itertools.count(1)
        self._pending: Dict[int, Tuple[Optional[SuccessCallback], Optional[ErrorCallback]]] = {}

        self._signals = _WorkerSignals()
        self._signals.finished.connect(self._on_finished)
        self._signals.failed.connect(self._on_failed)

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def submit(self, fn: Callable[[], Any],
               on_success: Optional[SuccessCallback] = None,
               on_error: Optional[ErrorCallback] = None) -> int:
        """
        提交任务。

        Args:
            fn: 无参可调用对象，在线程池中执行。
            on_success: 成功时以返回值调用。
            on_error: fn 抛出异常时以该异常调用。

        Returns:
            任务 id。
        """
        task_id = next(self._ids)
        self._pending[task_id] = (on_success, on_error)
        self.thread_pool.start(_TaskWorker(task_id, fn, self._signals))
        return task_id

    def wait_for_done(self, msecs: int = -1) -> bool:
        """等待线程池中的任务全部结束 (用于关闭)。回调仍需事件循环投递。"""
        return self.thread_pool.waitForDone(msecs)

    @pyqtSlot(int, object)
    def _on_finished(self, task_id: int, result: Any):
        on_success, _ = self._pending.pop(task_id, (None, None))
        if on_success:
            on_success(result)

    @pyqtSlot(int, object)
    def _on_failed(self, task_id: int, error: Exception):
        _, on_error = self._pending.pop(task_id, (None, None))
        if on_error:
            on_error(error)
        else:
            self.logger.warning(f"Task {task_id} failed with no error handler: {error}")
