# -*- coding: utf-8 -*-
"""
会话模块：保留结果集与停止信号
"""

import asyncio
import threading
from typing import List, Optional

from .analyzers import StatusFilter
from .models import ProbeResult


class ResultAggregator:
    """结果聚合器，所有写入经由同一把锁，读取返回副本"""

    def __init__(self, status_filter: Optional[StatusFilter] = None):
        self.status_filter = status_filter or StatusFilter()
        self._results: List[ProbeResult] = []
        self._lock = threading.Lock()

    def add(self, result: ProbeResult) -> bool:
        """按过滤规则保留结果，返回是否保留"""
        if not self.status_filter.should_include(result.status):
            return False
        with self._lock:
            self._results.append(result)
        return True

    def snapshot(self) -> List[ProbeResult]:
        with self._lock:
            return list(self._results)

    def clear(self):
        with self._lock:
            self._results.clear()

    def __len__(self):
        with self._lock:
            return len(self._results)


class ScanSession:
    """一次扫描的可变状态：保留的结果和共享的停止信号"""

    def __init__(self, status_filter: Optional[StatusFilter] = None):
        self.aggregator = ResultAggregator(status_filter)
        self.stopped = asyncio.Event()
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    def reset(self):
        """清空保留的结果和停止信号"""
        self.aggregator.clear()
        self.stopped.clear()

    def bind_loop(self, loop: asyncio.AbstractEventLoop):
        self._loop = loop

    def stop(self):
        """设置停止信号，可以在任意线程或信号处理函数中调用"""
        loop = self._loop
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if loop is not None and loop is not running and loop.is_running():
            loop.call_soon_threadsafe(self.stopped.set)
        else:
            self.stopped.set()

    def is_stopped(self) -> bool:
        return self.stopped.is_set()

    def add(self, result: ProbeResult) -> bool:
        return self.aggregator.add(result)

    def results(self) -> List[ProbeResult]:
        return self.aggregator.snapshot()
