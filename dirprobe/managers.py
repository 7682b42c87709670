# -*- coding: utf-8 -*-
"""
管理器模块：主机自适应计时与认证
"""

import asyncio
import base64
import logging
import time
from datetime import datetime
from typing import Dict, Optional
from urllib.parse import urlsplit

from .config import ScanConfig
from .models import HostTimingState

logger = logging.getLogger(__name__)

PING_PORTS = (80, 443)
PING_TIMEOUT = 5.0

DELAY_MULTIPLIER = 10.0
MIN_DELAY = 0.1
MAX_DELAY = 5.0

TIMEOUT_MULTIPLIER = 30.0
MIN_TIMEOUT = 5.0
MAX_TIMEOUT = 30.0

SLOW_MULTIPLIER = 20.0
DEFAULT_SLOW_THRESHOLD = 2.0


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def derive_smart_delay(baseline: float) -> float:
    """基线延迟的10倍，限制在 [0.1s, 5s]"""
    return _clamp(baseline * DELAY_MULTIPLIER, MIN_DELAY, MAX_DELAY)


def derive_smart_timeout(baseline: float) -> float:
    """基线延迟的30倍，限制在 [5s, 30s]"""
    return _clamp(baseline * TIMEOUT_MULTIPLIER, MIN_TIMEOUT, MAX_TIMEOUT)


def _dial_host(host: str) -> str:
    """去掉端口，返回用于TCP探测的主机名"""
    hostname = urlsplit(f'//{host}').hostname
    return hostname or host


class HostTimingRegistry:
    """主机计时注册表

    首次访问某主机时测量一次TCP连接延迟，推导出该主机的智能延迟和超时，
    并发的首次访问共享同一次校准。
    """

    def __init__(self, config: ScanConfig, open_connection=asyncio.open_connection):
        self.config = config
        self._open_connection = open_connection
        self._states: Dict[str, HostTimingState] = {}
        self._inflight: Dict[str, asyncio.Task] = {}
        self._lock = asyncio.Lock()

    async def resolve(self, host: str) -> HostTimingState:
        """返回主机计时状态，必要时进行唯一一次校准"""
        state = self._states.get(host)
        if state is not None:
            return state
        if not host:
            return self._fallback_state(host)

        async with self._lock:
            state = self._states.get(host)
            if state is not None:
                return state
            task = self._inflight.get(host)
            if task is None:
                task = asyncio.ensure_future(self._calibrate(host))
                self._inflight[host] = task
        # shield: 一个调用者被取消不影响其他等待同一次校准的调用者
        return await asyncio.shield(task)

    async def _calibrate(self, host: str) -> HostTimingState:
        state = self._fallback_state(host)
        try:
            baseline = await self._measure(host)
        except Exception as e:
            # 任何测量失败都按两个端口都连不上处理
            logger.warning(f"主机 {host} 延迟测量失败，使用默认配置: {e!r}")
        else:
            state = HostTimingState(
                host=host,
                baseline=baseline,
                smart_delay=derive_smart_delay(baseline),
                smart_timeout=derive_smart_timeout(baseline),
                last_calibrated=datetime.now(),
                alive=True,
            )
            logger.debug(f"主机 {host} 基线延迟 {baseline * 1000:.1f}ms, "
                         f"智能延迟 {state.smart_delay:.2f}s, 智能超时 {state.smart_timeout:.1f}s")
        finally:
            self._states[host] = state
            self._inflight.pop(host, None)
        return state

    async def _measure(self, host: str) -> float:
        """依次尝试80、443端口，返回建立连接耗时（秒）"""
        hostname = _dial_host(host)
        start = time.monotonic()
        last_error: Optional[Exception] = None
        for port in PING_PORTS:
            try:
                _, writer = await asyncio.wait_for(
                    self._open_connection(hostname, port), timeout=PING_TIMEOUT)
            except (OSError, ValueError, asyncio.TimeoutError) as e:
                # 主机名无法编码时 getaddrinfo 抛出 UnicodeError
                last_error = e
                continue
            elapsed = time.monotonic() - start
            writer.close()
            return elapsed
        raise OSError(f"无法连接 {hostname}: {last_error}")

    def _fallback_state(self, host: str) -> HostTimingState:
        conn = self.config.connection
        return HostTimingState(host=host, smart_delay=conn.delay, smart_timeout=conn.timeout)

    async def smart_delay(self, host: str) -> float:
        return (await self.resolve(host)).smart_delay

    async def smart_timeout(self, host: str) -> float:
        return (await self.resolve(host)).smart_timeout

    def is_slow_response(self, host: str, elapsed: float) -> bool:
        """响应时间超过基线20倍视为慢响应，未校准时阈值为2秒"""
        state = self._states.get(host)
        if state is not None and state.calibrated:
            return elapsed > state.baseline * SLOW_MULTIPLIER
        return elapsed > DEFAULT_SLOW_THRESHOLD

    def host_stats(self) -> Dict[str, HostTimingState]:
        return dict(self._states)


class AuthHandler:
    """认证处理器，只附加静态凭据头"""

    def __init__(self):
        self.auth_headers = {}

    def set_basic_auth(self, username: str, password: str):
        """设置基础认证"""
        token = base64.b64encode(f"{username}:{password}".encode('utf-8')).decode('ascii')
        self.auth_headers['Authorization'] = f'Basic {token}'

    def set_bearer_token(self, token: str):
        """设置Bearer令牌"""
        self.auth_headers['Authorization'] = f'Bearer {token}'

    def get_auth_headers(self) -> Dict[str, str]:
        return self.auth_headers.copy()

    @classmethod
    def from_config(cls, config: ScanConfig) -> 'AuthHandler':
        handler = cls()
        request = config.request
        if request.auth_type == 'basic' and request.auth:
            username, password = request.auth.split(':', 1)
            handler.set_basic_auth(username, password)
        elif request.auth_type == 'bearer' and request.auth:
            handler.set_bearer_token(request.auth)
        return handler
