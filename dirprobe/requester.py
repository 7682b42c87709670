# -*- coding: utf-8 -*-
"""
请求模块：执行单次探测并把结果规范化为 ProbeResult
"""

import asyncio
import logging
import time
from datetime import datetime
from typing import Dict, Optional

import aiohttp

from .analyzers import extract_title
from .config import ScanConfig
from .errors import ProbeError
from .managers import AuthHandler, HostTimingRegistry
from .models import ProbeResult, ScanTask
from .urls import build_url, host_of, join_url

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = 'dirprobe/1.0'
SLOW_READ_BYTES = 1024
BODY_METHODS = ('POST', 'PUT', 'PATCH')
# 主机名无法编码 (UnicodeError) 时 getaddrinfo 抛出 ValueError
TRANSPORT_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError, OSError, ValueError)


def build_headers(config: ScanConfig) -> Dict[str, str]:
    """合并 User-Agent、自定义头、Cookie 和认证头"""
    request = config.request
    headers = {'User-Agent': request.user_agent or DEFAULT_USER_AGENT}
    for header in request.headers:
        key, value = header.split(':', 1)
        headers[key.strip()] = value.strip()
    if request.cookie:
        headers['Cookie'] = request.cookie
    headers.update(AuthHandler.from_config(config).get_auth_headers())
    return headers


class ProbeExecutor:
    """探测执行器

    可选的 renderer 需要提供 ``async render(url)``，返回带有 status、title、
    content_length、redirects 和 error 属性的对象。
    """

    def __init__(self, config: ScanConfig, registry: HostTimingRegistry, renderer=None):
        self.config = config
        self.registry = registry
        self.renderer = renderer
        self.headers = build_headers(config)
        self.requests_sent = 0
        self.requests_failed = 0

    async def probe(self, session: aiohttp.ClientSession, task: ScanTask) -> ProbeResult:
        """执行一次探测，任何失败都记录在结果的 error 字段，不向外抛出"""
        started = datetime.now()
        try:
            url = build_url(task.target, task.path)
        except ProbeError as e:
            return self._failed(task, join_url(task.target, task.path), e, started)

        self.requests_sent += 1
        try:
            if self.config.view.headless and self.renderer is not None:
                return await self._render(task, url, started)
            host = host_of(url)
            state = await self.registry.resolve(host)
            return await self._request(session, task, url, host, state.smart_timeout, started)
        except TRANSPORT_ERRORS as e:
            self.requests_failed += 1
            logger.debug(f"请求失败 {url}: {e!r}")
            return self._failed(task, url, e, started)
        except Exception as e:
            self.requests_failed += 1
            logger.exception(f"探测 {url} 时发生意外错误")
            return self._failed(task, url, e, started)

    async def _request(self, session: aiohttp.ClientSession, task: ScanTask, url: str,
                       host: str, timeout: float, started: datetime) -> ProbeResult:
        request = self.config.request
        method = request.http_method.upper()
        data = request.data if method in BODY_METHODS and request.data else None
        proxy = self.config.connection.proxy or None

        start = time.monotonic()
        async with session.request(method, url, headers=self.headers, data=data,
                                   allow_redirects=request.follow_redirects, proxy=proxy,
                                   timeout=aiohttp.ClientTimeout(total=timeout)) as response:
            elapsed = time.monotonic() - start
            if self.registry.is_slow_response(host, elapsed):
                # 慢响应只读前1KB，足够判断状态和类型
                content = await response.content.read(SLOW_READ_BYTES)
            else:
                content = await response.read()
            status = response.status
            headers = {k: v for k, v in response.headers.items()}
            redirect = ''
            if 300 <= status < 400:
                redirect = response.headers.get('Location', '')

        body = content.decode('utf-8', errors='ignore')
        return ProbeResult(
            target=task.target,
            path=task.path,
            url=url,
            status=status,
            content_length=len(content),
            title=extract_title(body),
            redirect=redirect,
            headers=headers,
            body=body,
            timestamp=started,
            response_time=elapsed * 1000,
        )

    async def _render(self, task: ScanTask, url: str, started: datetime) -> ProbeResult:
        rendered = await self.renderer.render(url)
        error = getattr(rendered, 'error', None)
        if error:
            return self._failed(task, url, error, started)
        return ProbeResult(
            target=task.target,
            path=task.path,
            url=url,
            status=rendered.status,
            content_length=rendered.content_length,
            title=rendered.title or '',
            redirect=' -> '.join(rendered.redirects or []),
            timestamp=started,
        )

    @staticmethod
    def _failed(task: ScanTask, url: str, error, started: Optional[datetime] = None) -> ProbeResult:
        message = str(error) or error.__class__.__name__
        return ProbeResult(
            target=task.target,
            path=task.path,
            url=url,
            error=message,
            timestamp=started or datetime.now(),
        )
