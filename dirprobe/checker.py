# -*- coding: utf-8 -*-
"""
域名存活检测模块
"""

import asyncio
import logging
from typing import List, Sequence, Tuple
from urllib.parse import urlparse

import aiohttp

from .config import ScanConfig

logger = logging.getLogger(__name__)

BROWSER_HEADERS = {
    'User-Agent': 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36',
    'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
    'Accept-Language': 'en-US,en;q=0.9',
}


def root_url(target: str) -> str:
    """返回目标的根路径URL，缺省协议为http"""
    if not target.startswith(('http://', 'https://')):
        target = f'http://{target}'
    parsed = urlparse(target)
    return f'{parsed.scheme}://{parsed.netloc}/'


class DomainChecker:
    """域名存活检测器，2xx和3xx都视为存活"""

    def __init__(self, config: ScanConfig):
        self.config = config

    async def check(self, session: aiohttp.ClientSession, target: str) -> bool:
        conn = self.config.connection
        url = root_url(target)
        timeout = aiohttp.ClientTimeout(total=conn.domain_check_timeout)
        for attempt in range(1, conn.domain_check_retries + 1):
            logger.debug(f"域名检测尝试 {attempt}/{conn.domain_check_retries}: {url}")
            try:
                async with session.head(url, headers=BROWSER_HEADERS, allow_redirects=False,
                                        proxy=conn.proxy or None, timeout=timeout) as response:
                    if 200 <= response.status < 400:
                        logger.info(f"域名检测成功: {url} ({response.status})")
                        return True
                    logger.debug(f"域名检测状态码 {response.status}: {url}")
            except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
                logger.debug(f"域名检测失败 {url}: {e!r}")
            if attempt < conn.domain_check_retries:
                await asyncio.sleep(attempt)
        return False

    async def check_many(self, targets: Sequence[str]) -> Tuple[List[str], List[str]]:
        """批量检测，返回 (存活, 不存活)，保持输入顺序"""
        if self.config.connection.skip_domain_check:
            return list(targets), []
        connector = aiohttp.TCPConnector(ssl=False)
        async with aiohttp.ClientSession(connector=connector) as session:
            verdicts = await asyncio.gather(*(self.check(session, t) for t in targets))
        alive = [t for t, ok in zip(targets, verdicts) if ok]
        dead = [t for t, ok in zip(targets, verdicts) if not ok]
        return alive, dead
