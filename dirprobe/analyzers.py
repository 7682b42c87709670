# -*- coding: utf-8 -*-
"""
分析器模块：标题提取、目录判定与状态码过滤
"""

import logging
from typing import Iterable, Mapping, Optional, Set

logger = logging.getLogger(__name__)

DIRECTORY_MARKERS = (
    '<title>Index of',
    'Directory listing for',
    'Parent Directory',
)
TITLE_START = '<title>'
TITLE_END = '</title>'


def extract_title(body: str) -> str:
    """提取第一个完整的 <title>...</title>，标记缺失或未闭合时返回空串"""
    if not body:
        return ''
    start = body.find(TITLE_START)
    if start == -1:
        return ''
    start += len(TITLE_START)
    end = body.find(TITLE_END, start)
    if end == -1:
        return ''
    return body[start:end].strip()


def _header(headers: Optional[Mapping[str, str]], name: str) -> str:
    if not headers:
        return ''
    name = name.lower()
    for key, value in headers.items():
        if key.lower() == name:
            return value
    return ''


def is_directory(url: str, headers: Optional[Mapping[str, str]], body: str) -> bool:
    """判断探测结果是否为目录

    URL以 '/' 结尾，或者是包含目录列表特征的HTML页面。
    """
    if url.endswith('/'):
        return True
    if 'text/html' in _header(headers, 'Content-Type'):
        return any(marker in (body or '') for marker in DIRECTORY_MARKERS)
    return False


def parse_status_codes(value: str) -> Set[int]:
    """解析状态码字符串，支持逗号分隔和 "A-B" 闭区间"""
    codes = set()
    for part in (value or '').split(','):
        part = part.strip()
        if not part:
            continue
        try:
            if '-' in part:
                start, end = (int(p.strip()) for p in part.split('-', 1))
                codes.update(range(start, end + 1))
            else:
                codes.add(int(part))
        except ValueError:
            logger.warning(f"忽略无效的状态码: {part}")
    return codes


def parse_status_list(values: Iterable[str]) -> Set[int]:
    codes = set()
    for value in values or ():
        codes |= parse_status_codes(str(value))
    return codes


class StatusFilter:
    """状态码过滤器，排除优先于包含"""

    def __init__(self, include: Iterable[str] = (), exclude: Iterable[str] = ()):
        self.include = parse_status_list(include)
        self.exclude = parse_status_list(exclude)

    def should_include(self, status: Optional[int]) -> bool:
        if self.include and status not in self.include:
            return False
        if status in self.exclude:
            return False
        return True

    @classmethod
    def from_config(cls, config) -> 'StatusFilter':
        return cls(config.general.include_status, config.general.exclude_status)
