# -*- coding: utf-8 -*-
"""
URL工具模块
"""

from urllib.parse import urlparse

from .errors import ProbeError

SEPARATORS = ('/', '\\')


def strip_trailing_separator(url: str) -> str:
    """去掉末尾的一个 '/'，再去掉一个 '\\'"""
    if url.endswith('/'):
        url = url[:-1]
    if url.endswith('\\'):
        url = url[:-1]
    return url


def normalize_target(target: str) -> str:
    """规范化目标URL，补全协议并保证末尾恰好一个斜杠"""
    target = target.strip()
    if not target.startswith(('http://', 'https://')):
        target = f'http://{target}'
    return strip_trailing_separator(target) + '/'


def join_url(target: str, path: str) -> str:
    """拼接目标和候选路径

    空路径得到 target + '/'；以分隔符开头的路径直接拼接；其余情况
    （包括路径内部或末尾已有分隔符）一律补一个 '/'。
    """
    base = strip_trailing_separator(target)
    if not path:
        return base + '/'
    if path.startswith(SEPARATORS):
        return base + path
    return base + '/' + path


def build_url(target: str, path: str) -> str:
    """拼接并校验URL，缺少协议或主机时抛出 ProbeError"""
    full_url = join_url(target, path)
    try:
        parsed = urlparse(full_url)
    except ValueError as e:
        raise ProbeError(f"无效的URL: {full_url}: {e}") from e
    if not parsed.scheme or not parsed.netloc:
        raise ProbeError(f"无效的URL，缺少协议或主机: {full_url}")
    return full_url


def host_of(url: str) -> str:
    """返回 host[:port]，用作主机计时的键"""
    return urlparse(url).netloc
