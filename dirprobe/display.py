# -*- coding: utf-8 -*-
"""
状态显示模块
"""

import sys
import time
from collections import Counter
from typing import List

from .config import ScanConfig
from .models import ProbeResult

STATUS_COLORS = {
    200: '\033[92m',  # 绿色
    301: '\033[93m',  # 黄色
    302: '\033[93m',
    401: '\033[91m',  # 红色
    403: '\033[91m',
    500: '\033[91m',
}
RESET = '\033[0m'
REFRESH_INTERVAL = 0.5


class StatusDisplay:
    """扫描进度与结果显示"""

    def __init__(self, config: ScanConfig, stream=None):
        self.config = config
        self.stream = stream or sys.stdout
        self.start_time = time.time()
        self.last_update = 0.0
        self.total_paths = 0
        self.scanned = 0
        self.found = 0
        self.errors = 0
        self.status_counts = Counter()

    def _print(self, text: str = '', end: str = '\n'):
        print(text, end=end, file=self.stream, flush=True)

    def add_total_paths(self, count: int):
        """每个递归层级开始时累加该层的任务数"""
        self.total_paths += count

    def update_progress(self, result: ProbeResult):
        self.scanned += 1
        if result.error is not None:
            self.errors += 1
        else:
            self.status_counts[result.status] += 1
            if 200 <= result.status < 400:
                self.found += 1

        now = time.time()
        if self.config.view.real_time_status and now - self.last_update > REFRESH_INTERVAL:
            self.last_update = now
            self._print(f"\r进度: {self.scanned}/{self.total_paths} | 发现: {self.found} | "
                        f"错误: {self.errors}", end='')

    def print_result(self, result: ProbeResult):
        """打印一条保留的结果"""
        if self.config.view.quiet:
            return
        if result.error is not None:
            self._print(f"错误: {result.url} - {result.error}")
            return
        line = f"发现: {result.url} - 状态: {result.status} - 长度: {result.content_length}"
        if result.redirect:
            line += f" -> {result.redirect}"
        if result.recursion_level:
            line += f" [深度 {result.recursion_level}]"
        color = STATUS_COLORS.get(result.status, '')
        if color and sys.platform != 'win32' and self.stream.isatty():
            line = f"{color}{line}{RESET}"
        self._print(line)

    def display_final_results(self, results: List[ProbeResult]):
        elapsed = time.time() - self.start_time
        self._print()
        self._print('=' * 50)
        self._print('扫描完成!')
        self._print('=' * 50)
        self._print(f"扫描时间: {elapsed:.2f} 秒")
        self._print(f"已扫描: {self.scanned} | 发现: {self.found} | 错误: {self.errors} | 保留结果: {len(results)}")
        if self.status_counts:
            self._print("状态码统计:")
            for status, count in sorted(self.status_counts.items()):
                self._print(f"  {status}: {count} 个")
        directories = [r for r in results if r.is_directory]
        if directories:
            self._print(f"发现目录 {len(directories)} 个:")
            for result in directories:
                self._print(f"  {result.url}")
