# -*- coding: utf-8 -*-
"""
异常模块

只有配置错误和目标错误会在探测开始前终止扫描，其余错误都落到结果或日志中。
"""


class DirProbeError(Exception):
    """dirprobe所有异常的基类"""


class ConfigurationError(DirProbeError):
    """配置缺失或非法，扫描不会启动"""


class TargetError(DirProbeError):
    """没有存活目标或没有可扫描的路径"""


class ProbeError(DirProbeError):
    """单个探测任务的网络或解析失败，记录在结果上"""


class RecursionScanError(DirProbeError):
    """递归扫描某个目录失败，只跳过该分支"""

    def __init__(self, directory: str, cause: Exception):
        super().__init__(f"递归扫描目录失败 {directory}: {cause}")
        self.directory = directory
        self.cause = cause


class ScanError(DirProbeError):
    """扫描入口捕获到的意外错误"""
