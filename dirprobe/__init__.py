# -*- coding: utf-8 -*-
"""
dirprobe包 - 自适应并发目录探测工具

从字典合成候选路径，并发探测一个或多个目标上的隐藏路径，
识别目录并按需递归扫描。

主要功能：
- 扩展名/前缀/后缀规则的路径合成
- 固定大小的并发工作池
- 按主机自适应的延迟与超时
- 有深度上限的递归目录扫描
- 状态码过滤与多种报告格式

使用方法：
```python
from dirprobe import DirectoryScanner, ScanConfig

config = ScanConfig()
config.dictionary.extensions = ['php']
scanner = DirectoryScanner(config, ['admin', 'backup'])
results = await scanner.scan(['https://example.com'])
```
"""

from .analyzers import StatusFilter, extract_title, is_directory, parse_status_codes
from .checker import DomainChecker
from .config import ExtensionMode, ScanConfig, load_config
from .errors import (
    ConfigurationError,
    DirProbeError,
    ProbeError,
    RecursionScanError,
    ScanError,
    TargetError,
)
from .generators import PathSynthesizer, load_words, prepare_words
from .managers import AuthHandler, HostTimingRegistry
from .models import HostTimingState, ProbeResult, ScanTask
from .reporters import ReportGenerator
from .requester import ProbeExecutor
from .scanner import DirectoryScanner, RecursionController, TaskScheduler
from .session import ResultAggregator, ScanSession
from .urls import join_url, normalize_target

# 版本信息
__version__ = '1.0.0'

__all__ = [
    # 主要类
    'DirectoryScanner',
    'TaskScheduler',
    'RecursionController',
    'ProbeExecutor',
    'HostTimingRegistry',
    'PathSynthesizer',
    # 数据模型
    'ScanTask',
    'ProbeResult',
    'HostTimingState',
    # 会话与过滤
    'ScanSession',
    'ResultAggregator',
    'StatusFilter',
    # 协作组件
    'AuthHandler',
    'DomainChecker',
    'ReportGenerator',
    # 配置
    'ScanConfig',
    'ExtensionMode',
    'load_config',
    # 异常
    'DirProbeError',
    'ConfigurationError',
    'TargetError',
    'ProbeError',
    'RecursionScanError',
    'ScanError',
    # 工具函数
    'join_url',
    'normalize_target',
    'extract_title',
    'is_directory',
    'parse_status_codes',
    'prepare_words',
    'load_words',
]
