# -*- coding: utf-8 -*-
"""
数据模型模块
"""

from dataclasses import dataclass, asdict, field
from datetime import datetime
from typing import Dict, Optional


@dataclass(frozen=True)
class ScanTask:
    """扫描任务：一个(目标, 路径)对"""
    target: str
    path: str


@dataclass(frozen=True)
class ProbeResult:
    """探测结果数据类，追加到会话后不再修改"""
    target: str
    path: str
    url: str
    status: Optional[int] = None
    content_length: int = 0
    title: str = ""
    redirect: str = ""
    headers: Dict[str, str] = field(default_factory=dict)
    body: str = ""
    timestamp: datetime = field(default_factory=datetime.now)
    error: Optional[str] = None
    recursion_level: int = 0
    is_directory: bool = False
    response_time: float = 0.0

    @property
    def content_type(self) -> str:
        for key, value in self.headers.items():
            if key.lower() == 'content-type':
                return value
        return ''

    @property
    def ok(self) -> bool:
        return self.error is None and self.status is not None

    def to_dict(self, include_body: bool = False) -> Dict:
        """转换为可序列化的字典"""
        result_dict = asdict(self)
        result_dict['timestamp'] = self.timestamp.isoformat()
        result_dict['content_type'] = self.content_type
        if not include_body:
            result_dict.pop('body')
        return result_dict


@dataclass(frozen=True)
class HostTimingState:
    """主机计时状态，每个主机每次会话只校准一次"""
    host: str
    smart_delay: float
    smart_timeout: float
    baseline: Optional[float] = None
    last_calibrated: Optional[datetime] = None
    alive: bool = False

    @property
    def calibrated(self) -> bool:
        return self.baseline is not None
