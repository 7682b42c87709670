"""配置管理：从 YAML 加载配置，叠加 .env 与环境变量，并提供带类型的访问接口"""
import logging
import os
from dataclasses import dataclass, field, fields, is_dataclass
from enum import Enum
from pathlib import Path
from typing import List, Optional

import yaml
from dotenv import load_dotenv

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

ENV_PREFIX = 'DIRPROBE_'
HTTP_METHODS = ('GET', 'HEAD', 'POST', 'PUT', 'PATCH', 'DELETE', 'OPTIONS', 'TRACE')
AUTH_TYPES = ('', 'basic', 'bearer')


class ExtensionMode(Enum):
    DEFAULT = 'default'
    FORCE = 'force'
    OVERWRITE = 'overwrite'


@dataclass
class GeneralConfig:
    threads: int = 25
    recursive: bool = False
    max_recursion_depth: int = 3
    recursion_status: List[str] = field(default_factory=lambda: ['200', '403'])
    include_status: List[str] = field(default_factory=list)
    exclude_status: List[str] = field(default_factory=list)
    max_time: int = 0


@dataclass
class DictionaryConfig:
    extensions: List[str] = field(default_factory=list)
    force_extensions: bool = False
    overwrite_extensions: bool = False
    exclude_extensions: List[str] = field(default_factory=list)
    prefixes: List[str] = field(default_factory=list)
    suffixes: List[str] = field(default_factory=list)
    lowercase: bool = False
    uppercase: bool = False
    capitalization: bool = False
    wordlists: List[str] = field(default_factory=list)

    @property
    def extension_mode(self) -> ExtensionMode:
        # 同时开启时强制扩展名优先
        if self.force_extensions:
            return ExtensionMode.FORCE
        if self.overwrite_extensions:
            return ExtensionMode.OVERWRITE
        return ExtensionMode.DEFAULT


@dataclass
class RequestConfig:
    http_method: str = 'GET'
    follow_redirects: bool = False
    user_agent: str = ''
    cookie: str = ''
    data: str = ''
    headers: List[str] = field(default_factory=list)
    auth: str = ''
    auth_type: str = ''


@dataclass
class ConnectionConfig:
    timeout: float = 7.5
    delay: float = 0.0
    proxy: str = ''
    domain_check_timeout: float = 60.0
    domain_check_retries: int = 3
    skip_domain_check: bool = False


@dataclass
class ViewConfig:
    real_time_status: bool = False
    headless: bool = False
    quiet: bool = False


@dataclass
class OutputConfig:
    report_format: str = 'plain'
    log_file: str = ''


@dataclass
class ScanConfig:
    general: GeneralConfig = field(default_factory=GeneralConfig)
    dictionary: DictionaryConfig = field(default_factory=DictionaryConfig)
    request: RequestConfig = field(default_factory=RequestConfig)
    connection: ConnectionConfig = field(default_factory=ConnectionConfig)
    view: ViewConfig = field(default_factory=ViewConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> 'ScanConfig':
        """按节构造配置，键名中的 '-' 视同 '_'"""
        cfg = cls()
        if not data:
            return cfg
        if not isinstance(data, dict):
            raise ConfigurationError(f"配置必须是映射类型，而不是 {type(data).__name__}")
        for section_name, values in data.items():
            section = getattr(cfg, section_name.replace('-', '_'), None)
            if section is None or not is_dataclass(section):
                logger.warning(f"忽略未知配置节: {section_name}")
                continue
            if not isinstance(values, dict):
                raise ConfigurationError(f"配置节 {section_name} 必须是映射类型")
            _apply_section(section, values)
        return cfg

    def validate(self) -> 'ScanConfig':
        """校验配置，非法时抛出 ConfigurationError"""
        conn = self.connection
        if conn.timeout is None or conn.timeout <= 0:
            raise ConfigurationError(f"超时时间必须大于0: {conn.timeout}")
        if conn.delay is None or conn.delay < 0:
            raise ConfigurationError(f"延迟不能为负数: {conn.delay}")
        if conn.domain_check_retries < 1:
            raise ConfigurationError(f"域名检测重试次数至少为1: {conn.domain_check_retries}")
        method = (self.request.http_method or '').upper()
        if method not in HTTP_METHODS:
            raise ConfigurationError(f"不支持的HTTP方法: {self.request.http_method}")
        self.request.http_method = method
        auth_type = (self.request.auth_type or '').lower()
        if auth_type not in AUTH_TYPES:
            raise ConfigurationError(f"不支持的认证类型: {self.request.auth_type}")
        if self.request.auth and not auth_type:
            raise ConfigurationError("设置了认证信息但未指定认证类型 (basic/bearer)")
        if auth_type == 'basic' and ':' not in self.request.auth:
            raise ConfigurationError("basic认证格式应为 username:password")
        self.request.auth_type = auth_type
        for header in self.request.headers:
            if ':' not in header:
                raise ConfigurationError(f"无效的头信息格式: {header}")
        if self.general.max_time < 0:
            raise ConfigurationError(f"最大运行时间不能为负数: {self.general.max_time}")
        return self


def _coerce(value, current):
    """把 YAML/环境变量里的值转换为字段当前值的类型"""
    if isinstance(current, bool):
        if isinstance(value, str):
            return value.strip().lower() in ('1', 'true', 'yes', 'on')
        return bool(value)
    if isinstance(current, int) and not isinstance(current, bool):
        return int(value)
    if isinstance(current, float):
        return float(value)
    if isinstance(current, list):
        if value is None:
            return []
        if isinstance(value, str):
            return [v.strip() for v in value.split(',') if v.strip()]
        return [str(v) for v in value]
    return '' if value is None else str(value)


def _apply_section(section, values: dict):
    known = {f.name for f in fields(section)}
    for key, value in values.items():
        name = key.replace('-', '_')
        if name not in known:
            logger.warning(f"忽略未知配置项: {key}")
            continue
        try:
            setattr(section, name, _coerce(value, getattr(section, name)))
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"配置项 {key} 的值非法: {value!r}") from e


# 环境变量 -> (配置节, 字段)
ENV_MAPPING = {
    'THREADS': ('general', 'threads'),
    'MAX_TIME': ('general', 'max_time'),
    'RECURSIVE_SCAN': ('general', 'recursive'),
    'EXTENSIONS': ('dictionary', 'extensions'),
    'WORDLISTS': ('dictionary', 'wordlists'),
    'TIMEOUT': ('connection', 'timeout'),
    'DELAY': ('connection', 'delay'),
    'PROXY': ('connection', 'proxy'),
    'USER_AGENT': ('request', 'user_agent'),
    'HTTP_METHOD': ('request', 'http_method'),
    'HEADERS': ('request', 'headers'),
    'REAL_TIME_STATUS': ('view', 'real_time_status'),
    'REPORT_FORMAT': ('output', 'report_format'),
}


def apply_env_overrides(cfg: ScanConfig, environ=None) -> ScanConfig:
    environ = os.environ if environ is None else environ
    for suffix, (section_name, name) in ENV_MAPPING.items():
        raw = environ.get(ENV_PREFIX + suffix)
        if raw is None:
            continue
        _apply_section(getattr(cfg, section_name), {name: raw})
    return cfg


def load_config(path: Optional[str] = None, environ=None) -> ScanConfig:
    """加载配置：.env -> YAML 文件 -> 环境变量覆盖

    未指定路径时依次查找 DIRPROBE_CONFIG、./dirprobe.yaml、./config/dirprobe.yaml，
    都不存在则使用内置默认值。
    """
    load_dotenv()
    environ = os.environ if environ is None else environ

    candidates = [path] if path else [
        environ.get(ENV_PREFIX + 'CONFIG'),
        'dirprobe.yaml',
        str(Path('config') / 'dirprobe.yaml'),
    ]
    data = {}
    for candidate in candidates:
        if not candidate:
            continue
        p = Path(candidate)
        if not p.exists():
            if path:
                raise ConfigurationError(f"配置文件不存在: {path}")
            continue
        try:
            with open(p, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"无法解析配置文件 {p}: {e}") from e
        logger.debug(f"已加载配置文件: {p}")
        break
    else:
        logger.debug("未找到配置文件，使用内置默认配置")

    return apply_env_overrides(ScanConfig.from_dict(data), environ)
