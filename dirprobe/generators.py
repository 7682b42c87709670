# -*- coding: utf-8 -*-
"""
生成器模块：字典加载与候选路径合成
"""

import logging
import re
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

import aiohttp

from .config import DictionaryConfig, ExtensionMode
from .errors import ConfigurationError

logger = logging.getLogger(__name__)

# 覆盖扩展名模式下不应被替换的扩展名
PROTECTED_EXTENSIONS = frozenset([
    'log', 'json', 'xml', 'jpg', 'jpeg', 'png', 'gif', 'bmp', 'ico',
    'svg', 'css', 'js', 'woff', 'woff2', 'ttf', 'eot',
])
EXT_PATTERN = re.compile(r'\.[a-zA-Z0-9]+$')
EXT_TOKEN = '%EXT%'


def deduplicate(items: Iterable[str]) -> List[str]:
    """去重并保持首次出现的顺序"""
    return list(dict.fromkeys(items))


def prepare_words(raw: Iterable[str], lowercase: bool = False, uppercase: bool = False,
                  capitalization: bool = False) -> List[str]:
    """清理原始单词：去空行和注释，做大小写转换，再去重"""
    words = []
    for word in raw:
        word = word.strip()
        if not word or word.startswith('#'):
            continue
        if lowercase:
            word = word.lower()
        elif uppercase:
            word = word.upper()
        elif capitalization:
            word = word.capitalize()
        words.append(word)
    return deduplicate(words)


class PathSynthesizer:
    """候选路径合成器"""

    def __init__(self, extensions: Sequence[str] = (), prefixes: Sequence[str] = (),
                 suffixes: Sequence[str] = (), exclude_extensions: Sequence[str] = (),
                 mode: ExtensionMode = ExtensionMode.DEFAULT):
        # 配置里的扩展名允许写成 ".php"
        self.extensions = [e.lstrip('.') for e in extensions if e.strip('.')]
        self.prefixes = list(prefixes)
        self.suffixes = list(suffixes)
        self.exclude_extensions = [e.lstrip('.') for e in exclude_extensions if e.strip('.')]
        self.mode = mode

    @classmethod
    def from_config(cls, config: DictionaryConfig) -> 'PathSynthesizer':
        return cls(
            extensions=config.extensions,
            prefixes=config.prefixes,
            suffixes=config.suffixes,
            exclude_extensions=config.exclude_extensions,
            mode=config.extension_mode,
        )

    def generate(self, words: Iterable[str]) -> List[str]:
        """生成去重后的候选路径列表，输入为空时返回空列表"""
        paths = []
        for word in words:
            if self._is_excluded(word):
                continue
            paths.extend(self._expand_extensions(word))
            for prefix in self.prefixes:
                paths.append(prefix + word)
            # 目录不加后缀
            if not word.endswith('/'):
                for suffix in self.suffixes:
                    paths.append(word + suffix)
        return deduplicate(paths)

    def _is_excluded(self, word: str) -> bool:
        return any(word.endswith('.' + ext) for ext in self.exclude_extensions)

    def _expand_extensions(self, word: str) -> List[str]:
        if self.mode is ExtensionMode.FORCE:
            return [word] + [f'{word}.{ext}' for ext in self.extensions] + [word + '/']
        if self.mode is ExtensionMode.OVERWRITE:
            return [word] + [self.replace_extension(word, ext) for ext in self.extensions]
        if EXT_TOKEN in word:
            return [word.replace(EXT_TOKEN, ext) for ext in self.extensions]
        return [word]

    @staticmethod
    def replace_extension(word: str, new_ext: str) -> str:
        """替换末尾扩展名，受保护的扩展名原样返回，没有扩展名则追加"""
        lowered = word.lower()
        if any(lowered.endswith('.' + ext) for ext in PROTECTED_EXTENSIONS):
            return word
        if EXT_PATTERN.search(word):
            return EXT_PATTERN.sub('.' + new_ext, word)
        return f'{word}.{new_ext}'


class FileWordSource:
    """从文件或目录加载单词"""

    def __init__(self, path: str):
        self.path = Path(path)

    def get_words(self) -> List[str]:
        if self.path.is_dir():
            files = sorted(p for p in self.path.iterdir() if p.is_file())
        else:
            files = [self.path]
        words = []
        for file in files:
            try:
                with file.open('r', encoding='utf-8', errors='ignore') as f:
                    lines = [line.rstrip('\r\n') for line in f]
            except OSError as e:
                raise ConfigurationError(f"无法加载字典文件 {file}: {e}") from e
            logger.info(f"从文件 {file} 加载了 {len(lines)} 行")
            words.extend(lines)
        return words


class RemoteWordSource:
    """从远程URL加载单词"""

    def __init__(self, url: str, timeout: float = 30.0):
        self.url = url
        self.timeout = timeout

    async def get_words(self, session: Optional[aiohttp.ClientSession] = None) -> List[str]:
        if session is None:
            async with aiohttp.ClientSession() as own_session:
                return await self._fetch(own_session)
        return await self._fetch(session)

    async def _fetch(self, session: aiohttp.ClientSession) -> List[str]:
        try:
            async with session.get(self.url, timeout=aiohttp.ClientTimeout(total=self.timeout)) as response:
                response.raise_for_status()
                text = await response.text(errors='ignore')
        except (aiohttp.ClientError, OSError) as e:
            raise ConfigurationError(f"无法下载远程字典 {self.url}: {e}") from e
        words = text.splitlines()
        logger.info(f"从 {self.url} 加载了 {len(words)} 行")
        return words


def is_remote(location: str) -> bool:
    return location.startswith(('http://', 'https://'))


async def load_words(config: DictionaryConfig, extra: Iterable[str] = ()) -> List[str]:
    """按配置顺序加载所有字典，返回清理后的单词列表"""
    raw = []
    for location in list(config.wordlists) + list(extra):
        if is_remote(location):
            raw.extend(await RemoteWordSource(location).get_words())
        else:
            raw.extend(FileWordSource(location).get_words())
    return prepare_words(raw, config.lowercase, config.uppercase, config.capitalization)
