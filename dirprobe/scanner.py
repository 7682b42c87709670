# -*- coding: utf-8 -*-
"""
扫描器模块

TaskScheduler 负责单个递归层级的 目标×路径 并发探测，RecursionController
在每层结束后对发现的目录逐个发起下一层扫描，DirectoryScanner 是对外入口。
"""

import asyncio
import logging
import time
from dataclasses import replace
from typing import Any, List, Optional, Sequence, Tuple

import aiohttp

from .analyzers import StatusFilter, is_directory, parse_status_list
from .checker import DomainChecker
from .config import ScanConfig
from .display import StatusDisplay
from .errors import ConfigurationError, DirProbeError, RecursionScanError, ScanError, TargetError
from .generators import PathSynthesizer, deduplicate
from .managers import HostTimingRegistry
from .models import ProbeResult, ScanTask
from .reporters import ReportGenerator
from .requester import ProbeExecutor
from .session import ScanSession
from .urls import host_of, normalize_target

logger = logging.getLogger(__name__)

DEFAULT_THREADS = 25
# 递归深度的硬上限，第0层为初始扫描
MAX_RECURSION_CEILING = 3

_DONE = object()


async def _race(stopped: asyncio.Event, aw) -> Tuple[bool, Any]:
    """等待 aw 或停止信号，返回 (是否完成, 结果)"""
    op = asyncio.ensure_future(aw)
    waiter = asyncio.ensure_future(stopped.wait())
    try:
        await asyncio.wait({op, waiter}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        waiter.cancel()
        if not op.done():
            op.cancel()
    if op.done() and not op.cancelled():
        return True, op.result()
    return False, None


async def _get(stopped: asyncio.Event, queue: asyncio.Queue) -> Tuple[bool, Any]:
    if not queue.empty():
        return True, queue.get_nowait()
    return await _race(stopped, queue.get())


async def _put(stopped: asyncio.Event, queue: asyncio.Queue, item) -> bool:
    if not queue.full():
        queue.put_nowait(item)
        return True
    done, _ = await _race(stopped, queue.put(item))
    return done


async def _sleep(stopped: asyncio.Event, delay: float) -> bool:
    """可被停止信号打断的休眠，正常睡满返回 True"""
    try:
        await asyncio.wait_for(stopped.wait(), timeout=delay)
    except asyncio.TimeoutError:
        return True
    return False


def recursion_ceiling(configured: Optional[int]) -> int:
    """有效递归深度：配置值只能收紧固定上限"""
    if configured and 0 < configured < MAX_RECURSION_CEILING:
        return configured
    if configured and configured > MAX_RECURSION_CEILING:
        logger.warning(f"配置的最大递归深度 {configured} 超过上限，"
                       f"使用 {MAX_RECURSION_CEILING}")
    return MAX_RECURSION_CEILING


class TaskScheduler:
    """工作池：一个生产者、固定数量的工作协程和一个收集者"""

    def __init__(self, config: ScanConfig, executor: ProbeExecutor, registry: HostTimingRegistry,
                 session: ScanSession, display: StatusDisplay):
        self.config = config
        self.executor = executor
        self.registry = registry
        self.session = session
        self.display = display
        threads = config.general.threads
        self.pool_size = threads if threads and threads > 0 else DEFAULT_THREADS

    async def run_level(self, http_session: aiohttp.ClientSession, targets: Sequence[str],
                        paths: Sequence[str], level: int) -> List[ProbeResult]:
        """执行一层扫描，所有工作协程结束且结果队列排空后返回"""
        if not targets or not paths:
            return []
        self.display.add_total_paths(len(targets) * len(paths))

        task_queue = asyncio.Queue(maxsize=self.pool_size * 2)
        result_queue = asyncio.Queue(maxsize=self.pool_size * 2)
        level_results: List[ProbeResult] = []

        collector = asyncio.ensure_future(self._collect(result_queue, level, level_results))
        producer = asyncio.ensure_future(self._produce(task_queue, targets, paths))
        workers = [
            asyncio.ensure_future(self._work(i, http_session, task_queue, result_queue))
            for i in range(self.pool_size)
        ]
        try:
            await asyncio.gather(*workers)
            await producer
        except BaseException:
            for task in [producer, collector, *workers]:
                task.cancel()
            raise
        await result_queue.put(_DONE)
        await collector
        return level_results

    async def _produce(self, task_queue: asyncio.Queue, targets: Sequence[str], paths: Sequence[str]):
        stopped = self.session.stopped
        for target in targets:
            for path in paths:
                if not await _put(stopped, task_queue, ScanTask(target, path)):
                    logger.debug("收到停止信号，停止派发任务")
                    return
        for _ in range(self.pool_size):
            if not await _put(stopped, task_queue, _DONE):
                return

    async def _work(self, worker_id: int, http_session: aiohttp.ClientSession,
                    task_queue: asyncio.Queue, result_queue: asyncio.Queue):
        stopped = self.session.stopped
        pacing = self.config.connection.delay > 0
        while not stopped.is_set():
            ok, task = await _get(stopped, task_queue)
            if not ok or task is _DONE:
                break
            try:
                result = await self.executor.probe(http_session, task)
            except Exception:
                logger.exception(f"工作协程 {worker_id} 处理任务出错: {task.target} {task.path}")
                continue
            if not await _put(stopped, result_queue, result):
                break
            if pacing and not await self._pace(worker_id, task):
                break

    async def _pace(self, worker_id: int, task: ScanTask) -> bool:
        """按任务主机的智能延迟休眠，被停止时返回 False"""
        try:
            delay = await self.registry.smart_delay(host_of(task.target))
        except Exception:
            logger.exception(f"工作协程 {worker_id} 获取智能延迟失败: {task.target}")
            delay = self.config.connection.delay
        return await _sleep(self.session.stopped, delay)

    async def _collect(self, result_queue: asyncio.Queue, level: int, level_results: List[ProbeResult]):
        while True:
            item = await result_queue.get()
            if item is _DONE:
                return
            try:
                result = replace(
                    item,
                    recursion_level=level,
                    is_directory=item.ok and is_directory(item.url, item.headers, item.body),
                )
                level_results.append(result)
                if self.session.add(result):
                    self.display.print_result(result)
                self.display.update_progress(result)
            except Exception:
                logger.exception(f"处理结果出错: {item.url}")


class RecursionController:
    """递归控制器：逐层、逐目录地重复调度同一组候选路径"""

    def __init__(self, config: ScanConfig, scheduler: TaskScheduler, session: ScanSession):
        self.enabled = config.general.recursive
        self.ceiling = recursion_ceiling(config.general.max_recursion_depth)
        self.recursion_status = parse_status_list(config.general.recursion_status)
        self.scheduler = scheduler
        self.session = session
        self._visited = set()

    async def run(self, http_session: aiohttp.ClientSession, targets: Sequence[str],
                  paths: Sequence[str], level: int = 0) -> List[ProbeResult]:
        self._visited.update(self._key(t) for t in targets)
        results = await self.scheduler.run_level(http_session, targets, paths, level)
        if not self.enabled or level >= self.ceiling or self.session.is_stopped():
            return results

        directories = self.find_directories(results)
        if directories:
            logger.info(f"发现 {len(directories)} 个目录，开始第 {level + 1} 层递归扫描")
        for directory in directories:
            if self.session.is_stopped():
                break
            try:
                results.extend(await self.run(http_session, [directory], paths, level + 1))
            except Exception as e:
                logger.error(str(RecursionScanError(directory, e)), exc_info=True)
        return results

    def find_directories(self, results: Sequence[ProbeResult]) -> List[str]:
        directories = []
        for result in results:
            if not result.is_directory:
                continue
            if self.recursion_status and result.status not in self.recursion_status:
                continue
            key = self._key(result.url)
            if key in self._visited:
                continue
            self._visited.add(key)
            directories.append(result.url)
        return directories

    @staticmethod
    def _key(url: str) -> str:
        return url.rstrip('/')


class DirectoryScanner:
    """目录扫描器入口"""

    def __init__(self, config: ScanConfig, words: Sequence[str], liveness_prober=None,
                 renderer=None, reporter: Optional[ReportGenerator] = None,
                 display: Optional[StatusDisplay] = None):
        if config is None:
            raise ConfigurationError("配置不能为空")
        self.config = config
        self.words = list(words or [])
        self.liveness_prober = liveness_prober or DomainChecker(config)
        self.renderer = renderer
        self.reporter = reporter or ReportGenerator(config)
        self.display = display or StatusDisplay(config)
        self.session = ScanSession(StatusFilter.from_config(config))
        self.synthesizer = PathSynthesizer.from_config(config.dictionary)
        self.registry: Optional[HostTimingRegistry] = None
        self.executor: Optional[ProbeExecutor] = None
        self.targets: List[str] = []
        self.paths: Tuple[str, ...] = ()
        self.start_time = 0.0
        self.end_time = 0.0

    async def scan(self, targets: Sequence[str]) -> List[ProbeResult]:
        """运行完整扫描，返回保留的结果

        配置错误抛出 ConfigurationError，没有存活目标或可扫描路径抛出
        TargetError，其余意外错误包装为 ScanError。
        """
        self.config.validate()
        if not targets:
            raise TargetError("没有指定扫描目标")
        if not self.words:
            raise TargetError("字典为空，没有路径可扫描")
        # 候选路径只生成一次，各递归层级共用
        self.paths = tuple(self.synthesizer.generate(self.words))
        if not self.paths:
            raise TargetError("所有单词都被排除，没有路径可扫描")

        loop = asyncio.get_running_loop()
        # 同一个扫描器可以重复使用，每次扫描从空结果集开始
        self.session.reset()
        self.session.bind_loop(loop)

        logger.info("正在检测域名存活状态...")
        alive, dead = await self.liveness_prober.check_many(list(targets))
        for target in dead:
            logger.warning(f"域名不存活: {target}")
        if not alive:
            raise TargetError("没有存活的域名可以扫描")
        self.targets = deduplicate(normalize_target(t) for t in alive)
        logger.info(f"发现 {len(self.targets)} 个存活目标，共 {len(self.paths)} 个候选路径，开始扫描")

        timer = None
        if self.config.general.max_time > 0:
            timer = loop.call_later(self.config.general.max_time, self._time_up)
        self.start_time = time.time()
        try:
            await self._execute()
        except DirProbeError:
            raise
        except Exception as e:
            logger.exception("扫描过程中发生异常")
            raise ScanError(f"扫描失败: {e}") from e
        finally:
            if timer is not None:
                timer.cancel()
            self.end_time = time.time()

        results = self.get_results()
        self.display.display_final_results(results)
        return results

    async def _execute(self) -> List[ProbeResult]:
        self.registry = HostTimingRegistry(self.config)
        self.executor = ProbeExecutor(self.config, self.registry, self.renderer)
        scheduler = TaskScheduler(self.config, self.executor, self.registry, self.session, self.display)
        controller = RecursionController(self.config, scheduler, self.session)
        connector = aiohttp.TCPConnector(limit=scheduler.pool_size * 2, ssl=False)
        async with aiohttp.ClientSession(connector=connector) as http_session:
            return await controller.run(http_session, self.targets, self.paths)

    def _time_up(self):
        logger.warning(f"达到最大运行时间 {self.config.general.max_time} 秒，正在停止扫描...")
        self.stop()

    def stop(self):
        """发出停止信号"""
        self.session.stop()

    def get_results(self) -> List[ProbeResult]:
        return self.session.results()

    def save_results(self, output_file: str, report_format: Optional[str] = None) -> str:
        return self.reporter.save_results(self.get_results(), output_file,
                                          self.get_stats(), report_format)

    def get_stats(self) -> dict:
        """获取扫描统计信息"""
        end = self.end_time or time.time()
        duration = end - self.start_time if self.start_time else 0.0
        sent = self.executor.requests_sent if self.executor else 0
        failed = self.executor.requests_failed if self.executor else 0
        return {
            'targets': list(self.targets),
            'paths': len(self.paths),
            'start_time': self.start_time,
            'duration': duration,
            'requests_sent': sent,
            'requests_failed': failed,
            'retained_results': len(self.session.aggregator),
            'requests_per_second': sent / duration if duration > 0 else 0,
        }
