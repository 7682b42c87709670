# -*- coding: utf-8 -*-
"""
主入口模块
"""

import argparse
import asyncio
import logging
import signal
import sys
from typing import List, Optional

from .config import ScanConfig, load_config
from .errors import DirProbeError
from .generators import load_words
from .logger import get_logger
from .scanner import DirectoryScanner

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='自适应并发目录探测工具')
    parser.add_argument('urls', nargs='+', help='目标URL')
    parser.add_argument('-c', '--config', help='YAML配置文件路径')
    parser.add_argument('-w', '--wordlist', action='append', help='字典文件、目录或URL (可多次指定)')
    parser.add_argument('-e', '--extensions', help='扩展名列表，逗号分隔 (如 php,html)')
    parser.add_argument('-f', '--force-extensions', action='store_true', help='为每个单词强制添加扩展名和目录形式')
    parser.add_argument('-O', '--overwrite-extensions', action='store_true', help='覆盖单词已有的扩展名')
    parser.add_argument('-X', '--exclude-extensions', help='排除以这些扩展名结尾的单词')
    parser.add_argument('--prefixes', help='前缀列表，逗号分隔')
    parser.add_argument('--suffixes', help='后缀列表，逗号分隔')
    parser.add_argument('-t', '--threads', type=int, help='并发数 (默认: 25)')
    parser.add_argument('-T', '--timeout', type=float, help='请求超时时间 (秒)')
    parser.add_argument('-d', '--delay', type=float, help='请求间延迟 (秒，>0 时启用按主机的智能延迟)')
    parser.add_argument('-p', '--proxy', help='代理服务器地址 (格式: http://host:port)')
    parser.add_argument('-m', '--http-method', help='HTTP方法 (默认: GET)')
    parser.add_argument('-A', '--user-agent', help='自定义User-Agent')
    parser.add_argument('-H', '--header', action='append', help='自定义HTTP头信息 (格式: Key:Value)')
    parser.add_argument('--cookie', help='Cookie')
    parser.add_argument('--data', help='请求体')
    parser.add_argument('--auth', help='认证信息 (basic: username:password，bearer: token)')
    parser.add_argument('--auth-type', choices=['basic', 'bearer'], help='认证类型')
    parser.add_argument('-F', '--follow-redirects', action='store_true', help='跟随重定向')
    parser.add_argument('-r', '--recursive', action='store_true', help='递归扫描发现的目录')
    parser.add_argument('--max-recursion-depth', type=int, help='最大递归深度 (不超过3)')
    parser.add_argument('-i', '--include-status', help='只保留这些状态码 (如 200,300-399)')
    parser.add_argument('-x', '--exclude-status', help='排除这些状态码 (如 404,500-599)')
    parser.add_argument('--max-time', type=int, help='扫描最大运行时间 (秒)')
    parser.add_argument('--skip-domain-check', action='store_true', help='跳过域名存活检测')
    parser.add_argument('-o', '--output', help='报告输出路径')
    parser.add_argument('--format', choices=['json', 'csv', 'html', 'plain', 'simple'], help='报告格式')
    parser.add_argument('-q', '--quiet', action='store_true', help='不逐条打印结果')
    parser.add_argument('--real-time-status', action='store_true', help='显示实时进度')
    parser.add_argument('--log-file', help='日志文件路径')
    parser.add_argument('-v', '--verbose', action='store_true', help='显示调试日志')
    return parser


def _split(value: str) -> List[str]:
    return [v.strip() for v in value.split(',') if v.strip()]


def apply_args(config: ScanConfig, args: argparse.Namespace) -> ScanConfig:
    """命令行参数覆盖配置文件"""
    general, dictionary, request = config.general, config.dictionary, config.request
    connection, view, output = config.connection, config.view, config.output

    if args.wordlist:
        dictionary.wordlists = args.wordlist
    if args.extensions:
        dictionary.extensions = _split(args.extensions)
    if args.exclude_extensions:
        dictionary.exclude_extensions = _split(args.exclude_extensions)
    if args.prefixes:
        dictionary.prefixes = _split(args.prefixes)
    if args.suffixes:
        dictionary.suffixes = _split(args.suffixes)
    dictionary.force_extensions = dictionary.force_extensions or args.force_extensions
    dictionary.overwrite_extensions = dictionary.overwrite_extensions or args.overwrite_extensions

    if args.threads is not None:
        general.threads = args.threads
    if args.max_recursion_depth is not None:
        general.max_recursion_depth = args.max_recursion_depth
    if args.include_status:
        general.include_status = [args.include_status]
    if args.exclude_status:
        general.exclude_status = [args.exclude_status]
    if args.max_time is not None:
        general.max_time = args.max_time
    general.recursive = general.recursive or args.recursive

    if args.timeout is not None:
        connection.timeout = args.timeout
    if args.delay is not None:
        connection.delay = args.delay
    if args.proxy:
        connection.proxy = args.proxy
    connection.skip_domain_check = connection.skip_domain_check or args.skip_domain_check

    if args.http_method:
        request.http_method = args.http_method
    if args.user_agent:
        request.user_agent = args.user_agent
    if args.header:
        request.headers = list(request.headers) + args.header
    if args.cookie:
        request.cookie = args.cookie
    if args.data:
        request.data = args.data
    if args.auth:
        request.auth = args.auth
    if args.auth_type:
        request.auth_type = args.auth_type
    request.follow_redirects = request.follow_redirects or args.follow_redirects

    view.quiet = view.quiet or args.quiet
    view.real_time_status = view.real_time_status or args.real_time_status
    if args.format:
        output.report_format = args.format
    if args.log_file:
        output.log_file = args.log_file
    return config


def _install_signal_handlers(scanner: DirectoryScanner):
    """收到 SIGINT/SIGTERM 时停止扫描"""
    if sys.platform == 'win32':
        return
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, _on_signal, scanner)


def _on_signal(scanner: DirectoryScanner):
    print("\n收到终止信号，正在停止扫描...")
    scanner.stop()


async def main(argv: Optional[List[str]] = None) -> int:
    """主函数"""
    args = build_parser().parse_args(argv)
    try:
        config = apply_args(load_config(args.config), args)
    except DirProbeError as e:
        print(f"配置错误: {e}")
        return 2
    get_logger('dirprobe', logging.DEBUG if args.verbose else logging.INFO,
               config.output.log_file or None)

    try:
        words = await load_words(config.dictionary)
    except DirProbeError as e:
        print(f"字典加载失败: {e}")
        return 2

    scanner = DirectoryScanner(config, words)
    _install_signal_handlers(scanner)
    try:
        await scanner.scan(args.urls)
    except DirProbeError as e:
        print(f"\n扫描失败: {e}")
        return 1

    if args.output:
        path = scanner.save_results(args.output)
        print(f"\n报告已保存到: {path}")
    return 0


def run():
    """运行函数，处理Windows平台的兼容性"""
    if sys.platform == 'win32':
        asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())
    sys.exit(asyncio.run(main()))


if __name__ == '__main__':
    run()
