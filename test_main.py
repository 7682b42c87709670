# -*- coding: utf-8 -*-
"""
命令行参数测试
"""

import asyncio
import logging

from dirprobe.config import ExtensionMode, ScanConfig
from dirprobe.logger import get_logger
from dirprobe.main import apply_args, build_parser, main


def test_cli_overrides_config():
    config = ScanConfig()
    config.request.headers = ['X-Base: 1']
    args = build_parser().parse_args([
        'http://h', '-w', 'a.txt', '-w', 'b.txt', '-e', 'php, html', '-f',
        '-t', '8', '-x', '404,500-599', '-r', '--max-recursion-depth', '2',
        '-H', 'X-Extra: 2', '-q', '--format', 'json',
    ])
    apply_args(config, args)
    assert config.dictionary.wordlists == ['a.txt', 'b.txt']
    assert config.dictionary.extensions == ['php', 'html']
    assert config.dictionary.extension_mode is ExtensionMode.FORCE
    assert config.general.threads == 8
    assert config.general.exclude_status == ['404,500-599']
    assert config.general.recursive
    assert config.general.max_recursion_depth == 2
    assert config.request.headers == ['X-Base: 1', 'X-Extra: 2']
    assert config.view.quiet
    assert config.output.report_format == 'json'


def test_cli_keeps_config_values_when_flags_absent():
    config = ScanConfig()
    config.general.threads = 12
    config.connection.timeout = 3.0
    apply_args(config, build_parser().parse_args(['http://h']))
    assert config.general.threads == 12
    assert config.connection.timeout == 3.0
    assert not config.general.recursive


def test_main_reports_missing_config(tmp_path):
    argv = ['http://h', '-c', str(tmp_path / 'absent.yaml')]
    assert asyncio.run(main(argv)) == 2


def test_get_logger_writes_log_file(tmp_path):
    log_file = tmp_path / 'scan.log'
    logger = get_logger('dirprobe.test_logfile', logging.DEBUG, str(log_file))
    logger.debug('calibrated host')
    for handler in logger.handlers:
        handler.flush()
    assert 'calibrated host' in log_file.read_text(encoding='utf-8')
    assert get_logger('dirprobe.test_logfile') is logger
    assert len(logger.handlers) == 2
