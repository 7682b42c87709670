#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
目录探测工具 - 入口脚本

此脚本提供了一个简单的方式来运行dirprobe包中的扫描功能。
"""

import sys

if __name__ == '__main__':
    try:
        from dirprobe.main import run
    except ImportError as e:
        print(f"错误: 无法导入dirprobe包 - {str(e)}")
        print("请确保dirprobe包已正确安装 (pip install -e .)")
        sys.exit(1)
    run()
