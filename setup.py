#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
dirprobe包的安装脚本
"""

from setuptools import setup, find_packages
import os

# 获取包的版本号
version = '1.0.0'
with open(os.path.join('dirprobe', '__init__.py'), 'r', encoding='utf-8') as f:
    for line in f:
        if line.startswith('__version__'):
            version = line.strip().split('=')[1].strip().strip('"').strip("'")
            break

# 读取README文件内容
try:
    with open('README.md', 'r', encoding='utf-8') as f:
        long_description = f.read()
except OSError:
    long_description = "自适应并发目录探测工具"

# 定义依赖项
install_requires = [
    'aiohttp>=3.8.0',
    'PyYAML>=6.0',
    'python-dotenv>=1.0.0',
]

setup(
    name='dirprobe',
    version=version,
    description='自适应并发目录探测工具',
    long_description=long_description,
    long_description_content_type='text/markdown',
    author='PyHack-Lab',
    packages=find_packages(include=['dirprobe', 'dirprobe.*']),
    include_package_data=True,
    install_requires=install_requires,
    extras_require={
        'test': ['pytest>=7.0'],
    },
    python_requires='>=3.10',
    entry_points={
        'console_scripts': [
            'dirprobe=dirprobe.main:run',
        ],
    },
    classifiers=[
        'Development Status :: 4 - Beta',
        'Intended Audience :: Information Technology',
        'Intended Audience :: System Administrators',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
        'Topic :: Security',
        'Topic :: Internet :: WWW/HTTP',
    ],
    keywords='directory-scanner, security, penetration-testing, web-security',
)
