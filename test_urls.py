# -*- coding: utf-8 -*-
"""
URL拼接测试
"""

import pytest

from dirprobe.errors import ProbeError
from dirprobe.urls import build_url, host_of, join_url, normalize_target


@pytest.mark.parametrize('target, path, expected', [
    ('https://h', 'a/b', 'https://h/a/b'),
    ('https://h/', 'admin', 'https://h/admin'),
    ('https://h/', '', 'https://h/'),
    ('https://h', '', 'https://h/'),
    ('https://h/', '/admin', 'https://h/admin'),
    ('https://h/', '\\admin', 'https://h\\admin'),
    ('https://h/', 'dir/', 'https://h/dir/'),
    ('https://h/files/', 'x', 'https://h/files/x'),
])
def test_join_url(target, path, expected):
    assert join_url(target, path) == expected


def test_normalize_target():
    assert normalize_target('example.com') == 'http://example.com/'
    assert normalize_target('https://example.com/') == 'https://example.com/'
    assert normalize_target(' https://example.com/app ') == 'https://example.com/app/'


def test_build_url_rejects_missing_host():
    assert build_url('http://h:8080', 'a') == 'http://h:8080/a'
    with pytest.raises(ProbeError):
        build_url('not-a-url', 'a')


def test_host_of():
    assert host_of('http://h:8080/a/b') == 'h:8080'
