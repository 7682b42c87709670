# -*- coding: utf-8 -*-
"""
分析器、过滤器与结果聚合测试
"""

import threading

from dirprobe.analyzers import StatusFilter, extract_title, is_directory, parse_status_codes
from dirprobe.models import ProbeResult
from dirprobe.session import ResultAggregator, ScanSession


def _result(status, path='p'):
    return ProbeResult(target='http://h/', path=path, url='http://h/' + path, status=status)


def test_extract_title():
    assert extract_title('<html><title> Admin Panel </title></html>') == 'Admin Panel'
    assert extract_title('<title>first</title><title>second</title>') == 'first'
    assert extract_title('<title>never closed') == ''
    assert extract_title('no markers here') == ''
    assert extract_title('') == ''


def test_is_directory_by_url_shape():
    assert is_directory('http://h/admin/', {}, '')
    assert not is_directory('http://h/admin', {}, '')


def test_is_directory_by_listing_body():
    html = {'Content-Type': 'text/html; charset=utf-8'}
    assert is_directory('http://h/files', html, '<title>Index of /files</title>')
    assert is_directory('http://h/files', html, '<h1>Directory listing for /</h1>')
    assert is_directory('http://h/files', {'content-type': 'text/html'}, '<a href="..">Parent Directory</a>')
    assert not is_directory('http://h/files', html, '<title>Home</title>')
    assert not is_directory('http://h/files', {'Content-Type': 'text/plain'}, 'Index of Parent Directory')
    assert not is_directory('http://h/files', None, '<title>Index of /</title>')


def test_parse_status_codes():
    assert parse_status_codes('200') == {200}
    assert parse_status_codes('200, 301-303') == {200, 301, 302, 303}
    assert parse_status_codes('abc,404,5x-6') == {404}
    assert parse_status_codes('') == set()


def test_include_filter():
    status_filter = StatusFilter(include=['200', '301-302'])
    kept = {code for code in (200, 301, 302, 404) if status_filter.should_include(code)}
    assert kept == {200, 301, 302}


def test_exclude_wins_over_include():
    status_filter = StatusFilter(include=['200', '301-302'], exclude=['301'])
    kept = {code for code in (200, 301, 302, 404) if status_filter.should_include(code)}
    assert kept == {200, 302}


def test_errored_results_dropped_only_with_allowlist():
    assert StatusFilter().should_include(None)
    assert StatusFilter(exclude=['404']).should_include(None)
    assert not StatusFilter(include=['200']).should_include(None)


def test_aggregator_filters_and_returns_copies():
    aggregator = ResultAggregator(StatusFilter(exclude=['404']))
    assert aggregator.add(_result(200, 'a'))
    assert not aggregator.add(_result(404, 'b'))
    snapshot = aggregator.snapshot()
    snapshot.append(_result(200, 'c'))
    assert [r.path for r in aggregator.snapshot()] == ['a']
    assert len(aggregator) == 1


def test_aggregator_concurrent_appends():
    aggregator = ResultAggregator()

    def writer(n):
        for i in range(200):
            aggregator.add(_result(200, f'{n}-{i}'))

    threads = [threading.Thread(target=writer, args=(n,)) for n in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(aggregator.snapshot()) == 1600


def test_session_stop_without_loop():
    session = ScanSession()
    assert not session.is_stopped()
    session.stop()
    assert session.is_stopped()


def test_session_reset_clears_results_and_stop():
    session = ScanSession()
    session.add(_result(200))
    session.stop()
    session.reset()
    assert session.results() == []
    assert not session.is_stopped()
