# -*- coding: utf-8 -*-
"""
路径合成与字典加载测试
"""

import asyncio

from dirprobe.config import DictionaryConfig, ExtensionMode
from dirprobe.generators import FileWordSource, PathSynthesizer, load_words, prepare_words


def test_force_extensions_order():
    synth = PathSynthesizer(extensions=['php'], mode=ExtensionMode.FORCE)
    assert synth.generate(['admin']) == ['admin', 'admin.php', 'admin/']


def test_empty_wordlist_gives_empty_paths():
    assert PathSynthesizer(extensions=['php'], mode=ExtensionMode.FORCE).generate([]) == []


def test_default_mode_substitutes_ext_token():
    synth = PathSynthesizer(extensions=['php', 'asp'])
    assert synth.generate(['index.%EXT%', 'login']) == ['index.php', 'index.asp', 'login']


def test_default_mode_without_extensions_drops_token_words():
    assert PathSynthesizer().generate(['index.%EXT%', 'a']) == ['a']


def test_overwrite_replaces_or_appends_extension():
    synth = PathSynthesizer(extensions=['php', 'bak'], mode=ExtensionMode.OVERWRITE)
    assert synth.generate(['config.inc', 'readme']) == [
        'config.inc', 'config.php', 'config.bak',
        'readme', 'readme.php', 'readme.bak',
    ]


def test_overwrite_keeps_protected_extensions():
    synth = PathSynthesizer(extensions=['php'], mode=ExtensionMode.OVERWRITE)
    assert synth.generate(['app.js', 'LOGO.PNG']) == ['app.js', 'LOGO.PNG']


def test_excluded_extension_skips_word():
    synth = PathSynthesizer(extensions=['php'], exclude_extensions=['bak'], mode=ExtensionMode.FORCE)
    assert synth.generate(['db.bak', 'db']) == ['db', 'db.php', 'db/']


def test_prefixes_and_suffixes():
    synth = PathSynthesizer(prefixes=['.', '_'], suffixes=['~', '.old'])
    assert synth.generate(['index', 'files/']) == [
        'index', '.index', '_index', 'index~', 'index.old',
        'files/', '.files/', '_files/',
    ]


def test_output_has_no_duplicates():
    synth = PathSynthesizer(extensions=['php'], prefixes=['a'], mode=ExtensionMode.FORCE)
    paths = synth.generate(['x', 'x', 'ax', 'x.php'])
    assert len(paths) == len(set(paths))
    assert paths[:3] == ['x', 'x.php', 'x/']


def test_from_config_prefers_force_over_overwrite():
    cfg = DictionaryConfig(extensions=['.php'], force_extensions=True, overwrite_extensions=True)
    synth = PathSynthesizer.from_config(cfg)
    assert synth.mode is ExtensionMode.FORCE
    assert synth.generate(['a']) == ['a', 'a.php', 'a/']


def test_prepare_words_cleans_and_transforms():
    raw = ['  Admin ', '', '# comment', 'admin', 'Backup']
    assert prepare_words(raw) == ['Admin', 'admin', 'Backup']
    assert prepare_words(raw, lowercase=True) == ['admin', 'backup']
    assert prepare_words(raw, uppercase=True) == ['ADMIN', 'BACKUP']
    assert prepare_words(['hELLO'], capitalization=True) == ['Hello']


def test_file_word_source_reads_file_and_directory(tmp_path):
    (tmp_path / 'a.txt').write_text('admin\nlogin\n', encoding='utf-8')
    (tmp_path / 'b.txt').write_text('backup\r\n', encoding='utf-8')
    assert FileWordSource(str(tmp_path / 'a.txt')).get_words() == ['admin', 'login']
    assert FileWordSource(str(tmp_path)).get_words() == ['admin', 'login', 'backup']


def test_load_words_merges_sources(tmp_path):
    first = tmp_path / 'first.txt'
    second = tmp_path / 'second.txt'
    first.write_text('Admin\n# skip\nlogin\n', encoding='utf-8')
    second.write_text('admin\nuploads\n', encoding='utf-8')
    cfg = DictionaryConfig(wordlists=[str(first), str(second)], lowercase=True)
    assert asyncio.run(load_words(cfg)) == ['admin', 'login', 'uploads']
