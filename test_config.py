# -*- coding: utf-8 -*-
"""
配置加载与校验测试
"""

import pytest

from dirprobe.config import ExtensionMode, ScanConfig, apply_env_overrides, load_config
from dirprobe.errors import ConfigurationError


def test_defaults():
    config = ScanConfig()
    assert config.general.threads == 25
    assert config.general.max_recursion_depth == 3
    assert config.connection.timeout == 7.5
    assert config.request.http_method == 'GET'
    assert config.dictionary.extension_mode is ExtensionMode.DEFAULT
    assert config.validate() is config


def test_from_dict_accepts_dashed_keys():
    config = ScanConfig.from_dict({
        'general': {'threads': '10', 'recursive': 'yes', 'include-status': '200,301-302'},
        'dictionary': {'extensions': ['php', 'html'], 'overwrite-extensions': True},
        'connection': {'delay': 1},
    })
    assert config.general.threads == 10
    assert config.general.recursive is True
    assert config.general.include_status == ['200', '301-302']
    assert config.dictionary.extensions == ['php', 'html']
    assert config.dictionary.extension_mode is ExtensionMode.OVERWRITE
    assert config.connection.delay == 1.0


def test_from_dict_rejects_bad_values():
    with pytest.raises(ConfigurationError):
        ScanConfig.from_dict({'general': {'threads': 'many'}})
    with pytest.raises(ConfigurationError):
        ScanConfig.from_dict(['not', 'a', 'mapping'])


@pytest.mark.parametrize('section, name, value', [
    ('connection', 'timeout', 0),
    ('connection', 'delay', -1),
    ('request', 'http_method', 'FETCH'),
    ('request', 'auth_type', 'digest'),
    ('request', 'headers', ['NoColon']),
    ('general', 'max_time', -5),
])
def test_validate_rejects(section, name, value):
    config = ScanConfig()
    setattr(getattr(config, section), name, value)
    with pytest.raises(ConfigurationError):
        config.validate()


def test_validate_requires_auth_type_and_basic_format():
    config = ScanConfig()
    config.request.auth = 'secret'
    with pytest.raises(ConfigurationError):
        config.validate()
    config.request.auth_type = 'basic'
    with pytest.raises(ConfigurationError):
        config.validate()
    config.request.auth = 'user:secret'
    config.validate()


def test_validate_tolerates_non_positive_threads():
    config = ScanConfig()
    config.general.threads = 0
    config.validate()


def test_env_overrides():
    config = apply_env_overrides(ScanConfig(), {
        'DIRPROBE_THREADS': '5',
        'DIRPROBE_EXTENSIONS': 'php, asp',
        'DIRPROBE_RECURSIVE_SCAN': 'true',
        'DIRPROBE_TIMEOUT': '3.5',
    })
    assert config.general.threads == 5
    assert config.dictionary.extensions == ['php', 'asp']
    assert config.general.recursive is True
    assert config.connection.timeout == 3.5


def test_load_config_from_yaml(tmp_path):
    path = tmp_path / 'dirprobe.yaml'
    path.write_text(
        'general:\n  threads: 7\n  exclude-status: ["404"]\n'
        'request:\n  http-method: head\n',
        encoding='utf-8',
    )
    config = load_config(str(path), environ={})
    assert config.general.threads == 7
    assert config.general.exclude_status == ['404']
    assert config.validate().request.http_method == 'HEAD'


def test_load_config_missing_explicit_file(tmp_path):
    with pytest.raises(ConfigurationError):
        load_config(str(tmp_path / 'absent.yaml'), environ={})


def test_load_config_invalid_yaml(tmp_path):
    path = tmp_path / 'broken.yaml'
    path.write_text('general: [unclosed\n', encoding='utf-8')
    with pytest.raises(ConfigurationError):
        load_config(str(path), environ={})
