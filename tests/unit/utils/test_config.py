"""Unit tests for configuration utilities in config.py

Test coverage includes:

1. Environment variable resolution
   - Ensures app_env(), app_name(), app_prefix() correctly read environment variables.

2. RedisConfig validation
   - Ensures defaults are valid and out-of-range values raise BadConfigurationError.

3. RedisConfig construction
   - Ensures from_mapping() converts string values and ignores unknown keys.
   - Ensures from_environment() reads REDIS_* variables.

4. Configuration loading behavior
   - Ensures load_config() correctly returns the Redis section of the AppConfig document.
   - Ensures RedisConfig.from_appconfig() builds a config from that section.
   - Ensures load_config() requires AppConfig identifiers in the environment.
   - Ensures mismatching documents raise BadConfigurationError.
   - Ensures load_config() propagates ClientError when AppConfig calls fail.
"""

import os
import json
from io import BytesIO
from unittest.mock import MagicMock

import pytest
import botocore

from urlshortener.utils import config
from urlshortener.utils.config import RedisConfig
from urlshortener.exceptions import BadConfigurationError, ConfigurationError, MissingEnvironmentVariableError


# -------------------------------
# Fixtures
# -------------------------------


@pytest.fixture
def appconfig_env(monkeypatch):
    """Set up AppConfig identifiers for testing."""
    monkeypatch.setenv('APPCONFIG_APP_ID', 'app123')
    monkeypatch.setenv('APPCONFIG_ENV_ID', 'env123')
    monkeypatch.setenv('APPCONFIG_PROFILE_ID', 'prof123')


@pytest.fixture
def redis_env(monkeypatch):
    """Clear REDIS_* variables so tests don't depend on the host environment."""
    for name in ('REDIS_HOST', 'REDIS_PORT', 'REDIS_DB', 'REDIS_USERNAME', 'REDIS_PASSWORD', 'REDIS_SOCKET_TIMEOUT', 'REDIS_MAX_CONNECTIONS'):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def appconfig_payload():
    """Provide a default AppConfig payload used by multiple tests."""
    # fmt: off
    return {
        'build': 42,
        'active_backend': 'redis',
        'configs': {
            'redis': {
                'host': 'monkey',
                'port': 16379,
                'db': 3,
            }
        },
    }
    # fmt: on


@pytest.fixture
def appconfig_client(monkeypatch, appconfig_payload):
    """Mock the AppConfig Data client returned by boto3.client."""
    client = MagicMock()
    client.start_configuration_session.return_value = {'InitialConfigurationToken': 'monkey_token'}
    client.get_latest_configuration.return_value = {'Configuration': BytesIO(json.dumps(appconfig_payload).encode('utf-8'))}
    monkeypatch.setattr(config.boto3, 'client', lambda service: client)
    return client


# -------------------------------
# 1. Environment variable resolution
# -------------------------------


def test_app_env(monkeypatch):
    """Ensure app_env() returns the lowercased value of APP_ENV"""
    monkeypatch.setitem(os.environ, 'APP_ENV', 'TEST')
    assert config.app_env() == 'test'


def test_app_env_defaults_to_local(monkeypatch):
    monkeypatch.delitem(os.environ, 'APP_ENV', raising=False)
    assert config.app_env() == 'local'


def test_app_name_not_set(monkeypatch):
    """Ensure app_name() returns None when APP_NAME is not set"""
    monkeypatch.delitem(os.environ, 'APP_NAME', raising=False)
    assert config.app_name() is None
    assert config.app_prefix() is None


def test_app_prefix(monkeypatch):
    """Ensure app_prefix() joins APP_NAME and APP_ENV"""
    monkeypatch.setitem(os.environ, 'APP_NAME', 'test-app')
    monkeypatch.setitem(os.environ, 'APP_ENV', 'test')
    assert config.app_prefix() == 'test-app:test'


# -------------------------------
# 2. RedisConfig validation
# -------------------------------


def test_redis_config_defaults():
    redis_config = RedisConfig()

    assert (redis_config.host, redis_config.port, redis_config.db) == ('localhost', 6379, 0)
    assert redis_config.socket_timeout > 0
    assert redis_config.max_connections is None


@pytest.mark.parametrize(
    'kwargs',
    [
        {'host': ''},
        {'port': 0},
        {'port': 70000},
        {'port': '6379'},
        {'db': -1},
        {'socket_timeout': 0},
        {'max_connections': 0},
    ],
)
def test_redis_config_rejects_bad_values(kwargs):
    with pytest.raises(BadConfigurationError):
        RedisConfig(**kwargs)


def test_bad_configuration_is_a_configuration_error():
    assert issubclass(BadConfigurationError, ConfigurationError)


# -------------------------------
# 3. RedisConfig construction
# -------------------------------


def test_redis_config_from_mapping():
    redis_config = RedisConfig.from_mapping({'host': 'redis', 'port': '6380', 'db': '2', 'socket_timeout': '0.5', 'tls': True})

    assert redis_config == RedisConfig(host='redis', port=6380, db=2, socket_timeout=0.5)


def test_redis_config_from_mapping_ignores_decode_responses():
    """Ensure replies can't be switched to bytes through configuration."""
    redis_config = RedisConfig.from_mapping({'host': 'redis', 'decode_responses': False})

    assert redis_config == RedisConfig(host='redis')
    assert not hasattr(redis_config, 'decode_responses')


def test_redis_config_from_mapping_with_unconvertible_value():
    with pytest.raises(BadConfigurationError, match='Invalid Redis configuration'):
        RedisConfig.from_mapping({'port': 'six-three-seven-nine'})


def test_redis_config_from_environment(redis_env):
    redis_env.setenv('REDIS_HOST', 'redis.internal')
    redis_env.setenv('REDIS_PORT', '6380')
    redis_env.setenv('REDIS_DB', '1')
    redis_env.setenv('REDIS_PASSWORD', 'hunter2')
    redis_env.setenv('REDIS_MAX_CONNECTIONS', '50')

    redis_config = RedisConfig.from_environment()

    assert redis_config.host == 'redis.internal'
    assert redis_config.port == 6380
    assert redis_config.db == 1
    assert redis_config.username is None
    assert redis_config.password == 'hunter2'
    assert redis_config.max_connections == 50


def test_redis_config_from_empty_environment(redis_env):
    assert RedisConfig.from_environment() == RedisConfig()


def test_redis_config_from_bad_environment(redis_env):
    redis_env.setenv('REDIS_DB', 'zero')

    with pytest.raises(BadConfigurationError):
        RedisConfig.from_environment()


# -------------------------------
# 4. Configuration loading behavior
# -------------------------------


def test_load_config(appconfig_env, appconfig_client):
    """Ensure load_config() returns the active backend's section."""
    result = config.load_config('redis')

    assert result == {'host': 'monkey', 'port': 16379, 'db': 3}
    assert RedisConfig.from_mapping(result).port == 16379

    appconfig_client.start_configuration_session.assert_called_once_with(
        ApplicationIdentifier='app123',
        EnvironmentIdentifier='env123',
        ConfigurationProfileIdentifier='prof123',
    )
    appconfig_client.get_latest_configuration.assert_called_once_with(ConfigurationToken='monkey_token')


def test_redis_config_from_appconfig(appconfig_env, appconfig_client):
    assert RedisConfig.from_appconfig() == RedisConfig(host='monkey', port=16379, db=3)


def test_load_config_requires_environment(monkeypatch, appconfig_client):
    monkeypatch.delenv('APPCONFIG_APP_ID', raising=False)
    monkeypatch.setenv('APPCONFIG_ENV_ID', 'env123')
    monkeypatch.setenv('APPCONFIG_PROFILE_ID', 'prof123')

    with pytest.raises(MissingEnvironmentVariableError, match="'APPCONFIG_APP_ID'"):
        config.load_config('redis')

    appconfig_client.start_configuration_session.assert_not_called()


def test_load_config_with_other_active_backend(appconfig_env, appconfig_client, appconfig_payload):
    appconfig_payload['active_backend'] = 'dynamodb'
    appconfig_client.get_latest_configuration.return_value = {'Configuration': BytesIO(json.dumps(appconfig_payload).encode('utf-8'))}

    with pytest.raises(BadConfigurationError, match="AppConfig active backend is not 'redis'."):
        config.load_config('redis')


def test_load_config_without_backend_section(appconfig_env, appconfig_client, appconfig_payload):
    appconfig_payload['configs'] = {}
    appconfig_client.get_latest_configuration.return_value = {'Configuration': BytesIO(json.dumps(appconfig_payload).encode('utf-8'))}

    with pytest.raises(BadConfigurationError, match="AppConfig document has no 'redis' configuration."):
        config.load_config('redis')


def test_missing_appconfig_raises_error(appconfig_env, appconfig_client):
    """Ensure load_config() propagates ClientError when AppConfig returns an error."""
    appconfig_client.start_configuration_session.side_effect = botocore.exceptions.ClientError(
        {'Error': {'Code': 'ResourceNotFoundException'}}, 'StartConfigurationSession'
    )

    with pytest.raises(botocore.exceptions.ClientError):
        config.load_config('redis')
