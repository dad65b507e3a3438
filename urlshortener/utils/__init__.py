from urlshortener.utils.config import app_env, app_name, app_prefix, load_config, RedisConfig
from urlshortener.utils.helpers import get_short_url, validate_target_url, format_timestamp, parse_timestamp, require_environment
from urlshortener.utils.shortener import generate_shortcode, validate_alias, resolve_shortcode
from urlshortener.utils.logging import initialize_logging


__all__ = [
    'generate_shortcode',
    'validate_alias',
    'resolve_shortcode',
    'app_env',
    'app_name',
    'app_prefix',
    'load_config',
    'RedisConfig',
    'get_short_url',
    'validate_target_url',
    'format_timestamp',
    'parse_timestamp',
    'require_environment',
    'initialize_logging',
]
