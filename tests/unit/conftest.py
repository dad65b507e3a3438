"""Shared fixtures: a thread-safe in-memory Redis double.

FakeRedis implements the handful of hash/key commands ShortURLRedisDAO issues,
with Redis reply conventions (HSETNX -> 0/1, TTL -> -2 for a missing key and
-1 for a key without expiry, DEL -> number of removed keys). EVAL only runs
the DAO's visit counting script. Every command (and the script) runs under
one lock, so single commands are atomic like on a real server.
"""

import threading
from types import SimpleNamespace

import pytest

from urlshortener.dao.redis import ShortURLRedisDAO
from urlshortener.dao.redis.short_url_redis_dao import HIT_SCRIPT


class FakeRedis:
    def __init__(self):
        self.lock = threading.RLock()
        self.hashes: dict[str, dict[str, str]] = {}
        self.ttls: dict[str, int] = {}
        self.connection_pool = SimpleNamespace(connection_kwargs={'host': 'fake-redis', 'port': 6379, 'db': 0})

    def ping(self):
        return True

    def hsetnx(self, key, field, value):
        with self.lock:
            fields = self.hashes.setdefault(key, {})
            if field in fields:
                return 0
            fields[field] = str(value)
            return 1

    def hset(self, key, mapping):
        with self.lock:
            self.hashes.setdefault(key, {}).update({field: str(value) for field, value in mapping.items()})
            return len(mapping)

    def hget(self, key, field):
        with self.lock:
            return self.hashes.get(key, {}).get(field)

    def hgetall(self, key):
        with self.lock:
            return dict(self.hashes.get(key, {}))

    def hincrby(self, key, field, amount=1):
        with self.lock:
            fields = self.hashes.setdefault(key, {})
            value = int(fields.get(field, 0)) + amount
            fields[field] = str(value)
            return value

    def expire(self, key, seconds):
        with self.lock:
            if key not in self.hashes:
                return False
            self.ttls[key] = int(seconds)
            return True

    def ttl(self, key):
        with self.lock:
            if key not in self.hashes:
                return -2
            return self.ttls.get(key, -1)

    def exists(self, *keys):
        with self.lock:
            return sum(1 for key in keys if key in self.hashes)

    def delete(self, *keys):
        with self.lock:
            removed = 0
            for key in keys:
                if self.hashes.pop(key, None) is not None:
                    removed += 1
                self.ttls.pop(key, None)
            return removed

    def eval(self, script, numkeys, *keys_and_args):
        """Run the visit counting script. Other scripts aren't supported."""
        if script != HIT_SCRIPT:
            raise NotImplementedError('FakeRedis only runs HIT_SCRIPT.')
        key = keys_and_args[0]
        with self.lock:
            if key not in self.hashes:
                return None
            return self.hincrby(key, 'visits', 1)

    def expire_now(self, key):
        """Drop a key the way Redis does once its TTL runs out."""
        with self.lock:
            self.hashes.pop(key, None)
            self.ttls.pop(key, None)

    def pipeline(self, transaction=True):
        return FakePipeline(self)


class FakePipeline:
    def __init__(self, client):
        self.client = client
        self.commands = []

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.commands.clear()
        return False

    def __getattr__(self, name):
        command = getattr(self.client, name)

        def queue(*args, **kwargs):
            self.commands.append((command, args, kwargs))
            return self

        return queue

    def execute(self):
        with self.client.lock:
            return [command(*args, **kwargs) for command, args, kwargs in self.commands]


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def fake_dao(fake_redis):
    """ShortURLRedisDAO backed by the in-memory Redis double."""
    return ShortURLRedisDAO(redis_client=fake_redis, prefix='testapp:test')
