"""
Unit tests for the Redis cache service degradation paths.
"""

import json

from redis.exceptions import ConnectionError as RedisConnectionError

from backoffice.services.cache_service import CacheService


def _service(mocker):
    cache = CacheService()
    cache._enabled = True
    cache._prefix = 'test'
    cache.client = mocker.MagicMock()
    return cache


def test_key_layout(mocker):
    cache = _service(mocker)
    cache.set('draft-1', 'catalog', 'snapshot', {'products': []}, ttl=30)

    cache.client.setex.assert_called_once_with('test:draft-1:catalog:snapshot', 30, json.dumps({'products': []}))


def test_hit_skips_loader(mocker):
    cache = _service(mocker)
    cache.client.get.return_value = json.dumps({'products': ['cached']})
    loader = mocker.Mock()

    assert cache.memoize('draft-1', 'catalog', 'snapshot', loader, ttl=30) == {'products': ['cached']}
    loader.assert_not_called()


def test_redis_down_falls_back_to_loader(mocker):
    cache = _service(mocker)
    cache.client.get.side_effect = RedisConnectionError('down')
    cache.client.setex.side_effect = RedisConnectionError('down')
    loader = mocker.Mock(return_value={'products': ['fresh']})

    assert cache.memoize('draft-1', 'catalog', 'snapshot', loader, ttl=30) == {'products': ['fresh']}
    loader.assert_called_once()


def test_unreadable_entry_is_a_miss(mocker):
    cache = _service(mocker)
    cache.client.get.return_value = 'not json{'

    assert cache.get('draft-1', 'catalog', 'snapshot') is None


def test_disabled_cache_never_touches_redis(mocker):
    cache = CacheService()

    assert cache.is_available() is False
    assert cache.get('draft-1', 'catalog', 'snapshot') is None
    assert cache.set('draft-1', 'catalog', 'snapshot', {}, ttl=30) is False
