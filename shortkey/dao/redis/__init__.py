from shortkey.dao.redis.redis_key_schema import RedisKeySchema
from shortkey.dao.redis.mixins import RedisConnectionsMixin
from shortkey.dao.redis.link_redis_dao import LinkRedisDAO


__all__ = [
    'RedisKeySchema',
    'RedisConnectionsMixin',
    'LinkRedisDAO',
]
