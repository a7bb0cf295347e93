from shortkey.dao.cache.link_cache import LinkCache


__all__ = [
    'LinkCache',
]
