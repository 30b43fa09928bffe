from .pool import close_pool, get_pool, init_pool

__all__ = ["close_pool", "get_pool", "init_pool"]
