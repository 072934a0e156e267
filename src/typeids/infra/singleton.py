import functools
import threading


def singleton(func):
    """
    Decorator for a factory function.
    Caches the first return value in func._instance
    and always returns that thereafter.
    The first call is made under a lock so concurrent callers
    never build two instances.
    """
    lock = threading.Lock()

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        if not hasattr(func, "_instance"):
            with lock:
                if not hasattr(func, "_instance"):
                    # First call: create & stash
                    func._instance = func(*args, **kwargs)
        return func._instance

    def reset():
        with lock:
            if hasattr(func, "_instance"):
                delattr(func, "_instance")

    wrapper.reset = reset
    return wrapper
