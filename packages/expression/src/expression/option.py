from collections.abc import Callable


def unwrap_or[T](v: T | None, default: T) -> T:
    """Return `v` unless it is None, in which case return `default`.

    Examples
    --------
    >>> unwrap_or("orders", "unnamed run")
    'orders'
    >>> unwrap_or(None, "unnamed run")
    'unnamed run'
    """
    if v is None:
        return default
    return v


def unwrap_or_else[T](v: T | None, default: Callable[[], T]) -> T:
    """Return `v` unless it is None, in which case build the fallback lazily.

    Examples
    --------
    >>> unwrap_or_else(None, list)
    []
    >>> unwrap_or_else([1], list)
    [1]
    """
    if v is None:
        return default()
    return v
