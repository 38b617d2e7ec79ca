"""Cache decorators for async backend reads.

These decorators memoize async fetchers (analytics, trending lists,
profile lookups) through an explicitly passed CacheService, so every
decorated function names the cache it uses.
"""

import functools
import inspect
import re
from collections.abc import Callable
from datetime import timedelta
from typing import Any, TypeVar

from feedpager.core.services.cache_service import CacheService

F = TypeVar("F", bound=Callable[..., Any])


def cached(
    cache_service: CacheService,
    key: str | Callable[..., str],
    ttl: timedelta | None = None,
) -> Callable[[F], F]:
    """Decorator for caching async function results.

    Results are stored with the service's key prefix and an optional TTL.
    ``None`` results are not cached.

    Args:
        cache_service: The cache service to store results in.
        key: Cache key. If string, supports {arg_name} interpolation from
            the call's arguments. If callable, receives (*args, **kwargs)
            and returns the key string.
        ttl: Time-to-live for cached results. Uses config default if None.

    Returns:
        Decorated function.

    Example:
        @cached(service, key="trending:albums:{days}d")
        async def get_trending_albums(days: int = 7) -> list[dict]:
            return await analytics.trending_albums(days)
    """

    def decorator(func: F) -> F:
        signature = inspect.signature(func)

        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            cache_key = _build_cache_key(signature, args, kwargs, key)
            return await cache_service.get_or_fetch(
                cache_key,
                lambda: func(*args, **kwargs),
                ttl,
            )

        return wrapper  # type: ignore

    return decorator


def invalidates(
    cache_service: CacheService,
    patterns: list[str],
) -> Callable[[F], F]:
    """Decorator for invalidating cache entries after a mutation.

    Executes the decorated function and then invalidates every cache
    entry whose key contains one of the patterns. Nothing is invalidated
    if the function raises.

    Args:
        cache_service: The cache service to invalidate.
        patterns: Key substrings. Supports {arg_name} interpolation.

    Returns:
        Decorated function.

    Example:
        @invalidates(service, patterns=["posts:", "creator:{creator_id}:"])
        async def create_post(creator_id: str, content: str) -> dict:
            return await db.insert_post(creator_id, content)
    """

    def decorator(func: F) -> F:
        signature = inspect.signature(func)

        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            result = await func(*args, **kwargs)

            arguments = _bind_arguments(signature, args, kwargs)
            resolved = [_interpolate_string(p, arguments) for p in patterns]
            cache_service.invalidate(resolved)

            return result

        return wrapper  # type: ignore

    return decorator


def _build_cache_key(
    signature: inspect.Signature,
    args: tuple[Any, ...],
    kwargs: dict[str, Any],
    custom_key: str | Callable[..., str],
) -> str:
    """Build cache key for a function call.

    Args:
        signature: Signature of the decorated function.
        args: Positional arguments.
        kwargs: Keyword arguments.
        custom_key: Key template or key builder function.

    Returns:
        The cache key string.
    """
    if callable(custom_key):
        return custom_key(*args, **kwargs)
    return _interpolate_string(custom_key, _bind_arguments(signature, args, kwargs))


def _bind_arguments(
    signature: inspect.Signature,
    args: tuple[Any, ...],
    kwargs: dict[str, Any],
) -> dict[str, Any]:
    """Map positional and keyword arguments (with defaults) to names."""
    try:
        bound = signature.bind(*args, **kwargs)
    except TypeError:
        return dict(kwargs)
    bound.apply_defaults()
    return dict(bound.arguments)


def _interpolate_string(template: str, arguments: dict[str, Any]) -> str:
    """Interpolate {arg_name} placeholders in string.

    Args:
        template: String with {arg_name} placeholders.
        arguments: Argument values by name.

    Returns:
        Interpolated string. Unknown placeholders are kept as-is.
    """
    pattern = r"\{(\w+)\}"

    def replacer(match: re.Match[str]) -> str:
        name = match.group(1)
        if name in arguments:
            return str(arguments[name])
        return match.group(0)

    return re.sub(pattern, replacer, template)
