"""License decorators for function protection.
"""

from __future__ import annotations

import logging
from functools import wraps
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable

from clearlic.common.exceptions import LicenseExpired

logger = logging.getLogger(__name__)


def _deny(
    lic: Any, error_message: str, *, raise_exception: bool
) -> None:
    if raise_exception:
        msg = f"{error_message}: {lic}"
        raise LicenseExpired(msg)
    logger.warning("License check failed: %s (%s)", error_message, lic)


def requires_valid_license(
    lic: Any | Callable[[], Any] | str,
    error_message: str = "BAD LICENSE",
    *,
    raise_exception: bool = True,
) -> Callable:
    """Decorator that ensures function runs only while the license is valid.

    Args:
        lic: License instance, callable that returns one, or the name of an
            attribute holding one on ``self``
        error_message: Message to show when the license has expired
        raise_exception: Whether to raise exception or return None

    Returns:
        Decorated function that only executes when the license is valid
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            if isinstance(lic, str):
                # Attribute name - get from self
                if not args:
                    error_msg = f"Cannot get license attribute '{lic}' without self"
                    raise ValueError(error_msg)
                current = getattr(args[0], lic)
            elif callable(lic) and not hasattr(lic, "is_valid"):
                current = lic()
            else:
                current = lic

            if not current.is_valid():
                _deny(current, error_message, raise_exception=raise_exception)
                return None
            return func(*args, **kwargs)

        return wrapper

    return decorator


def license_protected(
    get_license: Callable[[], Any],
    error_message: str = "BAD LICENSE",
    *,
    raise_exception: bool = True,
) -> Callable:
    """Decorator that gets the license dynamically and checks its validity.

    Args:
        get_license: Function that returns a License instance
        error_message: Message to show when the license has expired
        raise_exception: Whether to raise exception or return None
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            current = get_license()
            if not current.is_valid():
                _deny(current, error_message, raise_exception=raise_exception)
                return None
            return func(*args, **kwargs)

        return wrapper

    return decorator
