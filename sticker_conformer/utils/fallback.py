"""
The "first usable value wins" combinator.

Duration resolution, media variant selection and format classification all
walk an ordered list of candidate producers and stop at the first acceptable
result. `first_match` is that walk.
"""
from typing import Callable, Iterable, Optional, TypeVar

T = TypeVar("T")


def _is_present(value) -> bool:
    return value is not None


def first_match(
    candidates: Iterable[Callable[[], Optional[T]]],
    accept: Callable[[T], bool] = _is_present,
) -> Optional[T]:
    """
    Calls each candidate in order and returns the first accepted value.

    Later candidates are never called once a value has been accepted, so
    expensive candidates belong at the end of the list.

    Args:
        candidates: Zero-argument callables returning a value or None.
        accept: Predicate a non-None value must satisfy. Defaults to
                "is not None".

    Returns:
        The first accepted value, or None if no candidate produced one.
    """
    for candidate in candidates:
        value = candidate()
        if value is not None and accept(value):
            return value
    return None
