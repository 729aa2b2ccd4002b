import math
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from backend.core.exceptions import InvalidArgumentError

T = TypeVar('T')


@dataclass
class Page(Generic[T]):
    """One page of a listing. ``page`` is 0-based and echoed as requested."""
    items: list[T] = field(default_factory=list)
    page: int = 0
    size: int = 0
    total_elements: int = 0
    total_pages: int = 0

    @classmethod
    def of(cls, items: list[T], page: int, size: int, total_elements: int) -> 'Page[T]':
        validate_page_request(page, size)
        return cls(
            items=list(items),
            page=page,
            size=size,
            total_elements=total_elements,
            total_pages=math.ceil(total_elements / size),
        )


def validate_page_request(page: int, size: int, max_size: int | None = None) -> None:
    if page < 0:
        raise InvalidArgumentError(f'Page must not be negative, got {page}.')
    if size <= 0:
        raise InvalidArgumentError(f'Page size must be positive, got {size}.')
    if max_size is not None and size > max_size:
        raise InvalidArgumentError(f'Page size must not exceed {max_size}, got {size}.')


def page_offset(page: int, size: int) -> int:
    validate_page_request(page, size)
    return page * size
