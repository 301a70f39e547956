"""
Ordered provider fallback
Try data providers in sequence and collect the failures of the ones that
didn't deliver.
"""
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, List, Optional, Sequence, Tuple, TypeVar

from loguru import logger

T = TypeVar("T")


class ProviderError(Exception):
    """A data provider could not return usable data."""


@dataclass
class ProviderFailure:
    provider: str
    message: str

    def to_dict(self) -> dict:
        return {"provider": self.provider, "message": self.message}


@dataclass
class FallbackResult(Generic[T]):
    value: Optional[T] = None
    source: Optional[str] = None
    errors: List[ProviderFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.source is not None


def first_successful(providers: Sequence[Tuple[str, Callable[[], Any]]]) -> FallbackResult:
    """
    Call each (name, fn) in order and return the first non-None result.

    Exceptions and None results are recorded as ProviderFailure and the
    next provider is tried. Only Exception subclasses are caught.
    """
    errors: List[ProviderFailure] = []
    for name, fn in providers:
        try:
            value = fn()
        except Exception as e:
            logger.debug(f"Provider {name} failed: {e}")
            errors.append(ProviderFailure(name, str(e) or e.__class__.__name__))
            continue
        if value is None:
            errors.append(ProviderFailure(name, "no data"))
            continue
        return FallbackResult(value=value, source=name, errors=errors)
    return FallbackResult(errors=errors)
