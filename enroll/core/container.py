"""
Service container for enroll.

A process-wide map from interface type to a dependency-injector provider.
bootstrap() fills it once per CLI run; the register command and
resolve_or_default() read from it.
"""

from collections.abc import Callable
from typing import Optional, TypeVar

from dependency_injector import providers

T = TypeVar("T")


class ServiceContainer:
    """Interface -> provider registry with singleton and per-resolve lifetimes."""

    _instance: Optional["ServiceContainer"] = None

    def __init__(self) -> None:
        self._providers: dict[type, providers.Provider] = {}

    @classmethod
    def get_instance(cls) -> "ServiceContainer":
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Drop the process-wide container (tests start from an empty one)."""
        cls._instance = None

    def register_singleton(
        self,
        interface: type[T],
        implementation: T | None = None,
        factory: Callable[[], T] | None = None,
    ) -> None:
        """
        Register one shared instance: either ready-made or built lazily by factory.

        Raises:
            ValueError: If neither implementation nor factory is given
        """
        if implementation is not None:
            self._providers[interface] = providers.Object(implementation)
        elif factory is not None:
            self._providers[interface] = providers.Singleton(factory)
        else:
            raise ValueError("Must provide either implementation or factory")

    def register_transient(self, interface: type[T], factory: Callable[..., T]) -> None:
        """Register a factory called on every resolve (one page fetcher per flow)."""
        self._providers[interface] = providers.Factory(factory)

    def resolve(self, interface: type[T]) -> T:
        """
        Raises:
            KeyError: If nothing is registered for interface
        """
        if interface not in self._providers:
            raise KeyError(f"No provider registered for: {interface}")
        return self._providers[interface]()

    def try_resolve(self, interface: type[T]) -> T | None:
        """Like resolve(), but None when nothing is registered."""
        provider = self._providers.get(interface)
        return provider() if provider is not None else None


def get_container() -> ServiceContainer:
    """The process-wide container."""
    return ServiceContainer.get_instance()
