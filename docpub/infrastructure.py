"""Service wiring.

A minimal container that builds each service once, on first resolve,
from a registered factory.
"""

from collections.abc import Callable
from typing import Any, TypeVar

from .config import PipelineSettings
from .domain import PipelineConfig
from .services import (
    AsciiDocService,
    GitService,
    RenderService,
    TocService,
    TreeService,
    TriggerService,
)

T = TypeVar("T")


class ServiceContainer:
    """Resolves services by type, creating singletons lazily."""

    def __init__(self) -> None:
        self._factories: dict[type, Callable[["ServiceContainer"], Any]] = {}
        self._instances: dict[type, Any] = {}

    def register(self, service_type: type[T], factory: Callable[["ServiceContainer"], T]) -> None:
        self._factories[service_type] = factory
        self._instances.pop(service_type, None)

    def register_instance(self, service_type: type[T], instance: T) -> None:
        self._instances[service_type] = instance

    def resolve(self, service_type: type[T]) -> T:
        """Get the instance registered for ``service_type``.

        Raises:
            KeyError: If nothing is registered for the type.
        """
        if service_type not in self._instances:
            if service_type not in self._factories:
                raise KeyError(f"No service registered for {service_type.__name__}")
            self._instances[service_type] = self._factories[service_type](self)
        return self._instances[service_type]


def configure_services(
    config: PipelineConfig | None = None,
    index_glob: str | None = None,
) -> ServiceContainer:
    """Create a container with the default service graph.

    Args:
        config: Trigger configuration; defaults to the environment-derived one.
        index_glob: Glob selecting index units; defaults to the settings.
    """
    container = ServiceContainer()
    container.register_instance(
        PipelineConfig, config or PipelineSettings.pipeline_config()
    )
    container.register(AsciiDocService, lambda c: AsciiDocService())
    container.register(
        TreeService,
        lambda c: TreeService(
            c.resolve(AsciiDocService),
            index_glob=index_glob or PipelineSettings.get_index_glob(),
        ),
    )
    container.register(TocService, lambda c: TocService(c.resolve(AsciiDocService)))
    container.register(RenderService, lambda c: RenderService())
    container.register(GitService, lambda c: GitService())
    container.register(TriggerService, lambda c: TriggerService(c.resolve(PipelineConfig)))
    return container
