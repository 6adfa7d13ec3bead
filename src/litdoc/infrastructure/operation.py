from abc import ABC, abstractmethod
from collections.abc import Iterable

from attrs import field, frozen

from litdoc.infrastructure.backend import Backend


@frozen
class Operation(ABC):
    @abstractmethod
    async def execute(self, backend: Backend, *args, **kwargs) -> None:
        """Execute the operation on the given backend."""
        ...


@frozen
class Sequential(Operation):
    """Run operations one after another; the first failure stops the rest."""

    operations: Iterable[Operation] = field(converter=tuple)

    async def execute(self, backend: Backend, *args, **kwargs) -> None:
        for operation in self.operations:
            await operation.execute(backend, *args, **kwargs)

    def __attrs_pre_init__(self):
        super().__init__()
