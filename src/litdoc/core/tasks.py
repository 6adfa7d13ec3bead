"""Named build tasks and their dependencies.

The default graph declares three tasks:

- ``compile``: run the literate-doc compiler once
- ``convert``: convert every compiled file, depends on ``compile``
- ``publish``: run the publish hook, depends on ``compile`` then ``convert``

Running a task first runs its dependencies, each at most once, in the order
they are declared. Execution is strictly sequential and the first failure
aborts the chain.
"""

import logging
from typing import Any

from attrs import define, field, frozen

from litdoc.core.build_settings import BuildSettings
from litdoc.core.operations.compile_docs import CompileDocsOperation
from litdoc.core.operations.convert_files import ConvertFilesOperation
from litdoc.core.operations.publish_docs import PublishDocsOperation
from litdoc.infrastructure.backend import Backend
from litdoc.infrastructure.errors import TaskCycleError, UnknownTaskError
from litdoc.infrastructure.operation import Operation, Sequential

logger = logging.getLogger(__name__)

COMPILE = "compile"
CONVERT = "convert"
PUBLISH = "publish"


@frozen
class Task(Operation):
    name: str
    operation: Operation
    depends_on: tuple[str, ...] = field(default=(), converter=tuple)
    description: str = ""

    async def execute(self, backend: Backend, *args: Any, **kwargs: Any) -> None:
        logger.info(f"Running task '{self.name}'")
        await self.operation.execute(backend, *args, **kwargs)
        logger.info(f"Task '{self.name}' completed")


@define
class TaskGraph:
    tasks: dict[str, Task] = field(factory=dict)

    def add(self, task: Task) -> Task:
        self.tasks[task.name] = task
        return task

    def get(self, name: str) -> Task:
        try:
            return self.tasks[name]
        except KeyError:
            raise UnknownTaskError(name, list(self.tasks)) from None

    def plan(self, name: str) -> list[Task]:
        """Return the tasks to run for ``name``, dependencies first."""
        planned: list[Task] = []
        seen: set[str] = set()

        def visit(task_name: str, chain: list[str]) -> None:
            if task_name in chain:
                raise TaskCycleError([*chain, task_name])
            if task_name in seen:
                return
            task = self.get(task_name)
            for dependency in task.depends_on:
                visit(dependency, [*chain, task_name])
            seen.add(task_name)
            planned.append(task)

        visit(name, [])
        return planned

    def operation_for(self, name: str, with_dependencies: bool = True) -> Operation:
        if with_dependencies:
            return Sequential(self.plan(name))
        return self.get(name)


def default_task_graph(settings: BuildSettings) -> TaskGraph:
    graph = TaskGraph()
    graph.add(
        Task(
            name=COMPILE,
            operation=CompileDocsOperation(settings),
            description="Compile the literate markdown sources into the target directory",
        )
    )
    graph.add(
        Task(
            name=CONVERT,
            operation=ConvertFilesOperation(settings),
            depends_on=(COMPILE,),
            description="Convert every file in the target directory",
        )
    )
    graph.add(
        Task(
            name=PUBLISH,
            operation=PublishDocsOperation(settings),
            depends_on=(COMPILE, CONVERT),
            description="Run the publish command",
        )
    )
    return graph


async def run_task(
    graph: TaskGraph, name: str, backend: Backend, with_dependencies: bool = True
) -> None:
    operation = graph.operation_for(name, with_dependencies=with_dependencies)
    async with backend:
        await operation.execute(backend)
