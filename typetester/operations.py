"""Explicit table of the operations the application exposes.

The table is filled once when the runtime starts and then frozen, so the set
of callable operations is fixed for the life of the process. HTTP handlers
and CLI commands both dispatch by name through it.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterator, Mapping
from functools import partial
from typing import TYPE_CHECKING, Any

from typetester.db.services import font_service

if TYPE_CHECKING:
    from typetester.runtime import FontRuntime

Operation = Callable[..., Awaitable[Any]]

ACTIVATE = "activate"
DEACTIVATE = "deactivate"
UPLOAD_FONT = "upload_font"
DELETE_FONT = "delete_font"
LIST_FONTS = "list_fonts"
GET_FONT = "get_font"


class OperationTable(Mapping[str, Operation]):
    """Name → coroutine function mapping that can be sealed."""

    def __init__(self) -> None:
        self._operations: dict[str, Operation] = {}
        self._frozen = False

    def register(self, name: str, operation: Operation) -> None:
        if self._frozen:
            raise RuntimeError(f"Cannot register {name!r}: operation table is frozen")
        if name in self._operations:
            raise ValueError(f"Operation {name!r} is already registered")
        self._operations[name] = operation

    def freeze(self) -> OperationTable:
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    async def dispatch(self, name: str, *args: Any, **kwargs: Any) -> Any:
        """Run the operation registered under *name*."""
        return await self._operations[name](*args, **kwargs)

    def __getitem__(self, name: str) -> Operation:
        return self._operations[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._operations)

    def __len__(self) -> int:
        return len(self._operations)


def build_operations(runtime: FontRuntime) -> OperationTable:
    """Bind every operation to the runtime's collaborators."""
    table = OperationTable()
    table.register(ACTIVATE, runtime.lifecycle.on_activate)
    table.register(DEACTIVATE, runtime.lifecycle.on_deactivate)
    table.register(
        UPLOAD_FONT,
        partial(font_service.upload_font, runtime.registry, runtime.validator),
    )
    table.register(
        DELETE_FONT,
        partial(font_service.delete_font, runtime.registry),
    )
    table.register(LIST_FONTS, runtime.registry.list_all)
    table.register(GET_FONT, partial(font_service.get_font, runtime.registry))
    return table.freeze()
