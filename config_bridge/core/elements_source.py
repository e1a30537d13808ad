"""Read-only access to the full element set of the workspace."""

from __future__ import annotations

from typing import Iterable, Protocol

from config_bridge.core.elements import Element, ElemID


class ElementsSource(Protocol):
    async def get_all(self) -> list[Element]: ...

    async def get(self, elem_id: ElemID) -> Element | None: ...


class InMemoryElementsSource:
    """ElementsSource over a fixed list of elements."""

    def __init__(self, elements: Iterable[Element]) -> None:
        self._elements = {elem.elem_id: elem for elem in elements}

    async def get_all(self) -> list[Element]:
        return list(self._elements.values())

    async def get(self, elem_id: ElemID) -> Element | None:
        return self._elements.get(elem_id)
