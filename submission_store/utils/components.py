"""Form component tree helpers."""

from __future__ import annotations

from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Optional

Component = Dict[str, Any]
ComponentVisitor = Callable[[Component, List[Component], str], Optional[bool]]

# Component types whose children live under the parent's key in submission data
DATA_NESTING_TYPES: FrozenSet[str] = frozenset(
    {"container", "datagrid", "editgrid", "datamap", "tree", "form"}
)


def nests_data(component: Component) -> bool:
    """Return True if the component's children are stored beneath its key."""
    if component.get("tree"):
        return True
    return component.get("type") in DATA_NESTING_TYPES


def _child_lists(component: Component) -> Iterable[List[Component]]:
    if isinstance(component.get("components"), list):
        yield component["components"]
    for column in component.get("columns") or []:
        if isinstance(column, dict) and isinstance(column.get("components"), list):
            yield column["components"]
    for row in component.get("rows") or []:
        if not isinstance(row, list):
            continue
        for cell in row:
            if isinstance(cell, dict) and isinstance(cell.get("components"), list):
                yield cell["components"]


def each_component(
    components: Optional[List[Component]],
    visitor: ComponentVisitor,
    path: str = "",
) -> None:
    """Walk a component tree depth-first.

    ``visitor(component, siblings, dot_path)`` is called for every component.
    ``dot_path`` is the data path of the component, e.g. ``address.street``
    for a ``street`` field inside an ``address`` container. Layout components
    (panels, columns, tables) are visited but do not contribute to the path.
    A visitor returning True skips that component's children.
    """
    if not components:
        return
    for component in components:
        if not isinstance(component, dict):
            continue
        key = component.get("key") or ""
        component_path = f"{path}.{key}" if path and key else (key or path)
        if visitor(component, components, component_path) is True:
            continue
        child_path = component_path if nests_data(component) else path
        for children in _child_lists(component):
            each_component(children, visitor, child_path)
