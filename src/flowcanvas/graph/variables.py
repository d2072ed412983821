from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional

from flowcanvas.errors import ReadOnlyViewError
from flowcanvas.graph.graph_schema import Node


@dataclass(frozen=True)
class Variable:
    name: str
    label: str
    type: Optional[str] = None
    choices: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "label": self.label,
            "type": self.type,
            "choices": list(self.choices),
        }


def variables_from_nodes(nodes: Iterable[Node]) -> List[Variable]:
    """
    Variables declared by question nodes, in node order.

    Question nodes without a variable name declare nothing.
    """
    variables: List[Variable] = []
    for node in nodes:
        if node.type != "question":
            continue
        name = node.data.get("variableName")
        if not name:
            continue
        variables.append(
            Variable(
                name=str(name),
                label=str(name).capitalize(),
                type=node.data.get("questionChoiceType"),
                choices=list(node.data.get("questionChoices") or []),
            )
        )
    return variables


class VariablesView:
    """
    Variables resolved from the current nodes.

    Always derived, never stored: assigning to it is a programmer error.
    """

    def __init__(self, nodes: Callable[[], Iterable[Node]]) -> None:
        self._nodes = nodes

    @property
    def variables(self) -> List[Variable]:
        return variables_from_nodes(self._nodes())

    @variables.setter
    def variables(self, value: Any) -> None:
        raise ReadOnlyViewError(
            "It is forbidden to set the variables manually, "
            "because they're resolved dynamically from nodes directly."
        )

    def names(self) -> List[str]:
        return [v.name for v in self.variables]
