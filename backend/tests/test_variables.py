import pytest

from flowcanvas.errors import ReadOnlyViewError
from flowcanvas.graph.graph_schema import Node
from flowcanvas.graph.variables import VariablesView, variables_from_nodes


def _question(node_id: str, variable_name=None, **data) -> Node:
    return Node(id=node_id, type="question", data={"variableName": variable_name, **data})


def test_variables_come_from_question_nodes():
    nodes = [
        _question("q1", "firstname", questionChoiceType="text"),
        Node(id="i1", type="information", data={"variableName": "ignored"}),
        _question("q2"),
        _question("q3", "age", questionChoices=[{"id": "c1", "label": "18+"}]),
    ]

    variables = variables_from_nodes(nodes)

    assert [v.name for v in variables] == ["firstname", "age"]
    assert variables[0].label == "Firstname"
    assert variables[0].type == "text"
    assert variables[1].choices == [{"id": "c1", "label": "18+"}]


def test_view_follows_the_current_nodes():
    nodes = [_question("q1", "city")]
    view = VariablesView(lambda: nodes)

    assert view.names() == ["city"]

    nodes.append(_question("q2", "zip"))
    assert view.names() == ["city", "zip"]


def test_setting_variables_is_forbidden():
    view = VariablesView(lambda: [])

    with pytest.raises(ReadOnlyViewError, match="It is forbidden to set the variables manually"):
        view.variables = []
