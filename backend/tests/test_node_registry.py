import pytest

from flowcanvas.config.settings import PortConfig
from flowcanvas.errors import UnknownNodeTypeError
from flowcanvas.graph.graph_schema import NodeDefaults, Port
from flowcanvas.graph.node_registry import NodeRegistry, NodeTypeProvider


def _sides(ports):
    return [p.side for p in ports]


def test_start_has_outbound_port_only(registry):
    defaults = registry.get_default_node_props_with_fallback("start")

    assert _sides(defaults.ports) == ["EAST"]
    assert (defaults.base_width, defaults.base_height) == (100.0, 100.0)


def test_end_has_inbound_port_only(registry):
    assert _sides(registry.get_default_ports("end")) == ["WEST"]


def test_question_defaults(registry):
    defaults = registry.get_default_node_props_with_fallback("question")

    assert (defaults.base_width, defaults.base_height) == (450.0, 250.0)
    assert _sides(defaults.ports) == ["WEST", "EAST"]
    assert defaults.data == {
        "questionText": None,
        "variableName": None,
        "questionChoiceType": "single-quick-reply",
        "questionChoices": [],
    }


def test_type_without_props_falls_back_to_generic(registry):
    defaults = registry.get_default_node_props_with_fallback("information")

    assert defaults.type == "information"
    assert (defaults.base_width, defaults.base_height) == (200.0, 100.0)
    assert _sides(defaults.ports) == ["WEST", "EAST"]


def test_unregistered_type_gets_the_generic_provider():
    registry = NodeRegistry()

    assert registry.all() == []
    assert _sides(registry.get_default_ports("if")) == ["WEST", "EAST"]
    assert registry.get_default_node_props_with_fallback("if").base_width == 200.0


def test_unknown_type_fails_loudly(registry):
    with pytest.raises(UnknownNodeTypeError):
        registry.get("loop")

    with pytest.raises(UnknownNodeTypeError):
        registry.register("loop", NodeTypeProvider())


def test_ports_are_fresh_and_follow_port_config():
    registry = NodeRegistry.default(PortConfig(radius=8.0, alignment="BEGIN"))

    first = registry.get_default_ports("question")
    second = registry.get_default_ports("question")

    assert {p.id for p in first}.isdisjoint(p.id for p in second)
    assert {(p.size, p.alignment) for p in first} == {(8.0, "BEGIN")}


def test_defaults_data_is_not_shared(registry):
    first = registry.get_default_node_props_with_fallback("question")
    first.data["questionChoices"].append("yes")

    assert registry.get_default_node_props_with_fallback("question").data["questionChoices"] == []


def test_custom_provider_overrides_a_type(registry):
    registry.register(
        "if",
        NodeTypeProvider(
            get_default_node_props=lambda node_type: NodeDefaults(
                type=node_type,
                base_width=10.0,
                base_height=20.0,
                ports=(Port(id="only", side="SOUTH"),),
            )
        ),
    )

    defaults = registry.get_default_node_props_with_fallback("if")
    assert defaults.base_width == 10.0
    assert defaults.ports[0].id == "only"
    # Ports capability was not given: generic ports are used
    assert _sides(registry.get_default_ports("if")) == ["WEST", "EAST"]
