import ast
import sys
import textwrap

import pytest

from treegen.emitter import emit_module, render_event, render_node, render_value
from treegen.errors import EmissionInvariantError
from treegen.model import EventBinding, TreeNode
from treegen.parser import parse_tree
from treegen.verify_roundtrip import load_generated, verify_roundtrip


def _sample_tree() -> TreeNode:
    return TreeNode(
        element_kind="div",
        attributes={"z": 1, "a": "x"},
        report_events=[
            EventBinding(name="click"),
            EventBinding(name="hover", stop_propagation=True),
        ],
        children=[TreeNode(text="hi")],
    )


def test_node_without_fields_renders_empty_constructor() -> None:
    assert render_node(TreeNode()) == "TreeNode()"


def test_single_leaf_renders_element_kind_then_text() -> None:
    expected = textwrap.dedent(
        """\
        TreeNode(
            element_kind='div',
            text='hi',
        )"""
    )

    assert render_node(TreeNode(element_kind="div", text="hi")) == expected


def test_event_flags_are_emitted_only_when_set() -> None:
    plain = render_event(EventBinding(name="click"))
    flagged = render_event(EventBinding(name="submit", prevent_default=True, stop_propagation=True))

    assert "prevent_default" not in plain
    assert "stop_propagation" not in plain
    assert "prevent_default=True" in flagged
    assert "stop_propagation=True" in flagged
    assert render_event(EventBinding()) == "EventBinding()"


def test_event_extra_values_are_emitted_in_order() -> None:
    rendered = render_event(EventBinding(name="keyup", extra_values=["shiftKey", "keyCode"]))

    assert rendered.index("'shiftKey'") < rendered.index("'keyCode'")


def test_present_but_empty_collections_are_emitted() -> None:
    rendered = render_node(TreeNode(attributes={}, report_events=[], children=[]))

    assert "attributes={}," in rendered
    assert "report_events=[]," in rendered
    assert "children=[]," in rendered


def test_attribute_keys_are_sorted() -> None:
    rendered = render_node(TreeNode(attributes={"z": 1, "a": 2}))

    assert rendered.index("'a': 2") < rendered.index("'z': 1")


def test_nested_attribute_keys_are_sorted() -> None:
    rendered = render_value({"style": {"width": 10, "color": "red"}})

    assert rendered.index("'color'") < rendered.index("'width'")


def test_event_order_is_preserved() -> None:
    rendered = render_node(
        TreeNode(report_events=[EventBinding(name="hover"), EventBinding(name="click")])
    )

    assert rendered.index("'hover'") < rendered.index("'click'")


def test_children_are_emitted_in_order() -> None:
    tree = TreeNode(
        element_kind="ul",
        children=[TreeNode(element_kind="li", text="one"), TreeNode(element_kind="li", text="two")],
    )

    rendered = render_node(tree)
    call = ast.parse(rendered, mode="eval").body

    keywords = {keyword.arg: keyword.value for keyword in call.keywords}
    items = keywords["children"].elts
    assert len(items) == 2
    assert [item.keywords[1].value.value for item in items] == ["one", "two"]


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (True, "True"),
        (False, "False"),
        (3, "3"),
        (1.5, "1.5"),
        (float("nan"), "float('nan')"),
        (float("-inf"), "-float('inf')"),
        ("it's", '"it\'s"'),
        ([], "[]"),
    ],
)
def test_render_value_cases(value, expected) -> None:
    assert render_value(value) == expected


def test_render_value_rejects_values_outside_the_variant() -> None:
    with pytest.raises(EmissionInvariantError):
        render_value(None)
    with pytest.raises(EmissionInvariantError):
        render_value({1: "x"})


def test_emit_module_layout() -> None:
    expected = textwrap.dedent(
        '''\
        # Code generated by treegen. DO NOT EDIT.
        """Display models for the ``screens`` namespace."""

        from treegen.model import EventBinding, TreeNode

        __namespace__ = 'screens'

        __all__ = [
            'home',
        ]


        home = TreeNode(
            element_kind='div',
            attributes={
                'a': 'x',
                'z': 1,
            },
            report_events=[
                EventBinding(
                    name='click',
                ),
                EventBinding(
                    name='hover',
                    stop_propagation=True,
                ),
            ],
            children=[
                TreeNode(
                    text='hi',
                ),
            ],
        )
        '''
    )

    assert emit_module({"home": _sample_tree()}, namespace="screens") == expected


def test_emit_module_without_models() -> None:
    source = emit_module({}, namespace="main")

    assert source.endswith("__all__ = []\n")
    assert load_generated(source)["__namespace__"] == "main"


def test_emission_is_deterministic_across_insertion_orders() -> None:
    first = TreeNode(attributes={"b": 1, "a": {"y": True, "x": False}})
    second = TreeNode(attributes={"a": {"x": False, "y": True}, "b": 1})

    assert emit_module({"m": first}, namespace="main") == emit_module({"m": second}, namespace="main")
    assert emit_module({"m": first}, namespace="main") == emit_module({"m": first}, namespace="main")


def test_declarations_follow_mapping_order() -> None:
    source = emit_module({"zeta": TreeNode(), "alpha": TreeNode()}, namespace="main")

    assert source.index("zeta = TreeNode()") < source.index("alpha = TreeNode()")


def test_generated_module_rebuilds_parsed_trees() -> None:
    models = {
        "login": parse_tree(
            """
            <form id="login" class="card" reportEvents="submit:PD:SP">
              <label for="user">User</label>
              <input id="user" name="user" reportEvents="input:X-value, keyup:X-keyCode"/>
              <p>Forgot it? <a href="/reset">Reset</a> now.</p>
            </form>
            """
        ),
        "typed": TreeNode(
            id="t",
            attributes={"on": True, "n": 2, "r": 0.25, "s": "it's \"quoted\"\n", "nested": {"k": [1, "two", False]}},
        ),
    }

    source = emit_module(models, namespace="app.screens")
    namespace = load_generated(source)

    assert namespace["__all__"] == ["login", "typed"]
    assert namespace["login"] == models["login"]
    assert namespace["typed"] == models["typed"]
    assert verify_roundtrip(models, source) == []


def test_verify_roundtrip_reports_mismatches() -> None:
    models = {"home": TreeNode(text="expected")}
    source = emit_module({"home": TreeNode(text="other")}, namespace="main")

    errors = verify_roundtrip(models, source)

    assert len(errors) == 1
    assert "generated/home" in errors[0]


def test_invalid_namespace_is_rejected() -> None:
    with pytest.raises(EmissionInvariantError):
        emit_module({}, namespace="not a name")


def test_invalid_binding_name_is_rejected() -> None:
    with pytest.raises(EmissionInvariantError):
        emit_module({"class": TreeNode()}, namespace="main")


def test_deep_tree_moves_subtrees_to_private_declarations() -> None:
    depth = 150
    tree = parse_tree("<d>" * depth + "x" + "</d>" * depth)

    source = emit_module({"deep": tree}, namespace="main")
    namespace = load_generated(source)

    assert "_treegen_deep_1 = TreeNode(" in source
    assert source.index("_treegen_deep_1 = ") < source.index("\ndeep = ")
    assert namespace["__all__"] == ["deep"]
    assert verify_roundtrip({"deep": tree}, source) == []
    assert emit_module({"deep": tree}, namespace="main") == source


def test_deep_attribute_values_round_trip() -> None:
    value = "leaf"
    for _ in range(100):
        value = [value]
    tree = TreeNode(attributes={"nested": value})

    source = emit_module({"wide": tree}, namespace="main")

    assert "_treegen_wide_1 = [" in source
    assert verify_roundtrip({"wide": tree}, source) == []


def test_shallow_trees_are_rendered_inline() -> None:
    source = emit_module({"home": _sample_tree()}, namespace="main")

    assert "_treegen_" not in source


def test_float_binding_cannot_shadow_non_finite_literals() -> None:
    with pytest.raises(EmissionInvariantError):
        emit_module(
            {"float": TreeNode(), "z": TreeNode(attributes={"w": float("inf")})},
            namespace="main",
        )


def test_non_finite_floats_round_trip() -> None:
    models = {"z": TreeNode(attributes={"w": float("inf"), "v": float("-inf")})}

    assert verify_roundtrip(models, emit_module(models, namespace="main")) == []


def test_generated_source_is_imported_as_a_module() -> None:
    namespace = load_generated(emit_module({"home": TreeNode()}, namespace="main"))

    assert namespace["__name__"] == "treegen_generated"
    assert namespace["__file__"].endswith("treegen_generated.py")
    assert "treegen_generated" not in sys.modules
