"""Tests for machine definition validation."""

import pytest

from edgewise.errors import ValidationError
from edgewise.model import Callbacks, StateMachineModel
from edgewise.validator import OperationNames, validate


def _noop(from_, to):
    pass


def _machine(**overrides):
    machine = {
        "states": {"abc": 1, "def": 2},
        "events": [],
        "edges": [
            {"from": "abc", "to": "def", "action": "ghi", "callbacks": {"in": False, "post": False}},
        ],
        "on_successful_transition": _noop,
        "on_failed_transition": _noop,
    }
    machine.update(overrides)
    return {"state": machine}


def _fails(definition, message, operations=None):
    with pytest.raises(ValidationError) as excinfo:
        validate(definition, "SampleClass", operations)
    assert str(excinfo.value) == message


EDGES_MSG = (
    "`edges` should be a list of dicts, with keys: from, to, action, "
    "callbacks{in: True/False, post: True/False}, on_events (optional)"
)


class TestTopLevelShape:
    def test_not_a_dict(self):
        _fails("state", "state_machine() has to be called on a dict")

    def test_field_without_mappings(self):
        _fails({"state": "foo"}, "state_machine() has to specify a field and the mappings")

    def test_more_than_one_field(self):
        _fails(
            {"state": {}, "status": {}},
            "state_machine() has to specify a field and the mappings",
        )

    def test_unknown_mappings(self):
        _fails(
            {"state": {"foo": 1, "bar": 2}},
            "state_machine() should have (only) the following mappings: "
            "states, events, edges, on_successful_transition, on_failed_transition",
        )

    def test_extra_mapping_next_to_states(self):
        _fails(
            {"state": {"states": {"foo": 1}, "bar": 2}},
            "state_machine() should have (only) the following mappings: "
            "states, events, edges, on_successful_transition, on_failed_transition",
        )


class TestStates:
    def test_empty_states(self):
        _fails(_machine(states={}, events=2, edges=3), "`states` does not specify any states")

    def test_states_not_a_dict(self):
        _fails(_machine(states=["abc"]), "`states` does not specify any states")

    def test_non_integer_codes(self):
        _fails(
            _machine(states={"foo": "hello", "bar": 4.7}),
            "`states` must be a mapping of identifiers to unique ints",
        )

    def test_non_identifier_names(self):
        _fails(
            _machine(states={1: 1, None: 2}),
            "`states` must be a mapping of identifiers to unique ints",
        )

    def test_duplicate_codes(self):
        _fails(
            _machine(states={"foo": 1, "bar": 1}),
            "`states` must be a mapping of identifiers to unique ints",
        )

    def test_bool_is_not_a_code(self):
        _fails(
            _machine(states={"foo": True, "bar": 2}),
            "`states` must be a mapping of identifiers to unique ints",
        )

    def test_negative_code(self):
        _fails(
            _machine(states={"foo": -1, "bar": 2}),
            "`states` must be a mapping of identifiers to unique ints",
        )

    def test_clash_with_type_level_operation(self):
        _fails(
            _machine(states={"foo": 1, "bar": 2}, events=2, edges=3),
            "`foo` is an invalid state name. `SampleClass.foo` method already exists",
            OperationNames(type_level=frozenset({"foo"})),
        )

    def test_clash_with_state_predicate(self):
        _fails(
            _machine(states={"foo": 1, "bar": 2}, events=2, edges=3),
            "`foo` is an invalid state name. `SampleClass#is_foo` method already exists",
            OperationNames(instance_level=frozenset({"is_foo"})),
        )


class TestEvents:
    def test_events_not_a_list(self):
        _fails(_machine(events=2, edges=3), "`events` should be a list of identifiers")

    def test_events_with_non_identifiers(self):
        _fails(_machine(events=["foo", 3]), "`events` should be a list of identifiers")

    def test_clash_with_instance_operation(self):
        _fails(
            _machine(events=["foo", "bar"], edges=3),
            "`foo` is not a valid event name. `SampleClass#foo` method already exists",
            OperationNames(instance_level=frozenset({"foo"})),
        )


class TestEdges:
    def test_edges_not_a_list(self):
        _fails(_machine(edges=3), EDGES_MSG)

    def test_edges_with_wrong_keys(self):
        _fails(
            _machine(edges=[
                {"from": 1, "to": 2},
                {"from": 1, "to": 2, "action": 3, "foo": 4},
            ]),
            EDGES_MSG,
        )

    def test_invalid_from(self):
        _fails(
            _machine(edges=[{"from": 1, "to": 2, "action": 3, "callbacks": 4}]),
            "`edges[0].from` is not a valid state",
        )

    def test_invalid_to(self):
        _fails(
            _machine(edges=[{"from": "abc", "to": 2, "action": 3, "callbacks": 4}]),
            "`edges[0].to` is not a valid state",
        )

    def test_action_not_identifier(self):
        _fails(
            _machine(edges=[{"from": "abc", "to": "def", "action": 3, "callbacks": 4}]),
            "`edges[0].action` is not an identifier",
        )

    def test_action_clash(self):
        _fails(
            _machine(edges=[{"from": "abc", "to": "def", "action": "foo", "callbacks": 4}]),
            "`foo` is an invalid action name. `SampleClass#foo` method already exists",
            OperationNames(instance_level=frozenset({"foo"})),
        )

    def test_action_predicate_clash(self):
        _fails(
            _machine(edges=[{"from": "abc", "to": "def", "action": "foo", "callbacks": 4}]),
            "`foo` is an invalid action name. `SampleClass#can_foo` method already exists",
            OperationNames(instance_level=frozenset({"can_foo"})),
        )

    def test_callbacks_shape(self):
        _fails(
            _machine(edges=[{"from": "abc", "to": "def", "action": "ghi", "callbacks": 22}]),
            "`edges[0].callbacks` must be {in: True/False, post: True/False}",
        )

    def test_callbacks_must_be_bools(self):
        _fails(
            _machine(edges=[
                {"from": "abc", "to": "def", "action": "ghi", "callbacks": {"in": 1, "post": 0}},
            ]),
            "`edges[0].callbacks` must be {in: True/False, post: True/False}",
        )

    def test_on_events_not_a_list(self):
        _fails(
            _machine(edges=[{
                "from": "abc", "to": "def", "action": "ghi",
                "callbacks": {"in": False, "post": False}, "on_events": "bar",
            }]),
            "`bar` (`edges[0].on_events`) is not a valid list of events",
        )

    def test_on_events_not_registered(self):
        _fails(
            _machine(events=["foo"], edges=[{
                "from": "abc", "to": "def", "action": "ghi",
                "callbacks": {"in": False, "post": False}, "on_events": ["bar"],
            }]),
            "`bar` (`edges[0].on_events[0]`) is not a registered event",
        )

    def test_duplicate_edge_with_different_action(self):
        _fails(
            _machine(events=["foo"], edges=[
                {"from": "abc", "to": "def", "action": "move", "callbacks": {"in": False, "post": False}},
                {"from": "abc", "to": "def", "action": "walk", "callbacks": {"in": False, "post": False}},
            ]),
            "`edges[1]` is a duplicate edge",
        )

    def test_reverse_edge_is_not_a_duplicate(self):
        model = validate(_machine(edges=[
            {"from": "abc", "to": "def", "action": "move", "callbacks": {"in": False, "post": False}},
            {"from": "def", "to": "abc", "action": "back", "callbacks": {"in": False, "post": False}},
        ]))
        assert len(model.edges) == 2

    def test_reports_first_broken_edge(self):
        _fails(
            _machine(edges=[
                {"from": "abc", "to": "def", "action": "ghi", "callbacks": {"in": False, "post": False}},
                {"from": "abc", "to": "nope", "action": "jkl", "callbacks": {"in": False, "post": False}},
            ]),
            "`edges[1].to` is not a valid state",
        )


class TestHooks:
    def test_success_hook_not_callable(self):
        _fails(
            _machine(on_successful_transition=4, on_failed_transition=5),
            "`on_successful_transition` must be a callable of signature `(from_, to)`",
        )

    def test_success_hook_wrong_signature(self):
        _fails(
            _machine(on_successful_transition=lambda test: None, on_failed_transition=5),
            "`on_successful_transition` must be a callable of signature `(from_, to)`",
        )

    def test_failure_hook_not_callable(self):
        _fails(
            _machine(on_failed_transition=5),
            "`on_failed_transition` must be a callable of signature `(from_, to)`",
        )

    def test_failure_hook_wrong_signature(self):
        _fails(
            _machine(on_failed_transition=lambda test: None),
            "`on_failed_transition` must be a callable of signature `(from_, to)`",
        )

    def test_hook_with_var_kwargs_rejected(self):
        _fails(
            _machine(on_failed_transition=lambda **kwargs: None),
            "`on_failed_transition` must be a callable of signature `(from_, to)`",
        )

    def test_keyword_only_hook_accepted(self):
        def hook(*, to, from_):
            pass

        model = validate(_machine(on_successful_transition=hook))
        assert model.on_success is hook


class TestModel:
    def test_valid_definition_builds_model(self):
        model = validate(_machine(
            events=["foo", "bar"],
            edges=[
                {"from": "abc", "to": "def", "action": "move",
                 "callbacks": {"in": True, "post": False}, "on_events": ["foo", "bar"]},
            ],
        ))
        assert isinstance(model, StateMachineModel)
        assert model.state_field == "state"
        assert dict(model.states) == {"abc": 1, "def": 2}
        assert dict(model.codes) == {1: "abc", 2: "def"}
        assert model.events == ("foo", "bar")
        edge = model.edges[0]
        assert edge.callbacks == Callbacks(in_=True, post=False)
        assert edge.on_events == ("foo", "bar")
        assert model.callback_names["move"] == ("on_move", "after_move")
        assert model.callback_names["bar"] == ("on_bar", "after_bar")

    def test_on_events_optional(self):
        model = validate(_machine())
        assert model.edges[0].on_events == ()

    def test_model_is_read_only(self):
        model = validate(_machine())
        with pytest.raises(TypeError):
            model.states["ghi"] = 3

    def test_deterministic(self):
        definition = _machine(events=["foo"])
        assert validate(definition) == validate(definition)

    def test_deterministic_errors(self):
        definition = _machine(states={"foo": 1, "bar": 1})
        messages = set()
        for _ in range(3):
            with pytest.raises(ValidationError) as excinfo:
                validate(definition)
            messages.add(str(excinfo.value))
        assert len(messages) == 1

    def test_key_order_does_not_matter(self):
        definition = _machine(on_failed_transition=5)
        reordered = {"state": dict(reversed(list(definition["state"].items())))}
        _fails(reordered, "`on_failed_transition` must be a callable of signature `(from_, to)`")

    def test_validation_error_is_value_error(self):
        with pytest.raises(ValueError):
            validate(None)


class TestGeneratedNames:
    def test_event_named_like_action(self):
        _fails(
            _machine(
                states={"abc": 1, "def": 2, "ghi": 3},
                events=["go"],
                edges=[
                    {"from": "abc", "to": "def", "action": "go", "callbacks": {"in": False, "post": False}},
                    {"from": "def", "to": "ghi", "action": "step",
                     "callbacks": {"in": False, "post": False}, "on_events": ["go"]},
                ],
            ),
            "`go` is ambiguous. It names both the `go` action and the `go` event",
        )

    def test_action_named_like_state_field(self):
        _fails(
            _machine(edges=[
                {"from": "abc", "to": "def", "action": "state", "callbacks": {"in": False, "post": False}},
            ]),
            "`state` is ambiguous. It names both the state field and the `state` action",
        )

    def test_event_named_like_state_predicate(self):
        _fails(
            _machine(events=["is_abc"]),
            "`is_abc` is ambiguous. It names both the `abc` state predicate and the `is_abc` event",
        )

    def test_action_named_like_action_predicate(self):
        _fails(
            _machine(edges=[
                {"from": "abc", "to": "def", "action": "move", "callbacks": {"in": False, "post": False}},
                {"from": "def", "to": "abc", "action": "can_move", "callbacks": {"in": False, "post": False}},
            ]),
            "`can_move` is ambiguous. It names both the `move` action predicate and the `can_move` action",
        )

    def test_action_shared_by_edges_is_allowed(self):
        model = validate(_machine(edges=[
            {"from": "abc", "to": "def", "action": "toggle", "callbacks": {"in": False, "post": False}},
            {"from": "def", "to": "abc", "action": "toggle", "callbacks": {"in": False, "post": False}},
        ]))
        assert model.actions == ("toggle", "toggle")
