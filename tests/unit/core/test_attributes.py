"""Unit tests for the generic expand / flatten / update algorithms."""

from __future__ import annotations

import copy
import logging

import pytest
from pydantic import BaseModel

from terrastripe.core.attributes import (
    changed_keys,
    expand,
    expand_metadata,
    expand_update,
    flatten,
    remote_to_dict,
    replacement_keys,
    values_equal,
)
from terrastripe.core.exceptions import ValidationError
from terrastripe.core.field_spec import (
    FieldSpec,
    FieldType,
    MutuallyExclusive,
    ResourceSchema,
    computed_attribute,
)

# -------------------- Fixtures / helpers --------------------

TIER = FieldSpec(
    key="tier",
    type=FieldType.LIST,
    remote_name="tiers",
    write_only=True,
    children=(
        FieldSpec(key="up_to", type=FieldType.INT),
        FieldSpec(key="up_to_inf", type=FieldType.BOOL),
        FieldSpec(key="flat_amount", type=FieldType.INT),
        FieldSpec(key="flat_amount_decimal", type=FieldType.FLOAT),
    ),
    constraints=(
        MutuallyExclusive(keys=("up_to", "up_to_inf"), required=True),
        MutuallyExclusive(keys=("flat_amount", "flat_amount_decimal")),
    ),
)

SCHEMA = ResourceSchema(
    kind="stripe_widget",
    fields=(
        FieldSpec(
            key="code",
            type=FieldType.STRING,
            remote_name="id",
            required=True,
            force_new=True,
        ),
        FieldSpec(key="nickname", type=FieldType.STRING),
        FieldSpec(key="active", type=FieldType.BOOL, default=True),
        FieldSpec(
            key="interval",
            type=FieldType.STRING,
            allowed_values=frozenset({"day", "month"}),
        ),
        FieldSpec(key="amount", type=FieldType.INT),
        FieldSpec(key="amount_decimal", type=FieldType.FLOAT),
        FieldSpec(key="redeem_by", type=FieldType.TIMESTAMP),
        FieldSpec(key="labels", type=FieldType.SET, elem_type=FieldType.STRING),
        FieldSpec(key="metadata", type=FieldType.MAP, elem_type=FieldType.STRING),
        FieldSpec(
            key="recurring",
            type=FieldType.MAP,
            children=(
                FieldSpec(
                    key="interval",
                    type=FieldType.STRING,
                    required=True,
                    allowed_values=frozenset({"day", "month"}),
                ),
                FieldSpec(key="interval_count", type=FieldType.INT),
            ),
        ),
        FieldSpec(
            key="profile",
            type=FieldType.LIST,
            max_items=1,
            children=(FieldSpec(key="headline", type=FieldType.STRING, required=True),),
        ),
        TIER,
        computed_attribute("created", FieldType.INT),
        FieldSpec(
            key="secret",
            type=FieldType.STRING,
            optional=False,
            computed=True,
            write_only=True,
        ),
    ),
    constraints=(MutuallyExclusive(keys=("amount", "amount_decimal")),),
)

FULL_TREE = {
    "code": "SPRING",
    "nickname": "Spring",
    "active": False,
    "interval": "month",
    "amount": 0,
    "redeem_by": "2030-01-01T00:00:00Z",
    "labels": ["b", "a"],
    "metadata": {"team": "billing"},
    "recurring": {"interval": "month", "interval_count": "3"},
    "profile": [{"headline": "Hello"}],
    "tier": [
        {"up_to": 10, "flat_amount": 500},
        {"up_to": 20, "flat_amount_decimal": 12.5},
        {"up_to_inf": True},
    ],
}


class Widget(BaseModel):
    """Response model with presence tracking."""

    id: str | None = None
    nickname: str | None = None


# --------------------------- Expand ---------------------------


class TestExpand:
    def test_keys_are_renamed_and_defaults_filled(self) -> None:
        params = expand({"code": "SPRING", "amount": 0}, SCHEMA)
        assert params == {"id": "SPRING", "active": True, "amount": 0}

    def test_full_tree(self) -> None:
        params = expand(FULL_TREE, SCHEMA)
        assert params["id"] == "SPRING"
        assert params["active"] is False
        assert params["redeem_by"] == 1893456000
        assert params["recurring"] == {"interval": "month", "interval_count": 3}
        assert params["profile"] == {"headline": "Hello"}
        assert params["metadata"] == {"team": "billing"}
        assert params["tiers"] == [
            {"up_to": 10, "flat_amount": 500},
            {"up_to": 20, "flat_amount_decimal": 12.5},
            {"up_to_inf": True},
        ]

    def test_unset_optional_fields_are_omitted(self) -> None:
        params = expand({"code": "X", "nickname": None, "labels": []}, SCHEMA)
        assert "nickname" not in params
        assert "labels" not in params

    def test_computed_fields_are_ignored(self) -> None:
        params = expand({"code": "X", "created": 5, "secret": "s"}, SCHEMA)
        assert "created" not in params and "secret" not in params

    def test_input_is_not_mutated(self) -> None:
        tree = copy.deepcopy(FULL_TREE)
        expand(tree, SCHEMA)
        assert tree == FULL_TREE

    def test_numeric_strings_are_parsed(self) -> None:
        assert expand({"code": "X", "amount": "12"}, SCHEMA)["amount"] == 12

    def test_bad_numeric_string_fails(self) -> None:
        recurring = {"interval": "day", "interval_count": "x"}
        with pytest.raises(ValidationError) as exc:
            expand({"code": "X", "recurring": recurring}, SCHEMA)
        assert exc.value.field_name == "recurring.interval_count"

    def test_enum_violation(self) -> None:
        with pytest.raises(ValidationError) as exc:
            expand({"code": "X", "interval": "year"}, SCHEMA)
        assert "is not a valid value for" in exc.value.message

    def test_exclusive_pair_fails(self) -> None:
        with pytest.raises(ValidationError) as exc:
            expand({"code": "X", "amount": 1, "amount_decimal": 1.5}, SCHEMA)
        assert exc.value.field_name == "amount_decimal"

    def test_missing_required_field(self) -> None:
        with pytest.raises(ValidationError):
            expand({}, SCHEMA)
        with pytest.raises(ValidationError):
            expand(None, SCHEMA)

    def test_unknown_key_fails(self) -> None:
        with pytest.raises(ValidationError):
            expand({"code": "X", "colour": "red"}, SCHEMA)

    def test_set_values_are_deduplicated(self) -> None:
        params = expand({"code": "X", "labels": ["b", "a", "b"]}, SCHEMA)
        assert params["labels"] == ["b", "a"]

    def test_null_collection_element_fails(self) -> None:
        with pytest.raises(ValidationError) as exc:
            expand({"code": "X", "labels": ["a", None]}, SCHEMA)
        assert exc.value.field_name == "labels.1"

    def test_metadata_values_become_strings(self) -> None:
        params = expand({"code": "X", "metadata": {"n": 1, "f": True}}, SCHEMA)
        assert params["metadata"] == {"n": "1", "f": "true"}

    def test_typed_map_rejects_unknown_keys(self) -> None:
        with pytest.raises(ValidationError) as exc:
            expand({"code": "X", "recurring": {"interval": "day", "x": "1"}}, SCHEMA)
        assert exc.value.field_name == "recurring.x"

    def test_single_block_accepts_one_element(self) -> None:
        with pytest.raises(ValidationError) as exc:
            expand(
                {"code": "X", "profile": [{"headline": "a"}, {"headline": "b"}]},
                SCHEMA,
            )
        assert "at most 1" in exc.value.message

    def test_nested_required_key(self) -> None:
        with pytest.raises(ValidationError) as exc:
            expand({"code": "X", "profile": [{}]}, SCHEMA)
        assert exc.value.field_name == "profile.0.headline"

    def test_tier_with_both_flat_amounts_fails(self) -> None:
        tree = {
            "code": "X",
            "tier": [{"up_to_inf": True, "flat_amount": 1, "flat_amount_decimal": 1.0}],
        }
        with pytest.raises(ValidationError) as exc:
            expand(tree, SCHEMA)
        assert exc.value.field_name == "tier.0.flat_amount_decimal"

    def test_tier_order_is_preserved(self) -> None:
        tiers = [{"up_to": n} for n in (30, 10, 20)]
        params = expand({"code": "X", "tier": tiers}, SCHEMA)
        assert [t["up_to"] for t in params["tiers"]] == [30, 10, 20]

    def test_tier_needs_a_bound(self) -> None:
        with pytest.raises(ValidationError) as exc:
            expand({"code": "X", "tier": [{"flat_amount": 1}]}, SCHEMA)
        assert "exactly one of" in exc.value.message


# --------------------------- Metadata ---------------------------


class TestExpandMetadata:
    def test_dropped_keys_become_tombstones(self) -> None:
        result = expand_metadata({"a": "1", "b": "2"}, {"a": "1", "c": "3"})
        assert result == {"a": "1", "b": "", "c": "3"}

    def test_new_map(self) -> None:
        assert expand_metadata({}, {"x": "y"}) == {"x": "y"}

    def test_cleared_map(self) -> None:
        assert expand_metadata({"x": "y"}, {}) == {"x": ""}

    def test_none_snapshots(self) -> None:
        assert expand_metadata(None, None) == {}
        assert expand_metadata(None, {"n": 2}) == {"n": "2"}

    def test_null_value_is_a_tombstone(self) -> None:
        assert expand_metadata({"a": "1"}, {"a": None}) == {"a": ""}

    def test_removal_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level(logging.DEBUG, logger="terrastripe.core.attributes")
        expand_metadata({"gone": "1"}, {})
        assert any("tombstoned" in r.message for r in caplog.records)


# --------------------------- Flatten ---------------------------


class TestFlatten:
    def test_round_trip_reproduces_every_set_field(self) -> None:
        remote = dict(expand(FULL_TREE, SCHEMA), created=1700000000)
        tree = flatten(remote, SCHEMA)
        for key, value in FULL_TREE.items():
            assert tree[key] == value, key
        assert tree["created"] == 1700000000

    def test_absent_fields_are_left_untouched(self) -> None:
        previous = {"code": "X", "nickname": "old", "tier": [{"up_to_inf": True}]}
        tree = flatten({"id": "X", "nickname": "new"}, SCHEMA, previous)
        assert tree["nickname"] == "new"
        assert tree["tier"] == [{"up_to_inf": True}]

    def test_previous_is_not_mutated(self) -> None:
        previous = {"code": "X", "nickname": "old"}
        flatten({"nickname": "new"}, SCHEMA, previous)
        assert previous == {"code": "X", "nickname": "old"}

    def test_null_clears_plain_fields(self) -> None:
        tree = flatten({"nickname": None}, SCHEMA, {"nickname": "old"})
        assert tree["nickname"] is None

    def test_null_keeps_write_only_fields(self) -> None:
        previous = {"secret": "whsec_1", "tier": [{"up_to_inf": True}]}
        tree = flatten({"secret": None, "tiers": None}, SCHEMA, previous)
        assert tree["secret"] == "whsec_1"
        assert tree["tier"] == [{"up_to_inf": True}]

    def test_response_without_tiers_keeps_previous_tiers(self) -> None:
        previous = {"code": "X", "tier": FULL_TREE["tier"]}
        tree = flatten({"id": "X", "active": True}, SCHEMA, previous)
        assert tree["tier"] == FULL_TREE["tier"]

    def test_nested_blocks_merge_with_previous_element(self) -> None:
        previous = {"tier": [{"up_to": 10, "flat_amount": 5}]}
        tree = flatten({"tiers": [{"up_to": 10}]}, SCHEMA, previous)
        assert tree["tier"] == [{"up_to": 10, "flat_amount": 5}]

    def test_timestamp_is_rendered_as_rfc3339(self) -> None:
        tree = flatten({"redeem_by": 1893456000}, SCHEMA)
        assert tree["redeem_by"] == "2030-01-01T00:00:00Z"

    def test_exclusive_pair_keeps_previous_choice(self) -> None:
        remote = {"amount": 150, "amount_decimal": 150.0}
        tree = flatten(remote, SCHEMA, {"amount_decimal": 150.0})
        assert tree["amount_decimal"] == 150.0
        assert "amount" not in tree

    def test_exclusive_pair_defaults_to_first_declared(self) -> None:
        tree = flatten({"amount": 150, "amount_decimal": 150.0}, SCHEMA)
        assert tree["amount"] == 150
        assert "amount_decimal" not in tree

    def test_model_response_only_overlays_set_fields(self) -> None:
        tree = flatten(Widget(id="X"), SCHEMA, {"nickname": "keep"})
        assert tree == {"nickname": "keep", "code": "X"}

    def test_remote_to_dict_rejects_other_types(self) -> None:
        with pytest.raises(ValidationError):
            remote_to_dict(["not", "a", "mapping"])


# --------------------------- Updates ---------------------------


class TestUpdates:
    PREVIOUS = {
        "code": "X",
        "nickname": "a",
        "labels": ["x", "y"],
        "metadata": {"a": "1", "b": "2"},
        "created": 1,
    }

    def test_changed_keys_ignore_set_order(self) -> None:
        desired = {
            "code": "X",
            "nickname": "b",
            "labels": ["y", "x"],
            "metadata": {"a": "1", "c": "3"},
        }
        assert changed_keys(self.PREVIOUS, desired, SCHEMA) == ["nickname", "metadata"]

    def test_expand_update_sends_only_changes(self) -> None:
        desired = {
            "code": "X",
            "nickname": "b",
            "labels": ["y", "x"],
            "metadata": {"a": "1", "c": "3"},
        }
        params = expand_update(self.PREVIOUS, desired, SCHEMA)
        assert params == {"nickname": "b", "metadata": {"a": "1", "b": "", "c": "3"}}

    def test_removed_string_is_cleared(self) -> None:
        desired = {"code": "X", "labels": ["x", "y"], "metadata": {"a": "1", "b": "2"}}
        assert expand_update(self.PREVIOUS, desired, SCHEMA) == {"nickname": ""}

    def test_removed_enumerated_key_is_not_cleared(self) -> None:
        previous = {"code": "X", "interval": "month"}
        assert expand_update(previous, {"code": "X"}, SCHEMA) == {}

    def test_removed_metadata_map_tombstones_every_key(self) -> None:
        desired = {"code": "X", "nickname": "a", "labels": ["x", "y"]}
        params = expand_update(self.PREVIOUS, desired, SCHEMA)
        assert params == {"metadata": {"a": "", "b": ""}}

    def test_removed_field_falls_back_to_default(self) -> None:
        params = expand_update({"code": "X", "active": False}, {"code": "X"}, SCHEMA)
        assert params == {"active": True}

    def test_unset_key_equals_its_default(self) -> None:
        assert changed_keys({"code": "X", "active": True}, {"code": "X"}, SCHEMA) == []

    def test_omitted_computed_key_keeps_remote_value(self) -> None:
        schema = ResourceSchema(
            kind="stripe_widget",
            fields=(
                FieldSpec(
                    key="widget_id",
                    type=FieldType.STRING,
                    remote_name="id",
                    computed=True,
                    force_new=True,
                ),
                FieldSpec(key="nickname", type=FieldType.STRING),
            ),
        )
        previous = {"widget_id": "wd_1", "nickname": "a"}
        assert replacement_keys(previous, {"nickname": "a"}, schema) == []
        assert replacement_keys(previous, {"widget_id": "wd_2"}, schema) == [
            "widget_id"
        ]

    def test_removed_number_is_not_sent(self) -> None:
        assert expand_update({"code": "X", "amount": 5}, {"code": "X"}, SCHEMA) == {}

    def test_force_new_changes_are_reported_not_sent(self) -> None:
        previous = {"code": "X", "nickname": "a"}
        desired = {"code": "Y", "nickname": "b"}
        assert replacement_keys(previous, desired, SCHEMA) == ["code"]
        assert expand_update(previous, desired, SCHEMA) == {"nickname": "b"}

    def test_invalid_desired_tree_fails(self) -> None:
        with pytest.raises(ValidationError):
            expand_update({"code": "X"}, {"code": "X", "interval": "year"}, SCHEMA)

    def test_values_equal_for_blocks_ignores_nulls(self) -> None:
        assert values_equal(
            TIER,
            [{"up_to": 10, "flat_amount": None}],
            [{"up_to": 10}],
        )
        assert not values_equal(TIER, [{"up_to": 10}], [{"up_to": 20}])


# --------------------- Textual configuration ---------------------


class TestTextualValues:
    """Configuration may spell numbers, booleans and instants as text."""

    TREE = {
        "code": "X",
        "active": "false",
        "amount": "100",
        "redeem_by": "2030-01-01T00:00:00+01:00",
        "labels": ["b", "a"],
        "metadata": {"count": 3},
        "recurring": {"interval": "month", "interval_count": "3"},
        "tier": [{"up_to": "10", "flat_amount": "500"}, {"up_to_inf": "true"}],
    }

    def test_flattened_state_matches_its_configuration(self) -> None:
        state = flatten(expand(self.TREE, SCHEMA), SCHEMA, self.TREE)
        assert state["amount"] == 100
        assert state["active"] is False
        assert changed_keys(state, self.TREE, SCHEMA) == []
        assert replacement_keys(state, self.TREE, SCHEMA) == []
        assert expand_update(state, self.TREE, SCHEMA) == {}

    def test_timestamp_keeps_the_configured_offset(self) -> None:
        state = flatten(expand(self.TREE, SCHEMA), SCHEMA, self.TREE)
        assert state["redeem_by"] == "2030-01-01T00:00:00+01:00"

    def test_utc_offset_spelling_is_kept(self) -> None:
        tree = {"code": "X", "redeem_by": "2030-01-01T00:00:00+00:00"}
        state = flatten({"id": "X", "redeem_by": 1893456000}, SCHEMA, tree)
        assert state["redeem_by"] == "2030-01-01T00:00:00+00:00"
        assert changed_keys(state, tree, SCHEMA) == []

    def test_new_instant_is_rendered_in_utc(self) -> None:
        previous = {"redeem_by": "2031-01-01T00:00:00+01:00"}
        state = flatten({"redeem_by": 1893456000}, SCHEMA, previous)
        assert state["redeem_by"] == "2030-01-01T00:00:00Z"

    def test_values_compare_after_coercion(self) -> None:
        amount = SCHEMA.field("amount")
        redeem_by = SCHEMA.field("redeem_by")
        assert values_equal(amount, "100", 100)
        assert values_equal(
            redeem_by, "2030-01-01T00:00:00Z", "2030-01-01T01:00:00+01:00"
        )
        assert not values_equal(redeem_by, "2030-01-01T00:00:00Z", 1893452400)
        assert not values_equal(amount, 100, "one hundred")
