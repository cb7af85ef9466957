"""Unit tests for the shared block validation routine."""

from __future__ import annotations

import logging

import pytest

from terrastripe.core.exceptions import ValidationError
from terrastripe.core.field_spec import FieldSpec, FieldType, MutuallyExclusive
from terrastripe.core.validation import check_allowed_value, validate_block

FIELDS = (
    FieldSpec(key="name", type=FieldType.STRING, required=True),
    FieldSpec(key="active", type=FieldType.BOOL, required=True, default=True),
    FieldSpec(key="amount", type=FieldType.INT),
    FieldSpec(key="amount_decimal", type=FieldType.FLOAT),
)
CONSTRAINTS = (MutuallyExclusive(keys=("amount", "amount_decimal")),)


class TestValidateBlock:
    def test_valid_block_passes(self) -> None:
        validate_block(FIELDS, CONSTRAINTS, {"name": "Gold", "amount": 100})

    def test_unknown_key_is_reported_with_path(self) -> None:
        with pytest.raises(ValidationError) as exc:
            block = {"name": "x", "colour": "red"}
            validate_block(FIELDS, CONSTRAINTS, block, "tier.0")
        assert exc.value.field_name == "tier.0.colour"
        assert "not a supported attribute" in exc.value.message

    def test_missing_required_key(self) -> None:
        with pytest.raises(ValidationError) as exc:
            validate_block(FIELDS, CONSTRAINTS, {"amount": 1})
        assert exc.value.field_name == "name"
        assert exc.value.message == "'name' is required"

    def test_required_key_with_default_may_be_omitted(self) -> None:
        validate_block(FIELDS, CONSTRAINTS, {"name": "Gold"})

    def test_null_required_key_counts_as_missing(self) -> None:
        with pytest.raises(ValidationError):
            validate_block(FIELDS, CONSTRAINTS, {"name": None})

    def test_constraint_violation_is_logged_and_raised(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        caplog.set_level(logging.DEBUG, logger="terrastripe.core.validation")
        with pytest.raises(ValidationError) as exc:
            validate_block(
                FIELDS, CONSTRAINTS, {"name": "x", "amount": 1, "amount_decimal": 1.5}
            )
        assert exc.value.field_name == "amount_decimal"
        assert any("mutually_exclusive" in r.message for r in caplog.records)


class TestAllowedValues:
    SPEC = FieldSpec(
        key="interval",
        type=FieldType.STRING,
        allowed_values=frozenset({"day", "week", "month", "year"}),
    )

    def test_allowed_value_passes(self) -> None:
        check_allowed_value(self.SPEC, "month", "interval")

    def test_error_lists_the_allowed_values(self) -> None:
        with pytest.raises(ValidationError) as exc:
            check_allowed_value(self.SPEC, "fortnight", "interval")
        assert exc.value.message == (
            '"fortnight" is not a valid value for "interval", '
            "expected one of ( day | month | week | year )"
        )

    def test_unrestricted_spec_accepts_anything(self) -> None:
        spec = FieldSpec(key="nickname", type=FieldType.STRING)
        check_allowed_value(spec, "anything", "nickname")
