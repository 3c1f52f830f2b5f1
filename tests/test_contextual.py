"""
Tests for validators that depend on the enclosing map.
"""

from eskema.contextual import required_when, resolve, switch_by, when
from eskema.expectation import ExpectationCodes
from eskema.predicates import IS_INT, IS_LIST, IS_NULL, IS_STRING, is_eq, is_gte
from eskema.presence import required
from eskema.structure import eskema


def _permissions_schema(**kwargs):
    return eskema(
        {
            "type": IS_STRING,
            "permissions": when(
                eskema({"type": is_eq("admin")}), then=IS_LIST, otherwise=IS_NULL, **kwargs
            ),
        }
    )


class TestWhen:
    """Test conditional field validation."""

    def test_then_branch(self):
        """Test the then branch applies when the parent matches."""
        schema = _permissions_schema()
        assert schema.validate({"type": "admin", "permissions": []}).is_valid

        exp = schema.validate({"type": "admin", "permissions": None}).first_expectation
        assert exp.path == ".permissions"
        assert exp.message == "list"

    def test_otherwise_branch(self):
        """Test the otherwise branch applies when the parent does not match."""
        schema = _permissions_schema()
        assert schema.validate({"type": "user", "permissions": None}).is_valid
        assert schema.validate({"type": "user"}).is_valid

        exp = schema.validate({"type": "user", "permissions": [1]}).first_expectation
        assert exp.message == "None"

    def test_message_keeps_code(self):
        """Test a branch failure message override keeps the branch code."""
        schema = _permissions_schema(message="admins need permissions")
        exp = schema.validate({"type": "admin", "permissions": "all"}).first_expectation
        assert exp.message == "admins need permissions"
        assert exp.code == ExpectationCodes.TYPE_MISMATCH
        assert exp.path == ".permissions"

    def test_outside_schema(self):
        """Test standalone use returns a misuse failure instead of raising."""
        validator = when(IS_STRING, then=IS_INT, otherwise=IS_INT)
        exp = validator.validate("x").first_expectation
        assert exp.code == ExpectationCodes.LOGIC_WHEN_OUTSIDE_SCHEMA
        assert "`when`" in exp.message

    def test_flags_apply_inside_schema(self):
        """Test nullable and optional short-circuit before the condition."""
        field = when(eskema({"kind": is_eq("a")}), then=IS_INT, otherwise=IS_STRING)
        assert eskema({"kind": IS_STRING, "v": field.nullable()}).validate(
            {"kind": "a", "v": None}
        ).is_valid
        assert eskema({"kind": IS_STRING, "v": field.optional()}).validate({"kind": "b"}).is_valid


class TestResolve:
    """Test resolver-chosen field validators."""

    def test_resolver_chooses_validator(self):
        """Test the validator returned for the parent is applied."""
        schema = eskema(
            {
                "role": IS_STRING,
                "config": resolve(lambda parent: IS_INT if parent.get("role") == "admin" else None),
            }
        )
        exp = schema.validate({"role": "admin", "config": "x"}).first_expectation
        assert exp.path == ".config"
        assert exp.message == "int"
        assert schema.validate({"role": "admin", "config": 3}).is_valid

    def test_none_means_valid(self):
        """Test a resolver returning None accepts the field."""
        schema = eskema({"role": IS_STRING, "config": resolve(lambda parent: None)})
        assert schema.validate({"role": "user", "config": object()}).is_valid

    def test_outside_schema(self):
        """Test standalone use returns a misuse failure."""
        exp = resolve(lambda parent: IS_INT).validate(1).first_expectation
        assert exp.code == ExpectationCodes.LOGIC_WHEN_OUTSIDE_SCHEMA
        assert "`resolve`" in exp.message


class TestRequiredWhen:
    """Test conditionally required fields."""

    schema = eskema(
        {
            "age": IS_INT,
            "license": required_when(eskema({"age": is_gte(18)}), IS_STRING),
        }
    )

    def test_required_when_condition_holds(self):
        """Test the field must be present when the condition passes."""
        exp = self.schema.validate({"age": 20}).first_expectation
        assert exp.description == ".license: is required"
        assert self.schema.validate({"age": 20, "license": "ABC"}).is_valid

    def test_optional_otherwise(self):
        """Test the field may be absent when the condition fails."""
        assert self.schema.validate({"age": 10}).is_valid

    def test_still_validated_when_present(self):
        """Test a present field is validated in either case."""
        assert self.schema.validate({"age": 10, "license": 5}).is_not_valid
        assert self.schema.validate({"age": 20, "license": 5}).is_not_valid


class TestSwitchBy:
    """Test discriminated unions."""

    party = switch_by(
        "type",
        {
            "business": eskema({"tax_id": required(IS_STRING)}),
            "person": eskema({"name": required(IS_STRING)}),
        },
    )

    def test_dispatch(self):
        """Test the case for the discriminator is applied."""
        data = {"type": "business", "tax_id": "123"}
        result = self.party.validate(data)
        assert result.is_valid
        assert result.value == data
        assert self.party.validate({"type": "person", "name": "Ada"}).is_valid

    def test_case_failure(self):
        """Test the chosen case's failures are reported."""
        exp = self.party.validate({"type": "business"}).first_expectation
        assert exp.description == ".tax_id: is required"

    def test_unknown_discriminator(self):
        """Test an unknown discriminator value."""
        exp = self.party.validate({"type": "robot"}).first_expectation
        assert exp.message == "unknown type"
        assert exp.path == ".type"
        assert exp.code == ExpectationCodes.LOGIC_NONE_MATCHED

    def test_unhashable_discriminator(self):
        """Test an unhashable discriminator is treated as unknown."""
        exp = self.party.validate({"type": ["business"]}).first_expectation
        assert exp.code == ExpectationCodes.LOGIC_NONE_MATCHED

    def test_tuple_holding_list_discriminator(self):
        """Test a tuple that cannot be hashed is treated as unknown."""
        exp = self.party.validate({"type": ("business", [])}).first_expectation
        assert exp.code == ExpectationCodes.LOGIC_NONE_MATCHED
        assert exp.data["found"] == ("business", [])

    def test_missing_discriminator(self):
        """Test the discriminator key must be present."""
        assert self.party.validate({}).first_expectation.message == 'Missing key: "type"'

    def test_non_map(self):
        """Test non-map input fails the type guard."""
        assert self.party.validate("x").first_expectation.message == "dict"
