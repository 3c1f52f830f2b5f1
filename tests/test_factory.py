"""
Tests for building validators from configuration.
"""

import json
import logging

import pytest

from eskema.exceptions import ConfigurationError
from eskema.expectation import ExpectationCodes
from eskema.factory import ValidatorFactory, load_validator, validator_factory

USER_YAML = """
type: map
strict: true
fields:
  username:
    type: string
    constraints:
      - type: length
        min: 3
        max: 20
      - type: pattern
        pattern: "^[a-z0-9_]+$"
  age:
    type: int
    optional: true
    constraints:
      - type: range
        min: 13
        max: 120
  tags:
    type: list
    items:
      type: string
"""


class TestValidatorFactory:
    """Test node construction."""

    def test_type_guards(self):
        """Test scalar node types."""
        assert validator_factory.create(type="string").validate("a").is_valid
        assert validator_factory.create(type="int").validate(True).is_not_valid
        assert validator_factory.create(type="float").validate(1.5).is_valid
        assert validator_factory.create(type="number").validate(2).is_valid
        assert validator_factory.create(type="bool").validate(False).is_valid

    def test_constraints(self):
        """Test constraints are conjoined after the node's own check."""
        name = validator_factory.create(
            type="string", constraints=[{"type": "length", "min": 3}]
        )
        assert name.validate("abc").is_valid
        assert name.validate("ab").first_expectation.code == (
            ExpectationCodes.VALUE_LENGTH_OUT_OF_RANGE
        )
        assert name.validate(3).first_expectation.message == "str"

    def test_flags_and_message(self):
        """Test nullable, optional and message options."""
        assert validator_factory.create(type="int", nullable=True).validate(None).is_valid
        assert validator_factory.create(type="int", optional=True).validate(
            None, exists=False
        ).is_valid

        exp = validator_factory.create(type="int", message="need a number").validate(
            "x"
        ).first_expectation
        assert exp.message == "need a number"
        assert exp.code == ExpectationCodes.TYPE_MISMATCH

    def test_combinators(self):
        """Test all, any, none and not nodes."""
        scalar = validator_factory.create(
            type="any", validators=[{"type": "int"}, {"type": "string"}]
        )
        assert scalar.validate("a").is_valid
        assert scalar.validate(1.5).is_not_valid

        both = validator_factory.create(
            type="all",
            collecting=True,
            validators=[{"type": "range", "min": 10}, {"type": "range", "max": 0}],
        )
        assert both.validate(5).expectation_count == 2

        neither = validator_factory.create(
            type="none", validators=[{"type": "int"}, {"type": "bool"}]
        )
        assert neither.validate("a").is_valid

        not_string = validator_factory.create(type="not", validator={"type": "string"})
        assert not_string.validate("a").first_expectation.message == "not str"

    def test_values(self):
        """Test eq, one_of, range and pattern nodes."""
        assert validator_factory.create(type="eq", value=3).validate(3).is_valid
        assert validator_factory.create(type="one_of", values=["a", "b"]).validate("c").is_not_valid
        assert validator_factory.create(type="range", min=1, max=3).validate(4).is_not_valid
        assert validator_factory.create(type="range").validate(4).is_valid
        assert validator_factory.create(type="pattern", pattern="^a").validate("abc").is_valid

    def test_positional_list(self):
        """Test a list of item nodes validates positionally."""
        pair = validator_factory.create(type="list", items=[{"type": "string"}, {"type": "int"}])
        assert pair.validate(["a", 1]).is_valid
        assert pair.validate(["a", "b"]).first_expectation.path == "[1]"

    def test_when(self):
        """Test conditional fields."""
        schema = validator_factory.create(
            type="map",
            fields={
                "kind": {"type": "string"},
                "size": {
                    "type": "when",
                    "condition": {"type": "map", "fields": {"kind": {"type": "eq", "value": "box"}}},
                    "then": {"type": "int"},
                    "otherwise": {"type": "any", "validators": []},
                    "optional": True,
                    "message": "boxes need a size",
                },
            },
        )
        assert schema.validate({"kind": "box", "size": 3}).is_valid
        assert schema.validate({"kind": "bag"}).is_valid

        exp = schema.validate({"kind": "box", "size": "big"}).first_expectation
        assert exp.message == "boxes need a size"
        assert exp.path == ".size"

    def test_unknown_type(self):
        """Test unknown node types are rejected."""
        with pytest.raises(ConfigurationError) as exc_info:
            validator_factory.create(type="strnig")
        assert exc_info.value.context == {"path": "$", "type": "strnig"}

    def test_unknown_constraint_skipped(self, caplog):
        """Test unknown constraint types are logged and skipped."""
        with caplog.at_level(logging.WARNING, logger="eskema.factory"):
            validator = validator_factory.create(type="int", constraints=[{"type": "frobnicate"}])
        assert validator.validate(3).is_valid
        assert "Unknown constraint type: frobnicate" in caplog.text

    def test_creation_logged(self, caplog):
        """Test creation is logged at info level."""
        with caplog.at_level(logging.INFO, logger="eskema.factory"):
            ValidatorFactory().create(type="map")
        assert "Creating validator of type: map" in caplog.text

    @pytest.mark.parametrize(
        "config",
        [
            {"type": "range", "min": 5, "max": 1},
            {"type": "not"},
            {"type": "one_of", "values": "abc"},
            {"type": "all", "validators": {"type": "int"}},
            {"type": "map", "fields": ["a"]},
            {"type": "list", "items": "string"},
            {"type": "int", "constraints": {"type": "range"}},
        ],
    )
    def test_malformed_definitions(self, config):
        """Test malformed definitions raise ConfigurationError."""
        with pytest.raises(ConfigurationError):
            validator_factory.create(**config)

    def test_constraints_on_contextual_node(self):
        """Test contextual nodes cannot take constraints."""
        with pytest.raises(ConfigurationError):
            validator_factory.create(
                type="when",
                condition={"type": "map"},
                then={"type": "int"},
                otherwise={"type": "int"},
                constraints=[{"type": "eq", "value": 1}],
            )


class TestLoadValidator:
    """Test loading definitions from YAML, JSON and dicts."""

    def test_yaml_text(self):
        """Test a YAML document."""
        user = load_validator(USER_YAML)
        assert user.validate({"username": "ada_l", "age": 30, "tags": ["x"]}).is_valid
        assert user.validate({"username": "ada", "tags": []}).is_valid

        result = user.validate({"username": "A!", "tags": [1]})
        assert [e.path for e in result.expectations] == [".username", ".tags[0]"]

        extra = user.validate({"username": "ada", "tags": [], "extra": 1})
        assert extra.first_expectation.code == ExpectationCodes.STRUCTURE_UNKNOWN_KEY

    def test_dict(self):
        """Test a plain dict definition."""
        assert load_validator({"type": "int"}).validate(1).is_valid

    def test_yaml_file(self, tmp_path):
        """Test loading from a YAML file path."""
        path = tmp_path / "user.yaml"
        path.write_text(USER_YAML)
        assert load_validator(path).validate({"username": "ada", "tags": []}).is_valid
        assert load_validator(str(path)).validate({"username": "a", "tags": []}).is_not_valid

    def test_json_file(self, tmp_path):
        """Test loading from a JSON file."""
        path = tmp_path / "age.json"
        path.write_text(json.dumps({"type": "int", "constraints": [{"type": "range", "min": 0}]}))
        age = load_validator(path)
        assert age.validate(1).is_valid
        assert age.validate(-1).is_not_valid

    @pytest.mark.parametrize("source", ["type: [unclosed", "- a\n- b", "just a string"])
    def test_invalid_yaml(self, source):
        """Test malformed or non-mapping documents."""
        with pytest.raises(ConfigurationError):
            load_validator(source)

    def test_missing_file(self, tmp_path):
        """Test unreadable files."""
        with pytest.raises(ConfigurationError):
            load_validator(tmp_path / "missing.yaml")

    def test_invalid_json_file(self, tmp_path):
        """Test malformed JSON files."""
        path = tmp_path / "bad.json"
        path.write_text("{bad")
        with pytest.raises(ConfigurationError):
            load_validator(path)

    def test_invalid_source_type(self):
        """Test unsupported source types."""
        with pytest.raises(ConfigurationError):
            load_validator(42)
