"""Build validators from configuration.

Definitions are nested dicts, typically loaded from YAML:

```yaml
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
```
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any, Union

import yaml

from . import predicates as p
from .combinators import all_of, any_of, none_of, not_, with_expectation
from .contextual import when
from .exceptions import ConfigurationError
from .expectation import Expectation
from .structure import eskema, eskema_list, eskema_strict, list_each
from .validator import VALID, ContextualValidator, Validator

logger = logging.getLogger(__name__)


class ValidatorFactory:
    """Factory for creating validators from configuration.

    Node Options:
        type (str): Node type (string, int, float, number, bool, list, map,
            any, all, none, not, eq, one_of, range, length, pattern, when)
        constraints (list): Nodes conjoined after the node's own check
        nullable (bool): Accept None (default: False)
        optional (bool): Accept an absent key (default: False)
        message (str): Replace the failure message, keeping its code

    Type-specific Options:
        map: ``fields`` (dict of key to node), ``strict`` (bool)
        list: ``items`` (node for every element, or list of nodes positionally)
        all / any / none: ``validators`` (list of nodes); ``all`` also takes
            ``collecting`` (bool)
        not: ``validator`` (node)
        eq: ``value``
        one_of: ``values`` (list)
        range: ``min`` and/or ``max`` (inclusive)
        length: ``min`` and/or ``max`` (inclusive)
        pattern: ``pattern`` (regular expression)
        when: ``condition`` (node validated against the parent map), ``then``,
            ``otherwise``
    """

    _TYPE_GUARDS: dict[str, Validator] = {
        "string": p.IS_STRING,
        "int": p.IS_INT,
        "float": p.IS_FLOAT,
        "number": p.IS_NUMBER,
        "bool": p.IS_BOOL,
    }

    def __init__(self) -> None:
        self._builders: dict[str, Callable[[dict[str, Any], str], Validator]] = {
            "list": self._build_list,
            "map": self._build_map,
            "all": self._build_all,
            "any": self._build_any,
            "none": self._build_none,
            "not": self._build_not,
            "eq": self._build_eq,
            "one_of": self._build_one_of,
            "range": self._build_range,
            "length": self._build_length,
            "pattern": self._build_pattern,
            "when": self._build_when,
        }

    def create(self, **config: Any) -> Validator:
        """Create a Validator from a node definition.

        Args:
            **config: Root node definition

        Returns:
            Validator instance

        Raises:
            ConfigurationError: If the definition is malformed
        """
        logger.info(f"Creating validator of type: {config.get('type')}")
        return self._build_node(config, path="$")

    def _build_node(self, config: Any, path: str) -> Validator:
        if not isinstance(config, dict):
            raise ConfigurationError(
                f"Validator definition at {path} must be a mapping",
                context={"path": path, "found": type(config).__name__},
            )
        node_type = str(config.get("type", "")).lower()
        if node_type in self._TYPE_GUARDS:
            validator = self._TYPE_GUARDS[node_type]
        elif node_type in self._builders:
            validator = self._builders[node_type](config, path)
        else:
            raise ConfigurationError(
                f"Unknown validator type '{node_type}' at {path}",
                context={"path": path, "type": node_type},
            )
        logger.debug(f"Built {node_type} validator at {path}")

        constraints = self._build_constraints(config.get("constraints", []), path)
        contextual = isinstance(validator, ContextualValidator)
        if constraints and contextual:
            raise ConfigurationError(
                f"'constraints' are not supported on {node_type} at {path}",
                context={"path": path, "type": node_type},
            )
        if constraints:
            validator = all_of([validator, *constraints])

        message = config.get("message")
        if message and not contextual:
            validator = with_expectation(validator, Expectation(message=message))

        if config.get("nullable") or config.get("optional"):
            validator = validator.copy_with(
                nullable=bool(config.get("nullable", False)),
                optional=bool(config.get("optional", False)),
            )
        return validator

    def _build_constraints(self, configs: Any, path: str) -> list[Validator]:
        """Build constraint nodes, skipping (and logging) unknown types."""
        if not isinstance(configs, list):
            raise ConfigurationError(
                f"'constraints' at {path} must be a list",
                context={"path": path},
            )
        constraints: list[Validator] = []
        for index, config in enumerate(configs):
            constraint_type = str(config.get("type", "")).lower() if isinstance(config, dict) else ""
            if constraint_type not in self._TYPE_GUARDS and constraint_type not in self._builders:
                logger.warning(f"Unknown constraint type: {constraint_type} at {path}")
                continue
            constraints.append(self._build_node(config, f"{path}.constraints[{index}]"))
        return constraints

    def _build_children(self, config: dict[str, Any], key: str, path: str) -> list[Validator]:
        children = config.get(key, [])
        if not isinstance(children, list):
            raise ConfigurationError(
                f"'{key}' at {path} must be a list", context={"path": path, "key": key}
            )
        return [self._build_node(child, f"{path}.{key}[{i}]") for i, child in enumerate(children)]

    def _require(self, config: dict[str, Any], key: str, path: str) -> Any:
        if key not in config:
            raise ConfigurationError(
                f"Missing '{key}' for {config.get('type')} at {path}",
                context={"path": path, "key": key},
            )
        return config[key]

    def _build_list(self, config: dict[str, Any], path: str) -> Validator:
        items = config.get("items")
        if items is None:
            return p.IS_LIST
        if isinstance(items, list):
            return eskema_list(
                self._build_node(item, f"{path}.items[{i}]") for i, item in enumerate(items)
            )
        return list_each(self._build_node(items, f"{path}.items"))

    def _build_map(self, config: dict[str, Any], path: str) -> Validator:
        fields = config.get("fields")
        if fields is None:
            return p.IS_MAP
        if not isinstance(fields, dict):
            raise ConfigurationError(
                f"'fields' at {path} must be a mapping", context={"path": path}
            )
        schema = {
            str(name): self._build_node(field, f"{path}.{name}") for name, field in fields.items()
        }
        return eskema_strict(schema) if config.get("strict", False) else eskema(schema)

    def _build_all(self, config: dict[str, Any], path: str) -> Validator:
        return all_of(
            self._build_children(config, "validators", path),
            collecting=bool(config.get("collecting", False)),
        )

    def _build_any(self, config: dict[str, Any], path: str) -> Validator:
        return any_of(self._build_children(config, "validators", path))

    def _build_none(self, config: dict[str, Any], path: str) -> Validator:
        return none_of(self._build_children(config, "validators", path))

    def _build_not(self, config: dict[str, Any], path: str) -> Validator:
        return not_(self._build_node(self._require(config, "validator", path), f"{path}.validator"))

    def _build_eq(self, config: dict[str, Any], path: str) -> Validator:
        return p.is_eq(self._require(config, "value", path))

    def _build_one_of(self, config: dict[str, Any], path: str) -> Validator:
        values = self._require(config, "values", path)
        if not isinstance(values, list):
            raise ConfigurationError(
                f"'values' at {path} must be a list", context={"path": path}
            )
        return p.is_one_of(values)

    @staticmethod
    def _bounds(config: dict[str, Any]) -> list[Validator]:
        bounds = []
        if config.get("min") is not None:
            bounds.append(p.is_gte(config["min"]))
        if config.get("max") is not None:
            bounds.append(p.is_lte(config["max"]))
        return bounds

    def _build_range(self, config: dict[str, Any], path: str) -> Validator:
        low, high = config.get("min"), config.get("max")
        if low is not None and high is not None:
            if low > high:
                raise ConfigurationError(
                    f"Range min ({low}) cannot be greater than max ({high}) at {path}",
                    context={"path": path, "min": low, "max": high},
                )
            return p.is_in_range(low, high)
        bounds = self._bounds(config)
        return bounds[0] if bounds else VALID

    def _build_length(self, config: dict[str, Any], path: str) -> Validator:
        return p.length(self._bounds(config))

    def _build_pattern(self, config: dict[str, Any], path: str) -> Validator:
        return p.matches_pattern(self._require(config, "pattern", path))

    def _build_when(self, config: dict[str, Any], path: str) -> Validator:
        return when(
            self._build_node(self._require(config, "condition", path), f"{path}.condition"),
            then=self._build_node(self._require(config, "then", path), f"{path}.then"),
            otherwise=self._build_node(
                self._require(config, "otherwise", path), f"{path}.otherwise"
            ),
            message=config.get("message"),
        )


validator_factory = ValidatorFactory()


def _read_file(path: Path) -> Any:
    try:
        with open(path, encoding="utf-8") as f:
            if path.suffix.lower() == ".json":
                return json.load(f)
            return yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Failed to parse YAML file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Failed to parse JSON file {path}: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Failed to read validator file {path}: {e}") from e


def load_validator(source: Union[dict[str, Any], str, Path]) -> Validator:
    """Build a validator from a dict, a YAML document or a YAML/JSON file.

    A string naming an existing file is read from disk; any other string is
    parsed as YAML.

    Args:
        source: Definition dict, YAML text, or file path

    Returns:
        Validator instance

    Raises:
        ConfigurationError: If the source cannot be read or is malformed
    """
    if isinstance(source, dict):
        data: Any = source
    elif isinstance(source, Path):
        data = _read_file(source)
    elif isinstance(source, str):
        candidate = Path(source)
        is_file_name = "\n" not in source and candidate.suffix.lower() in (".yaml", ".yml", ".json")
        if is_file_name and candidate.is_file():
            data = _read_file(candidate)
        else:
            try:
                data = yaml.safe_load(source)
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Failed to parse YAML definition: {e}") from e
    else:
        raise ConfigurationError(f"Invalid source type: {type(source)}")

    if not isinstance(data, dict):
        raise ConfigurationError(
            "Validator definition must be a mapping",
            context={"found": type(data).__name__},
        )
    return validator_factory.create(**data)
