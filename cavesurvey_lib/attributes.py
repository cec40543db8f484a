# -*- coding: utf-8 -*-
"""Typed attributes attached to stations, sections and components.

An :class:`AttributeDefinition` lists the parameters of an attribute kind
(e.g. ``bat(species, population)``).  Parameters come in three flavours,
deserialized by Pydantic based on their ``type`` field:

- ``int``: whole number, optionally restricted to a set of values
- ``float``: finite real number, optionally bounded
- ``string``: free text, optionally restricted to a set of values

Attributes have a compact text form used by editors and exports::

    bat(Myotis◌̦3-10)|co2(1.5)
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from dataclasses import field
from dataclasses import replace
from typing import TYPE_CHECKING
from typing import Annotated
from typing import Any
from typing import Literal

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Discriminator
from pydantic import Field
from pydantic import Tag

from cavesurvey_lib.constants import ATTRIBUTE_DELIMITER
from cavesurvey_lib.constants import ATTRIBUTE_PARAM_DELIMITER
from cavesurvey_lib.enums import DiagnosticKind
from cavesurvey_lib.enums import ParameterType
from cavesurvey_lib.errors import Diagnostic
from cavesurvey_lib.graph.analyzer import component as find_component
from cavesurvey_lib.graph.analyzer import shortest_path
from cavesurvey_lib.graph.models import Component
from cavesurvey_lib.graph.models import Section

if TYPE_CHECKING:
    from collections.abc import Iterable
    from collections.abc import Mapping

    from cavesurvey_lib.geometry import Color
    from cavesurvey_lib.graph.models import StationGraph

logger = logging.getLogger(__name__)

ParamValue = int | float | str | None

_ATTRIBUTE_PATTERN = re.compile(r"(?P<name>[A-Za-z0-9_]+)(\((?P<params>[^()]*)\))?")


# -----------------------------------------------------------------------------
# Parameter definitions
# -----------------------------------------------------------------------------


class IntParam(BaseModel):
    """Whole number parameter.

    Attributes:
        range: Allowed values; empty means any integer
        min: Inclusive lower bound
        max: Inclusive upper bound
    """

    model_config = ConfigDict(frozen=True)

    type: Literal["int"] = "int"
    required: bool = False
    range: list[int] = Field(default_factory=list)
    min: int | None = None
    max: int | None = None


class FloatParam(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["float"] = "float"
    required: bool = False
    min: float | None = None
    max: float | None = None


class StringParam(BaseModel):
    """Text parameter.  ``values`` restricts the allowed texts when set."""

    model_config = ConfigDict(frozen=True)

    type: Literal["string"] = "string"
    required: bool = False
    values: list[str] = Field(default_factory=list)


def _get_param_type(v: Any) -> str:
    if isinstance(v, dict):
        return v.get("type", ParameterType.STRING.value)
    return getattr(v, "type", ParameterType.STRING.value)


AttributeParam = Annotated[
    Annotated[IntParam, Tag("int")]
    | Annotated[FloatParam, Tag("float")]
    | Annotated[StringParam, Tag("string")],
    Discriminator(_get_param_type),
]


def _is_empty(value: ParamValue) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _bound_errors(value: float, low: float | None, high: float | None) -> list[str]:
    errors = []
    if low is not None and value < low:
        errors.append(f"Value '{value}' is less than {low}")
    if high is not None and value > high:
        errors.append(f"Value '{value}' is greater than {high}")
    return errors


def validate_param_value(
    param: IntParam | FloatParam | StringParam, value: ParamValue
) -> list[str]:
    """Return the problems of ``value`` for ``param`` (empty when valid)."""
    if _is_empty(value):
        return ["Value is required"] if param.required else []

    if isinstance(param, IntParam):
        if isinstance(value, bool) or not isinstance(value, int):
            return [f"Value '{value}' is not an integer"]
        errors = _bound_errors(value, param.min, param.max)
        if param.range and value not in param.range:
            allowed = ",".join(str(v) for v in param.range)
            errors.append(f"Value '{value}' is not one of {allowed}")
        return errors

    if isinstance(param, FloatParam):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return [f"Value '{value}' is not a number"]
        if not math.isfinite(value):
            return [f"Value '{value}' is not a finite number"]
        return _bound_errors(float(value), param.min, param.max)

    if not isinstance(value, str):
        return [f"Value '{value}' is not a string"]
    if param.values and value not in param.values:
        return [f"Value '{value}' is not one of {', '.join(param.values)}"]
    return []


def parse_param_value(
    param: IntParam | FloatParam | StringParam, text: str
) -> ParamValue:
    """Convert the text form of a value.

    Unparsable numbers are returned as the stripped text, so
    :func:`validate_param_value` reports them as a type mismatch.
    """
    stripped = text.strip()
    if not stripped:
        return None
    if isinstance(param, StringParam):
        return text.replace("\t", "")
    try:
        if isinstance(param, IntParam):
            return int(stripped)
        return float(stripped.replace(",", "."))
    except ValueError:
        return stripped


# -----------------------------------------------------------------------------
# Definitions and values
# -----------------------------------------------------------------------------


class AttributeDefinition(BaseModel):
    """An attribute kind and its ordered parameters."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str = Field(min_length=1)
    category: str | None = None
    params: dict[str, AttributeParam] = Field(default_factory=dict)

    @property
    def param_names(self) -> list[str]:
        return list(self.params)


class Attribute(BaseModel):
    """An attribute definition together with its parameter values."""

    model_config = ConfigDict(frozen=True)

    definition: AttributeDefinition
    values: dict[str, ParamValue] = Field(default_factory=dict)

    @property
    def name(self) -> str:
        return self.definition.name

    @classmethod
    def from_values(cls, definition: AttributeDefinition, *values: ParamValue) -> Attribute:
        """Assign ``values`` to the parameters in definition order."""
        if len(values) > len(definition.params):
            raise ValueError(
                f"Attribute '{definition.name}' takes {len(definition.params)} "
                f"parameter(s), got {len(values)}"
            )
        return cls(definition=definition, values=dict(zip(definition.params, values)))

    @classmethod
    def from_strings(cls, definition: AttributeDefinition, *texts: str) -> Attribute:
        """Parse the text form of each value, in definition order.

        Raises:
            ValueError: If more texts than parameters are given
        """
        params = list(definition.params.values())
        if len(texts) > len(params):
            raise ValueError(
                f"Attribute '{definition.name}' takes {len(params)} "
                f"parameter(s), got {len(texts)}"
            )
        return cls.from_values(
            definition,
            *(parse_param_value(p, t) for p, t in zip(params, texts)),
        )

    def validate_values(self) -> dict[str, list[str]]:
        """Problems per parameter name; parameters without problems are omitted."""
        errors: dict[str, list[str]] = {}
        for name, param in self.definition.params.items():
            param_errors = validate_param_value(param, self.values.get(name))
            if param_errors:
                errors[name] = param_errors
        return errors

    def is_valid(self) -> bool:
        return len(self.validate_values()) == 0

    def to_export(self) -> dict[str, Any]:
        data: dict[str, Any] = {"id": self.definition.id, "name": self.name}
        data.update({k: v for k, v in self.values.items() if v is not None})
        return data

    def __str__(self) -> str:
        params = ATTRIBUTE_PARAM_DELIMITER.join(
            "" if self.values.get(n) is None else str(self.values[n])
            for n in self.definition.params
        )
        return f"{self.name}({params})"


class AttributeCatalog:
    """Lookup of attribute definitions by id and name."""

    def __init__(self, definitions: Iterable[AttributeDefinition]):
        self._definitions = list(definitions)
        self._by_name = {d.name: d for d in self._definitions}
        self._by_id = {d.id: d for d in self._definitions}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> AttributeCatalog:
        """Load definitions from their JSON form.

        A parameter given as ``{"ref": "key"}`` is replaced by
        ``data["references"]["key"]``.
        """
        references = data.get("references", {})
        definitions = []
        for raw in data.get("definitions", []):
            params = {
                name: references[p["ref"]] if "ref" in p else p
                for name, p in raw.get("params", {}).items()
            }
            definitions.append(AttributeDefinition.model_validate({**raw, "params": params}))
        return cls(definitions)

    def __len__(self) -> int:
        return len(self._definitions)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    @property
    def names(self) -> list[str]:
        return [d.name for d in self._definitions]

    def get(self, name: str) -> AttributeDefinition | None:
        return self._by_name.get(name)

    def get_by_id(self, definition_id: int) -> AttributeDefinition | None:
        return self._by_id.get(definition_id)

    def create(self, name: str, *values: ParamValue) -> Attribute | None:
        """Build an attribute by name, ``None`` if the name is unknown."""
        definition = self.get(name)
        if definition is None:
            return None
        return Attribute.from_values(definition, *values)

    def parse(self, text: str) -> tuple[list[Attribute], list[str]]:
        """Parse ``name(v1◌̦v2)|other(...)``.

        Returns:
            The parsed attributes and the errors for unknown names
        """
        attributes: list[Attribute] = []
        errors: list[str] = []
        for match in _ATTRIBUTE_PATTERN.finditer(text):
            name = match.group("name")
            definition = self.get(name)
            if definition is None:
                errors.append(f"Attribute with name '{name}' not found")
                continue
            raw = match.group("params")
            texts = raw.split(ATTRIBUTE_PARAM_DELIMITER) if raw else []
            try:
                attributes.append(Attribute.from_strings(definition, *texts))
            except ValueError as e:
                errors.append(str(e))
        return attributes, errors

    @staticmethod
    def format(attributes: Iterable[Attribute]) -> str:
        return ATTRIBUTE_DELIMITER.join(str(a) for a in attributes)


# -----------------------------------------------------------------------------
# Scoped attributes
# -----------------------------------------------------------------------------


@dataclass
class SectionAttribute:
    """An attribute attached to the path between two stations."""

    id: str
    attribute: Attribute
    section: Section
    color: Color
    visible: bool = False
    format: str = "${name}"

    def validate(self, stations: Mapping[str, object]) -> list[str]:
        errors = [
            f"Invalid attribute '{self.attribute.name}' field {name}: {'; '.join(e)}"
            for name, e in self.attribute.validate_values().items()
        ]
        errors.extend(f"Invalid section: {e}" for e in self.section.validate(stations))
        return errors

    def is_valid(self, stations: Mapping[str, object]) -> bool:
        return len(self.validate(stations)) == 0


@dataclass
class ComponentAttribute:
    """An attribute attached to the stations reachable from a start station."""

    id: str
    attribute: Attribute
    component: Component
    color: Color
    visible: bool = False
    format: str = "${name}"

    def validate(self, stations: Mapping[str, object]) -> list[str]:
        errors = [
            f"Invalid attribute '{self.attribute.name}' field {name}: {'; '.join(e)}"
            for name, e in self.attribute.validate_values().items()
        ]
        errors.extend(
            f"Invalid component: {e}" for e in self.component.validate(stations)
        )
        return errors

    def is_valid(self, stations: Mapping[str, object]) -> bool:
        return len(self.validate(stations)) == 0


@dataclass
class ScopeResult:
    """Re-scoped attributes and the problems found while doing so."""

    attributes: list[SectionAttribute | ComponentAttribute] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)


def _rescope_section(
    graph: StationGraph, scoped_attr: SectionAttribute
) -> tuple[SectionAttribute, Diagnostic | None]:
    old = scoped_attr.section
    section = shortest_path(graph, old.from_station, old.to_station)
    if section is not None:
        return replace(scoped_attr, section=section), None

    empty = Section(
        from_station=old.from_station, to_station=old.to_station, path=[], distance=0.0
    )
    return replace(scoped_attr, section=empty), Diagnostic.create(
        DiagnosticKind.ATTRIBUTE_SCOPE,
        f"Section attribute '{scoped_attr.id}': no path between "
        f"'{old.from_station}' and '{old.to_station}'",
        station=old.from_station,
    )


def _rescope_component(
    graph: StationGraph, scoped_attr: ComponentAttribute
) -> tuple[ComponentAttribute, Diagnostic | None]:
    old = scoped_attr.component
    rescoped = replace(
        scoped_attr, component=find_component(graph, old.start, old.terminations)
    )
    if not rescoped.component.is_empty:
        return rescoped, None
    return rescoped, Diagnostic.create(
        DiagnosticKind.ATTRIBUTE_SCOPE,
        f"Component attribute '{scoped_attr.id}': start station '{old.start}' not found",
        station=old.start,
    )


def scope_attributes(
    graph: StationGraph,
    scoped_attributes: Iterable[SectionAttribute | ComponentAttribute],
) -> ScopeResult:
    """Recompute the section or component of every attribute on ``graph``.

    Run after each recalculation: a changed survey may move or disconnect
    the stations an attribute refers to.  Attributes that lost their path
    are kept with an empty path and reported.
    """
    result = ScopeResult()
    for scoped_attr in scoped_attributes:
        if isinstance(scoped_attr, SectionAttribute):
            scoped, diagnostic = _rescope_section(graph, scoped_attr)
        else:
            scoped, diagnostic = _rescope_component(graph, scoped_attr)
        result.attributes.append(scoped)
        if diagnostic is not None:
            logger.warning("%s", diagnostic.message)
            result.diagnostics.append(diagnostic)
    return result
