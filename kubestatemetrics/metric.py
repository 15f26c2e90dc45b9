"""Metric families and their rendering in the Prometheus text format."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Iterable, Protocol


class ResourceUnit(str, Enum):
    """Unit of measure for resource metrics."""

    BYTE = "byte"
    CORE = "core"
    INTEGER = "integer"


class MetricType(str, Enum):
    """Prometheus metric type."""

    GAUGE = "gauge"
    COUNTER = "counter"


_ESCAPES = str.maketrans({"\\": "\\\\", "\n": "\\n", '"': '\\"'})


def escape_label_value(value: str) -> str:
    """Escape backslashes, newlines and double quotes in a label value."""
    return value.translate(_ESCAPES)


def format_float(value: float) -> str:
    """Format a float the way the Prometheus text format expects it.

    Uses the shortest representation that round-trips, switching to
    exponent notation when the decimal exponent is below -4 or at least 6.
    """
    if value == 1:
        return "1"
    if value == 0:
        return "0"
    if value == -1:
        return "-1"
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"

    sign, digit_tuple, exponent = Decimal(repr(float(value))).as_tuple()
    digits = "".join(map(str, digit_tuple))
    stripped = digits.rstrip("0")
    exponent += len(digits) - len(stripped)
    digits = stripped or "0"
    decimal_point = len(digits) + exponent
    exp = decimal_point - 1
    prefix = "-" if sign else ""

    if exp < -4 or exp >= 6:
        mantissa = digits[0]
        if len(digits) > 1:
            mantissa += "." + digits[1:]
        exp_sign = "-" if exp < 0 else "+"
        return f"{prefix}{mantissa}e{exp_sign}{abs(exp):02d}"

    if decimal_point <= 0:
        return f"{prefix}0.{'0' * -decimal_point}{digits}"
    if decimal_point >= len(digits):
        return f"{prefix}{digits}{'0' * (decimal_point - len(digits))}"
    return f"{prefix}{digits[:decimal_point]}.{digits[decimal_point:]}"


@dataclass
class Metric:
    """A single time series; its name is supplied by its family."""

    label_keys: list[str] = field(default_factory=list)
    label_values: list[str] = field(default_factory=list)
    value: float = 0.0

    def render(self) -> str:
        """Render labels and value, followed by a newline."""
        if len(self.label_keys) != len(self.label_values):
            raise ValueError(
                f"expected labelKeys {self.label_keys!r} to be of same length "
                f"as labelValues {self.label_values!r}"
            )
        labels = ""
        if self.label_keys:
            pairs = ",".join(
                f'{key}="{escape_label_value(val)}"'
                for key, val in zip(self.label_keys, self.label_values)
            )
            labels = "{" + pairs + "}"
        return f"{labels} {format_float(self.value)}\n"


@dataclass
class Family:
    """A set of metrics sharing one name."""

    name: str = ""
    metrics: list[Metric] = field(default_factory=list)

    def to_bytes(self) -> bytes:
        """Return the family in its text exposition form."""
        return "".join(self.name + m.render() for m in self.metrics).encode("utf-8")


@dataclass
class FamilyGenerator:
    """Everything needed to generate a metric family from an object."""

    name: str
    help: str
    type: MetricType
    generate_func: Callable[[Any], Family]

    def generate(self, obj: Any) -> Family:
        """Generate the family for ``obj`` and give it this generator's name."""
        family = self.generate_func(obj)
        family.name = self.name
        return family

    def header(self) -> str:
        """Return the HELP and TYPE lines of the family."""
        return (
            f"# HELP {self.name} {self.help}\n"
            f"# TYPE {self.name} {MetricType(self.type).value}"
        )


class _Lister(Protocol):
    def is_included(self, item: str) -> bool: ...

    def is_excluded(self, item: str) -> bool: ...


def extract_metric_family_headers(families: Iterable[FamilyGenerator]) -> list[str]:
    """Return the header of every generator, in order."""
    return [f.header() for f in families]


def compose_metric_gen_funcs(
    family_gens: Iterable[FamilyGenerator],
) -> Callable[[Any], list[Family]]:
    """Compose the generators into one function returning all families."""
    gens = list(family_gens)

    def generate(obj: Any) -> list[Family]:
        return [gen.generate(obj) for gen in gens]

    return generate


def filter_metric_families(
    lister: _Lister, families: Iterable[FamilyGenerator]
) -> list[FamilyGenerator]:
    """Keep only the generators whose name the lister includes."""
    return [f for f in families if lister.is_included(f.name)]