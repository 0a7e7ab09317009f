"""
Small builder for Cargo ``where`` expressions.

The Cargo API only accepts string-built SQL-like filters, so values are
escaped here instead of being concatenated by callers:

    where = CargoFilter.eq("OverviewPage", page) & CargoFilter.gte("DateTime_UTC", since)
    where.render()  # 'OverviewPage="LPL/2026 Season/Split 1" AND DateTime_UTC >= "..."'
"""
import re
from dataclasses import dataclass

_FIELD_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?$")


def escape_value(value: object) -> str:
    """Quote a literal for a Cargo filter, escaping backslashes and double quotes."""
    text = str(value)
    text = text.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{text}"'


def _check_field(field: str) -> str:
    if not _FIELD_RE.match(field):
        raise ValueError(f"Invalid Cargo field name: {field!r}")
    return field


@dataclass(frozen=True)
class CargoFilter:
    expression: str

    @classmethod
    def eq(cls, field: str, value: object) -> "CargoFilter":
        return cls(f"{_check_field(field)}={escape_value(value)}")

    @classmethod
    def gte(cls, field: str, value: object) -> "CargoFilter":
        return cls(f"{_check_field(field)} >= {escape_value(value)}")

    @classmethod
    def all_of(cls, *filters: "CargoFilter | None") -> "CargoFilter | None":
        parts = [f for f in filters if f is not None]
        if not parts:
            return None
        combined = parts[0]
        for part in parts[1:]:
            combined = combined & part
        return combined

    def __and__(self, other: "CargoFilter") -> "CargoFilter":
        return CargoFilter(f"{self.expression} AND {other.expression}")

    def render(self) -> str:
        return self.expression

    def __str__(self) -> str:
        return self.expression
