"""
YAML loader -- parses a configuration file into WorkshopConfig.

Responsibility:
    Read YAML with ``yaml.safe_load`` and build the frozen schema objects.
    Unknown sections are ignored; missing keys fall back to schema defaults.

Failure modes:
    * Missing file     -> ``FileNotFoundError`` propagates.
    * Malformed YAML   -> ``yaml.YAMLError`` propagates.
    * Bad values       -> ``ValueError`` from parsing or schema validation.
"""

from __future__ import annotations

import hashlib
import json
from datetime import date
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from workshop_config.schema import CalendarSettings, PayrollSettings, WorkshopConfig


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Load one YAML file; an empty file yields ``{}``."""
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Configuration root in {path} must be a mapping")
    return data


def parse_date(value: Any) -> date:
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value)
    raise ValueError(f"Cannot parse date from {value!r}")


def _parse_decimal(value: Any, name: str) -> Decimal:
    # YAML floats go through str() to keep their written form.
    try:
        return Decimal(str(value))
    except InvalidOperation as exc:
        raise ValueError(f"{name} must be a number, got {value!r}") from exc


def parse_payroll(data: dict[str, Any]) -> PayrollSettings:
    defaults = PayrollSettings()
    anchors = data.get("period_anchor_days", defaults.period_anchor_days)
    return PayrollSettings(
        working_days_per_period=int(
            data.get("working_days_per_period", defaults.working_days_per_period)
        ),
        paid_hours_per_day=int(data.get("paid_hours_per_day", defaults.paid_hours_per_day)),
        overtime_multiplier=_parse_decimal(
            data.get("overtime_multiplier", defaults.overtime_multiplier),
            "payroll.overtime_multiplier",
        ),
        period_anchor_days=tuple(int(d) for d in anchors),
        decimal_places=int(data.get("decimal_places", defaults.decimal_places)),
    )


def parse_calendar(data: dict[str, Any]) -> CalendarSettings:
    return CalendarSettings(
        weeks_in_grid=int(data.get("weeks_in_grid", 6)),
        holidays=frozenset(parse_date(d) for d in data.get("holidays") or ()),
    )


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON form of ``data``."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()


def parse_config(data: dict[str, Any]) -> WorkshopConfig:
    return WorkshopConfig(
        config_id=str(data.get("config_id", "default")),
        version=int(data.get("version", 1)),
        payroll=parse_payroll(data.get("payroll") or {}),
        calendar=parse_calendar(data.get("calendar") or {}),
        checksum=compute_checksum(data),
    )


def load_config(path: Path) -> WorkshopConfig:
    return parse_config(load_yaml_file(path))
