"""
Typed snapshot of the tunable settings.

The settings table stores flat string values. EngineConfig parses them once
so engines receive a plain immutable object instead of looking keys up on
every calculation.
"""

from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional

METRICS = ("water", "electricity", "gas")

DEFAULT_SETTINGS = [
    ("base_price_water", "1500", "Base price per unit of water"),
    ("base_price_electricity", "2500", "Base price per unit of electricity"),
    ("base_price_gas", "2000", "Base price per unit of gas"),
    ("carbon_factor_water", "0.0003", "kg CO2e per litre of water"),
    ("carbon_factor_electricity", "0.7", "kg CO2e per kWh of electricity"),
    ("carbon_factor_gas", "2.0", "kg CO2e per m3 of gas"),
    ("carbon_daily_target_kg", "10", "Daily carbon target per unit (kg CO2e)"),
    ("default_water_limit", "150", "Default monthly water limit"),
    ("default_electricity_limit", "500", "Default monthly electricity limit"),
    ("default_gas_limit", "100", "Default monthly gas limit"),
    ("alert_threshold_percent", "20", "Percent above the weekly average that raises an alert"),
    ("simulation_variance", "15", "Percent of random variance in simulated readings"),
    ("auto_balance_enabled", "1", "Automatic credit balancing enabled"),
    ("demand_price_multiplier", "0.2", "Price increase at full credit demand"),
]

_DEFAULTS = {key: value for key, value, _ in DEFAULT_SETTINGS}


def _float(values, key):
    raw = values.get(key)
    if raw is None or str(raw).strip() == "":
        raw = _DEFAULTS[key]
    try:
        return float(raw)
    except (TypeError, ValueError):
        return float(_DEFAULTS[key])


def _optional_float(values, key):
    raw = values.get(key)
    if raw is None or str(raw).strip() == "":
        return None
    try:
        return float(raw)
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True)
class EngineConfig:
    # None means the base price is not configured for that metric.
    base_prices: Dict[str, Optional[float]] = field(default_factory=dict)
    carbon_factors: Dict[str, float] = field(default_factory=dict)
    default_limits: Dict[str, float] = field(default_factory=dict)
    carbon_daily_target_kg: float = 10.0
    alert_threshold_percent: float = 20.0
    simulation_variance: float = 15.0
    demand_multiplier: float = 0.2

    @classmethod
    def from_mapping(cls, values: Mapping[str, str]) -> "EngineConfig":
        return cls(
            base_prices={m: _optional_float(values, f"base_price_{m}") for m in METRICS},
            carbon_factors={m: _float(values, f"carbon_factor_{m}") for m in METRICS},
            default_limits={m: _float(values, f"default_{m}_limit") for m in METRICS},
            carbon_daily_target_kg=_float(values, "carbon_daily_target_kg"),
            alert_threshold_percent=_float(values, "alert_threshold_percent"),
            simulation_variance=_float(values, "simulation_variance"),
            demand_multiplier=_float(values, "demand_price_multiplier"),
        )

    @classmethod
    def defaults(cls) -> "EngineConfig":
        return cls.from_mapping(_DEFAULTS)

    def base_price(self, metric: str) -> Optional[float]:
        return self.base_prices.get(metric)
