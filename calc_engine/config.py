"""YAML-backed defaults for the calculator scripts."""

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Optional, Union

import yaml

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "configs" / "defaults.yaml"


@dataclass
class LimeConfig:
    institution: str = "UW"
    tillage: str = "Conventional"
    use_case_98g: str = "Correction"
    target_ph_98g: Optional[float] = 6.0
    target_ph_aglime: Optional[float] = 6.5
    ecce_percent: float = 68.8
    cost_98g_per_ton: float = 295.0
    cost_aglime_per_ton: float = 40.0
    price_per_bu: float = 4.0
    yield_increase_98g: float = 8.0
    yield_increase_aglime: float = 0.0


@dataclass
class AcidityConfig:
    neutralizing_power_fraction: float = 0.94


@dataclass
class PhEfficiencyConfig:
    crop: str = "Corn Grain"
    yield_goal: float = 200.0
    n_product: str = "Urea46"
    p_product: str = "MAP11-52"
    k_product: str = "KCl60"
    s_product: str = "AMS-21-24S"


@dataclass
class SulfurConfig:
    crop: str = "Corn"


@dataclass
class CalculatorConfig:
    lime: LimeConfig = field(default_factory=LimeConfig)
    acidity: AcidityConfig = field(default_factory=AcidityConfig)
    ph_efficiency: PhEfficiencyConfig = field(default_factory=PhEfficiencyConfig)
    sulfur: SulfurConfig = field(default_factory=SulfurConfig)


def _build_section(cls, values: Optional[dict], section: str):
    values = values or {}
    if not isinstance(values, dict):
        raise ValueError(f"Config section '{section}' must be a mapping")
    known = {f.name for f in fields(cls)}
    unknown = sorted(set(values) - known)
    if unknown:
        raise ValueError(f"Unknown keys in config section '{section}': {', '.join(unknown)}")
    return cls(**values)


def config_from_dict(cfg: Optional[dict]) -> CalculatorConfig:
    """Build a CalculatorConfig; missing keys keep their defaults."""
    cfg = cfg or {}
    sections = {f.name: f.default_factory for f in fields(CalculatorConfig)}
    unknown = sorted(set(cfg) - set(sections))
    if unknown:
        raise ValueError(f"Unknown config sections: {', '.join(unknown)}")
    return CalculatorConfig(**{
        name: _build_section(factory, cfg.get(name), name)
        for name, factory in sections.items()
    })


def load_config(path: Union[str, Path, None] = None) -> CalculatorConfig:
    """Load calculator defaults from YAML (the bundled defaults when `path` is None)."""
    if path is None:
        if not DEFAULT_CONFIG_PATH.exists():
            return CalculatorConfig()
        path = DEFAULT_CONFIG_PATH
    with open(path, encoding="utf-8") as f:
        cfg = yaml.safe_load(f)
    return config_from_dict(cfg)
