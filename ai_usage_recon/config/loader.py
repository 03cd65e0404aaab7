"""
Configuration management and loading.

Handles reconciliation settings read from a YAML file.
"""

from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Any, Dict, Tuple

import yaml

from ai_usage_recon.core.delta import ResetMode
from ai_usage_recon.core.merger import MergeDefaults
from ai_usage_recon.core.window import OutcomeRules


@dataclass(frozen=True)
class WindowConfig:
    """Trailing window length."""
    hours: float = 24.0

    def __post_init__(self):
        """Validate window length is positive."""
        if self.hours <= 0:
            raise ValueError("window hours must be > 0")

    @property
    def duration(self) -> timedelta:
        return timedelta(hours=self.hours)


@dataclass(frozen=True)
class SummaryConfig:
    """Settings for the latest-vs-previous summary widgets."""
    default_model: str = "auto"
    reset_mode: ResetMode = ResetMode.PER_METRIC


@dataclass(frozen=True)
class ReconConfig:
    """Complete reconciliation configuration."""
    window: WindowConfig = field(default_factory=WindowConfig)
    summary: SummaryConfig = field(default_factory=SummaryConfig)
    outcomes: OutcomeRules = field(default_factory=OutcomeRules)
    merge: MergeDefaults = field(default_factory=MergeDefaults)
    snapshot_markers: Tuple[str, ...] = ("Total",)


def default_config() -> ReconConfig:
    """Configuration used when no file is given."""
    return ReconConfig()


def load_recon_config(path: str) -> ReconConfig:
    """Load and validate reconciliation configuration from a YAML file.

    Unknown keys are rejected so a typo never silently falls back to a
    default.

    Args:
        path: Path to YAML configuration file

    Returns:
        Validated ReconConfig object

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML is invalid
        ValueError: If configuration is invalid
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        try:
            raw_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Invalid YAML in config file {path}: {e}")

    if raw_config is None:
        return default_config()
    if not isinstance(raw_config, dict):
        raise ValueError("Configuration must be a dictionary")

    allowed_top_keys = {'window', 'summary', 'outcomes', 'merge', 'snapshot'}
    unknown_keys = set(raw_config.keys()) - allowed_top_keys
    if unknown_keys:
        raise ValueError(f"Unknown configuration keys: {unknown_keys}")

    window = _parse_window(_section(raw_config, 'window', {'hours'}))
    summary = _parse_summary(_section(raw_config, 'summary', {'default_model', 'reset_mode'}))
    outcomes = _parse_outcomes(_section(raw_config, 'outcomes', {'successful_kinds', 'errored_marker'}))
    merge = _parse_merge(_section(raw_config, 'merge', {'model', 'kind', 'max_mode', 'user', 'cost'}))
    snapshot = _section(raw_config, 'snapshot', {'markers'})

    markers = ReconConfig().snapshot_markers
    if 'markers' in snapshot:
        markers = _string_tuple(snapshot['markers'], "snapshot.markers")

    return ReconConfig(
        window=window,
        summary=summary,
        outcomes=outcomes,
        merge=merge,
        snapshot_markers=markers,
    )


def _section(raw_config: Dict, name: str, allowed_keys: set) -> Dict[str, Any]:
    """Fetch an optional section and reject unknown keys in it."""
    data = raw_config.get(name) or {}
    if not isinstance(data, dict):
        raise ValueError(f"'{name}' must be a dictionary")
    unknown_keys = set(data.keys()) - allowed_keys
    if unknown_keys:
        raise ValueError(f"Unknown keys in {name}: {unknown_keys}")
    return data


def _string_tuple(value: Any, path: str) -> Tuple[str, ...]:
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValueError(f"'{path}' must be a list of strings")
    return tuple(value)


def _require_string(data: Dict, key: str, path: str) -> str:
    value = data[key]
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"'{key}' in {path} must be a non-empty string")
    return value


def _parse_window(data: Dict) -> WindowConfig:
    if 'hours' not in data:
        return WindowConfig()
    hours = data['hours']
    if isinstance(hours, bool) or not isinstance(hours, (int, float)) or hours <= 0:
        raise ValueError("'hours' in window must be > 0")
    return WindowConfig(hours=float(hours))


def _parse_summary(data: Dict) -> SummaryConfig:
    defaults = SummaryConfig()
    default_model = defaults.default_model
    if 'default_model' in data:
        default_model = _require_string(data, 'default_model', "summary")

    reset_mode = defaults.reset_mode
    if 'reset_mode' in data:
        mode_str = data['reset_mode']
        if not isinstance(mode_str, str):
            raise ValueError("'reset_mode' in summary must be a string")
        try:
            reset_mode = ResetMode(mode_str.lower())
        except ValueError:
            valid_modes = [mode.value for mode in ResetMode]
            raise ValueError(f"'reset_mode' in summary must be one of: {valid_modes}")

    return SummaryConfig(default_model=default_model, reset_mode=reset_mode)


def _parse_outcomes(data: Dict) -> OutcomeRules:
    defaults = OutcomeRules()
    successful_kinds = defaults.successful_kinds
    if 'successful_kinds' in data:
        successful_kinds = _string_tuple(data['successful_kinds'], "outcomes.successful_kinds")

    errored_marker = defaults.errored_marker
    if 'errored_marker' in data:
        errored_marker = _require_string(data, 'errored_marker', "outcomes")

    return OutcomeRules(successful_kinds=successful_kinds, errored_marker=errored_marker)


def _parse_merge(data: Dict) -> MergeDefaults:
    values = {}
    for key in ('model', 'kind', 'max_mode', 'user', 'cost'):
        if key in data:
            # YAML reads a bare No as False
            if isinstance(data[key], bool):
                raise ValueError(f"'{key}' in merge must be a quoted string")
            values[key] = _require_string(data, key, "merge")
    return MergeDefaults(**values)
