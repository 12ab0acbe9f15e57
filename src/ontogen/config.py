"""Generator configuration loading.

Resolution order for each setting:
1. Environment variable (e.g., ONTOGEN_OPEN)
2. Config file (``ontogen.yaml``, ``generator:`` section)
3. Defaults below
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path  # noqa: TC003 - used at runtime
from typing import Any

from ruamel.yaml import YAML

# Default configuration values
DEFAULT_CONFIG_FILE = "ontogen.yaml"
DEFAULT_MAX_ATTEMPTS_PER_STEP = 10_000

ENV_OPEN = "ONTOGEN_OPEN"
ENV_MAX_ATTEMPTS = "ONTOGEN_MAX_ATTEMPTS"
ENV_SEED = "ONTOGEN_SEED"

_TRUE = {"1", "true", "yes", "open"}
_FALSE = {"0", "false", "no", "closed"}
_UNSET = {"", "random", "none"}


@dataclass(frozen=True)
class GeneratorConfig:
    """Configuration for graph generation.

    Attributes:
        open_on_completion: Leave generated graphs open (True) or closed
            (False). None decides by a fair coin toss per generation.
        max_attempts_per_step: Attempts allowed per successful mutation.
            None retries without bound.
        keyspace: Fixed keyspace name. None draws a random one per generation.
        seed: Seed for the random source. None seeds from system entropy.
    """

    open_on_completion: bool | None = None
    max_attempts_per_step: int | None = DEFAULT_MAX_ATTEMPTS_PER_STEP
    keyspace: str | None = None
    seed: int | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GeneratorConfig:
        """Create config from dictionary.

        Args:
            data: Dictionary with generator settings. Can have:
                - open_on_completion: bool, an open/closed string, or null
                - max_attempts_per_step: positive int or null
                - keyspace: str or null
                - seed: int or null

        Returns:
            GeneratorConfig instance.

        Raises:
            ValueError: If open_on_completion or max_attempts_per_step is invalid.
        """
        seed = data.get("seed")
        return cls(
            open_on_completion=parse_open_value(data.get("open_on_completion")),
            max_attempts_per_step=parse_max_attempts(
                data.get("max_attempts_per_step", DEFAULT_MAX_ATTEMPTS_PER_STEP)
            ),
            keyspace=data.get("keyspace"),
            seed=None if seed is None else int(seed),
        )

    def with_env_overrides(self) -> GeneratorConfig:
        """Return a copy with environment variables applied on top."""
        config = self
        if ENV_OPEN in os.environ:
            config = replace(config, open_on_completion=parse_open_flag(os.environ[ENV_OPEN]))
        if ENV_MAX_ATTEMPTS in os.environ:
            config = replace(
                config, max_attempts_per_step=parse_max_attempts(os.environ[ENV_MAX_ATTEMPTS])
            )
        if ENV_SEED in os.environ:
            config = replace(config, seed=int(os.environ[ENV_SEED]))
        return config


def parse_open_flag(raw: str) -> bool | None:
    """Parse an open/closed setting. Empty or ``random`` means unset.

    Raises:
        ValueError: If the value is not recognised.
    """
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    if value in _UNSET:
        return None
    raise ValueError(f"Cannot parse open flag: {raw!r}")


def parse_open_value(value: Any) -> bool | None:
    """Parse an open/closed setting read from a config file.

    YAML 1.2 loads ``no`` and ``closed`` as strings, so strings are parsed
    the same way as ``ONTOGEN_OPEN``.

    Raises:
        ValueError: If the value is not null, a bool or a known string.
    """
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, str):
        return parse_open_flag(value)
    raise ValueError(f"Cannot parse open flag: {value!r}")


def parse_max_attempts(value: Any) -> int | None:
    """Parse a per-step attempt budget. Null, empty or ``none`` means unbounded.

    Raises:
        ValueError: If the value is not a positive integer.
    """
    if value is None:
        return None
    if isinstance(value, str):
        if value.strip().lower() in _UNSET:
            return None
        value = value.strip()
    attempts = int(value)
    if attempts <= 0:
        raise ValueError(f"max_attempts_per_step must be positive, got {value}")
    return attempts


class GeneratorConfigError(Exception):
    """Raised when a generator config file cannot be loaded."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load generator config at {path}: {reason}")


def load_config(config_path: Path | None = None) -> GeneratorConfig:
    """Load generator configuration.

    Args:
        config_path: YAML file to read. None uses defaults only.

    Returns:
        GeneratorConfig with environment overrides applied.

    Raises:
        GeneratorConfigError: If the file is missing or malformed.
    """
    if config_path is None:
        return GeneratorConfig().with_env_overrides()

    if not config_path.exists():
        raise GeneratorConfigError(config_path, "File not found")

    yaml = YAML()
    try:
        with config_path.open("r", encoding="utf-8") as f:
            data = yaml.load(f)

        if data is None:
            raise GeneratorConfigError(config_path, "Empty file")

        section = data.get("generator", {})
        return GeneratorConfig.from_dict(dict(section)).with_env_overrides()
    except Exception as e:
        if isinstance(e, GeneratorConfigError):
            raise
        raise GeneratorConfigError(config_path, str(e)) from e
