"""Configuration system using platformdirs for cross-platform paths."""

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import platformdirs

APP_NAME = "conversation-orchestrator"
APP_AUTHOR = "conversation-orchestrator"
ENV_PREFIX = "CONVERSATION_ORCHESTRATOR_"


@dataclass
class Config:
	"""Central configuration with XDG/platform conventions."""

	config_dir: Path = field(default_factory=lambda: Path(platformdirs.user_config_dir(APP_NAME)))
	data_dir: Path = field(default_factory=lambda: Path(platformdirs.user_data_dir(APP_NAME)))

	# Derived paths
	sessions_db_path: Path = field(init=False)
	log_dir: Path = field(init=False)

	# Engine
	max_delegation_depth: int = 25
	max_parallel_tasks: int = 5
	worker_timeout: Optional[float] = 300.0

	# Reasoner
	reasoner_command: str = "claude"
	reasoner_timeout: float = 120.0

	def __post_init__(self) -> None:
		self.sessions_db_path = self.data_dir / "sessions.db"
		self.log_dir = self.data_dir / "logs"

	def ensure_dirs(self) -> None:
		"""Create all required directories."""
		self.config_dir.mkdir(parents=True, exist_ok=True)
		self.data_dir.mkdir(parents=True, exist_ok=True)
		self.log_dir.mkdir(parents=True, exist_ok=True)


_PATH_FIELDS = {"config_dir", "data_dir"}
_INT_FIELDS = {"max_delegation_depth", "max_parallel_tasks"}
_FLOAT_FIELDS = {"worker_timeout", "reasoner_timeout"}
_STR_FIELDS = {"reasoner_command"}


def _coerce(key: str, val):
	"""Convert a raw setting to the field's type."""
	if key in _PATH_FIELDS:
		return Path(os.path.expanduser(str(val)))
	if key in _INT_FIELDS:
		return int(val)
	if key in _FLOAT_FIELDS:
		# 0 disables the timeout
		return float(val) or None
	return str(val)


def _apply_env_overrides(config: Config) -> Config:
	"""Apply CONVERSATION_ORCHESTRATOR_* environment variable overrides."""
	for attr in sorted(_PATH_FIELDS | _INT_FIELDS | _FLOAT_FIELDS | _STR_FIELDS):
		val = os.getenv(f"{ENV_PREFIX}{attr.upper()}")
		if val:
			setattr(config, attr, _coerce(attr, val))
	# Recompute derived paths after overrides
	config.__post_init__()
	return config


def _apply_toml(config: Config) -> Config:
	"""Apply config.toml overrides if file exists."""
	toml_path = config.config_dir / "config.toml"
	if not toml_path.exists():
		return config

	with open(toml_path, "rb") as f:
		data = tomllib.load(f)

	known = _PATH_FIELDS | _INT_FIELDS | _FLOAT_FIELDS | _STR_FIELDS
	for key, val in data.items():
		if key in known:
			setattr(config, key, _coerce(key, val))

	# Recompute derived paths after toml overrides
	config.__post_init__()
	return config


def load_config() -> Config:
	"""Load config with precedence: env vars > config.toml > defaults."""
	config = Config()
	# Env may relocate config_dir, which decides where config.toml is read from
	config = _apply_env_overrides(config)
	config = _apply_toml(config)
	config = _apply_env_overrides(config)
	config.ensure_dirs()
	return config


# Singleton
_config: Config | None = None


def get_config() -> Config:
	"""Get or create the global config instance."""
	global _config
	if _config is None:
		_config = load_config()
	return _config
