"""Runtime configuration for the BMI utility.

This module supports a visible, file-based configuration with environment
overrides.

Files (working directory, or BMI_CONFIG_DIR when set; repo root as fallback):
- config.json (committed): default settings
- config.local.json (optional, gitignored): developer/local overrides
- .env (optional): loaded with python-dotenv, never overrides real env vars

Precedence (highest first):
1) Env var BMI_DATABASE
2) config.local.json
3) config.json

Keys (either shape is accepted):
- ConnectionStrings.BmiDatabase: appsettings-style connection string
- connection_strings.bmi_database: same value, snake_case
"""

import os
import json
import logging
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

_ROOT = Path(__file__).parent
ENV_VAR = 'BMI_DATABASE'


class ConfigError(RuntimeError):
	"""Raised when the connection string is missing or invalid."""


@dataclass(frozen=True)
class Settings:
	connection_string: str


def _load_json_safe(p: Path) -> dict:
	try:
		if p.exists():
			with p.open('r', encoding='utf-8') as f:
				data = json.load(f)
				return data if isinstance(data, dict) else {}
	except Exception as e:
		logger.warning('Ignoring unreadable config file %s: %s', p, e)
	return {}


def _connection_string_from(cfg: dict) -> str | None:
	section = cfg.get('ConnectionStrings')
	if isinstance(section, dict) and section.get('BmiDatabase'):
		return section['BmiDatabase']
	section = cfg.get('connection_strings')
	if isinstance(section, dict) and section.get('bmi_database'):
		return section['bmi_database']
	return None


def _config_dirs() -> list[Path]:
	override = os.getenv('BMI_CONFIG_DIR')
	if override:
		return [Path(override)]
	dirs = [Path.cwd()]
	if _ROOT.resolve() != Path.cwd().resolve():
		dirs.append(_ROOT)
	return dirs


def _load_env_file(base: Path) -> None:
	env_path = base / '.env'
	if env_path.exists():
		load_dotenv(dotenv_path=str(env_path), override=False)


def load_settings() -> Settings:
	"""Resolve the store connection string.

	The first config directory that holds a config.json or config.local.json
	wins; the env var still takes precedence over both files.
	"""
	conn = None
	for base in _config_dirs():
		_load_env_file(base)
		local = _connection_string_from(_load_json_safe(base / 'config.local.json'))
		default = _connection_string_from(_load_json_safe(base / 'config.json'))
		if local or default:
			conn = local or default
			logger.debug('Using connection string from %s', base)
			break

	if os.getenv(ENV_VAR):
		conn = os.getenv(ENV_VAR)

	if conn is None or not str(conn).strip():
		raise ConfigError('Connection string is missing or invalid.')
	return Settings(connection_string=str(conn).strip())
