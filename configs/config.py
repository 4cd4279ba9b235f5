import os
from typing import Dict, Any, Optional

from utils.errors import FileDiffError


TRUE_VALUES = {"true", "1", "yes", "y", "on"}
FALSE_VALUES = {"false", "0", "no", "n", "off"}


class ConfigError(FileDiffError):
	"""Raised for missing or malformed configuration (inputs, credentials)."""
	def __init__(self, message: str, code: str = "CONFIG"):
		super().__init__(message, code=code)


class Config:
	"""Configuration for the filediff run."""

	# GitHub configuration
	GITHUB_TOKEN = os.getenv("GITHUB_TOKEN")
	GITHUB_API_URL = os.getenv("GITHUB_API_URL", "https://api.github.com").rstrip('/')
	HTTP_TIMEOUT_S = int(os.getenv("HTTP_TIMEOUT_S", "30"))

	# Workspaces: one copy of the checkout per branch, outside the checkout itself
	WORKSPACE_ROOT = os.getenv("FILEDIFF_WORKSPACE_ROOT", os.path.join("..", ".filediff"))
	GIT_REMOTE = os.getenv("FILEDIFF_GIT_REMOTE", "origin")

	# File stat collection
	MAX_WORKERS = int(os.getenv("FILEDIFF_MAX_WORKERS", "8"))
	GZIP_LEVEL = int(os.getenv("GZIP_LEVEL", "6"))
	BROTLI_QUALITY = int(os.getenv("BROTLI_QUALITY", "11"))

	# PR comment management. External tooling matches on this exact text.
	COMMENT_MARKER = "<!-- @alex-page was here -->"
	REPORT_LINK = "**[[filediff]](https://github.com/shopify/filediff)**"

	# Logging
	LOG_SAMPLE_SIZE = int(os.getenv("LOG_SAMPLE_SIZE", "3"))

	@classmethod
	def get_github_config(cls) -> Dict[str, Any]:
		"""Get GitHub configuration for the REST client."""
		return {
			"api_url": cls.GITHUB_API_URL,
			"token": cls.GITHUB_TOKEN,
			"timeout_s": cls.HTTP_TIMEOUT_S
		}


def _input_env_name(name: str) -> str:
	# Same mangling as the Actions runner: spaces become underscores, upper-cased
	return "INPUT_" + name.replace(" ", "_").upper()


def get_input(name: str, required: bool = False) -> Optional[str]:
	"""Read an action input from the environment.

	Args:
		name: Input name as declared by the action (e.g. 'target_branch')
		required: Raise ConfigError when the input is missing or blank

	Returns:
		The trimmed value, or None when absent
	"""
	value = os.getenv(_input_env_name(name), "").strip()
	if not value:
		if required:
			raise ConfigError(f"Input required and not supplied: {name}")
		return None
	return value


def parse_bool(value: Optional[str], name: str, default: bool) -> bool:
	if value is None or not str(value).strip():
		return default
	lowered = str(value).strip().lower()
	if lowered in TRUE_VALUES:
		return True
	if lowered in FALSE_VALUES:
		return False
	raise ConfigError(f"Input {name} must be a boolean (true/false), got: {value!r}")


def get_bool_input(name: str, default: bool = False) -> bool:
	return parse_bool(get_input(name), name, default)


def require_token(token: Optional[str]) -> str:
	if not token or not token.strip():
		raise ConfigError("Missing required environment variables: GITHUB_TOKEN")
	return token.strip()
