"""
Startup configuration validation helpers.
"""
import os
from dataclasses import dataclass
from typing import List, Tuple

from ..stats import DEFAULT_RESET_INTERVAL


def _is_truthy(value: str) -> bool:
  return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class StatsSettings:
  reset_interval: float = DEFAULT_RESET_INTERVAL
  stats_path: str = "/stats"


def validate_startup_configuration() -> Tuple[StatsSettings, List[str]]:
  """
  Read and validate stats settings from the environment.

  Returns the settings plus warnings that should be logged.
  Raises RuntimeError when strict validation is enabled and a setting is invalid.
  """
  strict = _is_truthy(os.getenv("REQUEST_STATS_STRICT_STARTUP_CONFIG", "true"))
  errors: List[str] = []
  warnings: List[str] = []

  reset_interval = DEFAULT_RESET_INTERVAL
  raw_interval = os.getenv("REQUEST_STATS_RESET_INTERVAL", "").strip()
  if raw_interval:
    try:
      reset_interval = float(raw_interval)
    except ValueError:
      errors.append(
        f"REQUEST_STATS_RESET_INTERVAL must be a number of seconds, got {raw_interval!r}."
      )
      reset_interval = DEFAULT_RESET_INTERVAL
    else:
      if reset_interval <= 0:
        errors.append("REQUEST_STATS_RESET_INTERVAL must be greater than zero.")
        reset_interval = DEFAULT_RESET_INTERVAL
      elif reset_interval != DEFAULT_RESET_INTERVAL:
        warnings.append(
          f"REQUEST_STATS_RESET_INTERVAL is {reset_interval}s; status_code_count "
          f"will no longer be a per-second window."
        )

  stats_path = os.getenv("REQUEST_STATS_PATH", "/stats").strip() or "/stats"
  if not stats_path.startswith("/"):
    errors.append("REQUEST_STATS_PATH must start with '/'.")
    stats_path = "/stats"

  if strict and errors:
    raise RuntimeError("Startup configuration validation failed: " + " ".join(errors))

  warnings.extend(errors)
  return StatsSettings(reset_interval=reset_interval, stats_path=stats_path), warnings
