import logging.config
import os
import re
from pathlib import Path
from typing import Optional
import yaml

from .middleware import StatsMiddleware, record_requests
from .recorder import StatusRecorder
from .stats import Stats, StatsData

__all__ = [
  "Stats",
  "StatsData",
  "StatsMiddleware",
  "StatusRecorder",
  "record_requests",
  "setup_logging",
]

_BUNDLED_CONFIG = Path(__file__).resolve().parent / "logging.yaml"


def setup_logging(config_path: Optional[str] = None) -> None:
  """
  Configure logging from YAML.

  Looks at ``config_path``, then ``$LOGGING_CONFIG``, then the logging.yaml
  bundled with this package.
  """
  explicit = config_path or os.environ.get("LOGGING_CONFIG")
  candidates = [
    Path(explicit) if explicit else None,
    _BUNDLED_CONFIG,
  ]

  found = next(
    (path for path in candidates if path and path.is_file()),
    None
  )

  if found:
    with found.open('r') as f:
      config_text = f.read()

    # ${VAR:-default}
    def replace_env_vars(match) -> str:
      return os.environ.get(match.group(1), match.group(2))

    config_text = re.sub(r'\$\{([^}:]+):-([^}]+)\}', replace_env_vars,
                         config_text)
    config = yaml.safe_load(config_text)
    logging.config.dictConfig(config)
  else:
    logging.basicConfig(level=logging.INFO)
