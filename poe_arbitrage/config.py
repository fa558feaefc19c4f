"""
Configuration loading for the cycle finder.

Sources, lowest precedence first: built-in defaults, config.json, .env /
process environment, command line flags.
"""
import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import dotenv

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).parent.parent

# environment variable -> SearchConfig field
ENV_VARS = {
    'POE_LEAGUE': 'league',
    'DFS_DEPTH': 'max_depth',
    'START_CURRENCY': 'currency',
    'START_AMOUNT': 'amount',
    'POE_HOST': 'host',
    'HTTP_TIMEOUT': 'timeout',
    'REQUESTS_PER_SECOND': 'requests_per_second',
    'LOG_LEVEL': 'log_level',
    'LOG_FILE': 'log_file',
}


@dataclass
class SearchConfig:
    """Settings for one search run."""
    league: str = "Synthesis"
    max_depth: int = 3  # keep it > 2, shorter paths cannot close a loop
    currency: str = "chaos"
    amount: int = 10
    host: str = "currency.poe.trade"
    timeout: float = 10.0
    requests_per_second: float = 0.0  # 0 = no request spacing
    log_level: str = "INFO"
    log_file: Optional[str] = None
    currencies: Dict[str, str] = field(default_factory=dict)  # extra registry entries
    
    def __post_init__(self):
        """Coerce and validate values."""
        try:
            self.max_depth = int(self.max_depth)
            self.amount = int(self.amount)
            self.timeout = float(self.timeout)
            self.requests_per_second = float(self.requests_per_second)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid numeric setting: {e}")
        
        if self.max_depth <= 2:
            raise ValueError(f"max_depth must be > 2 (got {self.max_depth})")
        if self.amount <= 0:
            raise ValueError(f"amount must be positive (got {self.amount})")
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive (got {self.timeout})")
        if self.requests_per_second < 0:
            raise ValueError(f"requests_per_second must be >= 0 (got {self.requests_per_second})")
        if not self.league:
            raise ValueError("league must not be empty")
        if not self.currency:
            raise ValueError("currency must not be empty")


def load_config_file(path: Path) -> Dict[str, Any]:
    """Load config.json, or an empty dict if it does not exist."""
    if not path.exists():
        logger.debug(f"config.json not found at {path}")
        return {}
    
    with open(path, 'r') as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {path}: {e}")
    
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a JSON object")
    return data


def load_config(
    overrides: Optional[Dict[str, Any]] = None,
    config_path: Optional[Path] = None,
    env_path: Optional[Path] = None
) -> SearchConfig:
    """
    Build a SearchConfig from all sources.
    
    Args:
        overrides: Values from the command line; None values are ignored
        config_path: config.json location (default: project root)
        env_path: .env location (default: project root)
    
    Raises:
        ValueError: if any value is invalid
    """
    env_path = env_path or PROJECT_ROOT / '.env'
    if env_path.exists():
        dotenv.load_dotenv(env_path)
    
    values: Dict[str, Any] = {}
    
    file_values = load_config_file(config_path or PROJECT_ROOT / 'config.json')
    unknown = set(file_values) - set(SearchConfig.__dataclass_fields__)
    if unknown:
        logger.warning(f"Ignoring unknown config.json keys: {', '.join(sorted(unknown))}")
    values.update({k: v for k, v in file_values.items() if k not in unknown})
    
    for env_name, field_name in ENV_VARS.items():
        env_value = os.getenv(env_name)
        if env_value is not None and env_value.strip():
            values[field_name] = env_value.strip()
    
    for key, value in (overrides or {}).items():
        if value is not None:
            values[key] = value
    
    return SearchConfig(**values)
