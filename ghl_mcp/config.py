"""Configuration handling for the GoHighLevel MCP Server."""
import copy
import os
import logging
from typing import Dict, Any, Optional
import yaml

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised when required configuration is missing or invalid."""


class Config:
    """Configuration handler for the GoHighLevel MCP Server."""

    DEFAULT_CONFIG = {
        "server": {
            "host": "0.0.0.0",
            "port": 8000,
            "debug": False,
        },
        "ghl": {
            "base_url": "https://services.leadconnectorhq.com",
            "api_version": "2021-07-28",
            "access_token": None,
            "location_id": None,
            "timeout": 30,  # seconds
        },
        "sse": {
            "heartbeat_interval": 25,  # seconds, under the host's idle reaper
            "max_duration": 50,  # seconds, under the host's 60s request limit
            "tools_changed_delay": 0.1,
            "close_delay": 0.1,
        },
    }

    # (environment variable, section, key, type)
    ENVIRONMENT_OVERRIDES = (
        ("GHL_API_KEY", "ghl", "access_token", str),
        ("GHL_LOCATION_ID", "ghl", "location_id", str),
        ("GHL_BASE_URL", "ghl", "base_url", str),
        ("HOST", "server", "host", str),
        ("PORT", "server", "port", int),
    )

    def __init__(self, config_path: Optional[str] = None, environ: Optional[Dict[str, str]] = None):
        """Initialize configuration.

        Args:
            config_path: Path to the configuration file
            environ: Environment mapping used for overrides (defaults to os.environ)
        """
        self.config_path = config_path or os.path.expanduser("~/.ghl-mcp/config.yml")
        self.config = copy.deepcopy(self.DEFAULT_CONFIG)
        self._load_config()
        self._apply_environment(os.environ if environ is None else environ)

    def _load_config(self):
        """Load configuration from file."""
        if not os.path.exists(self.config_path):
            logger.info("No configuration file at %s; using defaults", self.config_path)
            return

        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                user_config = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Error loading configuration from {self.config_path}: {e}") from e

        if user_config:
            if not isinstance(user_config, dict):
                raise ConfigError(f"Configuration in {self.config_path} must be a mapping")
            self._merge_config(user_config)
        logger.info("Loaded configuration from %s", self.config_path)

    def _merge_config(self, user_config: Dict[str, Any]):
        """Merge user configuration with default configuration.

        Args:
            user_config: User configuration
        """
        for section, values in user_config.items():
            if section in self.config and isinstance(values, dict):
                self.config[section].update(values)
            else:
                self.config[section] = values

    def _apply_environment(self, environ):
        for variable, section, key, cast in self.ENVIRONMENT_OVERRIDES:
            raw = environ.get(variable)
            if raw is None or raw == "":
                continue
            try:
                self.set(section, key, cast(raw))
            except ValueError as e:
                raise ConfigError(f"Invalid value for {variable}: {raw!r}") from e

    def get(self, section: str, key: Optional[str] = None, default: Any = None) -> Any:
        """Get configuration value.

        Args:
            section: Configuration section
            key: Configuration key (optional, if None returns the entire section)
            default: Default value if the key is not found

        Returns:
            Configuration value or default
        """
        if section not in self.config:
            return default

        if key is None:
            return self.config[section]

        return self.config[section].get(key, default)

    def set(self, section: str, key: str, value: Any):
        """Set configuration value.

        Args:
            section: Configuration section
            key: Configuration key
            value: Configuration value
        """
        if section not in self.config:
            self.config[section] = {}

        self.config[section][key] = value

    def ghl_credentials(self) -> Dict[str, Any]:
        """Return the CRM client settings, failing when credentials are missing."""
        ghl = dict(self.get("ghl") or {})
        if not ghl.get("access_token"):
            raise ConfigError("GHL_API_KEY environment variable is required")
        if not ghl.get("location_id"):
            raise ConfigError("GHL_LOCATION_ID environment variable is required")
        return ghl

    def sse_settings(self) -> Dict[str, float]:
        """Return the SSE timing settings as floats."""
        sse = self.get("sse")
        if sse is None:
            sse = {}
        if not isinstance(sse, dict):
            raise ConfigError(f"Section 'sse' in {self.config_path} must be a mapping")

        settings = {}
        for key, default in self.DEFAULT_CONFIG["sse"].items():
            value = sse.get(key, default)
            if isinstance(value, bool) or not isinstance(value, (int, float, str)):
                raise ConfigError(f"Invalid value for sse.{key}: {value!r}")
            try:
                settings[key] = float(value)
            except ValueError as e:
                raise ConfigError(f"Invalid value for sse.{key}: {value!r}") from e
            if settings[key] <= 0:
                raise ConfigError(f"sse.{key} must be positive, got {value!r}")
        return settings

    def save(self):
        """Save configuration to file."""
        try:
            os.makedirs(os.path.dirname(self.config_path), exist_ok=True)

            with open(self.config_path, 'w', encoding='utf-8') as f:
                yaml.dump(self.config, f, default_flow_style=False)
            logger.info("Saved configuration to %s", self.config_path)
            return True
        except OSError as e:
            logger.error("Error saving configuration: %s", e)
            return False
