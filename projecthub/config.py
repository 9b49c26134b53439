import copy
import os
import yaml
import logging

logger = logging.getLogger(__name__)

# Default configuration matching config.yaml.example
DEFAULT_CONFIG = {
    'server': {
        'host': '0.0.0.0',
        'port': 5000
    },
    'storage': {
        'seed_sample_data': True     # Load Project A-E on startup
    },
    'network_simulation': {
        'enabled': None,             # None follows APP_ENV (on only in development)
        'min_delay_ms': 400,
        'max_delay_ms': 1500,
        'failure_rate': 0.2
    },
    'rate_limit': {
        'enabled': True,
        'default': '300/minute'
    },
    'logging': {
        'level': 'INFO',
        'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    }
}


class Config:
    _instance = None
    _config = {}

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(Config, cls).__new__(cls)
            cls._instance._load_config()
        return cls._instance

    def _load_config(self):
        """Load configuration from config.yaml or fall back to defaults."""
        self._config = copy.deepcopy(DEFAULT_CONFIG)

        # Try finding config.yaml in project root
        project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
        config_path = os.getenv('PROJECTHUB_CONFIG', os.path.join(project_root, 'config.yaml'))

        if os.path.exists(config_path):
            try:
                with open(config_path, 'r', encoding='utf-8') as f:
                    user_config = yaml.safe_load(f)
                    if user_config:
                        self._merge_config(self._config, user_config)
                logger.info(f"Loaded configuration from {config_path}")
            except (OSError, yaml.YAMLError) as e:
                logger.error(f"Failed to load {config_path}: {e}. Using defaults.")
        else:
            logger.info("config.yaml not found. Using default configuration.")

    def _merge_config(self, default, user):
        """Recursively merge dictionary user_config into default_config."""
        for key, value in user.items():
            if isinstance(value, dict) and key in default and isinstance(default[key], dict):
                self._merge_config(default[key], value)
            else:
                default[key] = value

    def get(self, section, key=None, default=None):
        """
        Get a configuration value.
        Usage: config.get('network_simulation', 'failure_rate') or config.get('server')
        """
        if section not in self._config:
            return default

        if key is None:
            return self._config[section]

        return self._config[section].get(key, default)

    @property
    def environment(self) -> str:
        return os.getenv("APP_ENV", "development")

    def simulation_enabled(self) -> bool:
        """Latency/failure injection is a development aid unless configured explicitly."""
        enabled = self.get('network_simulation', 'enabled')
        if enabled is None:
            return self.environment == "development"
        return bool(enabled)


# Global accessor
config = Config()
