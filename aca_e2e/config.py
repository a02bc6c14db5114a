import json
import logging
import os

from .errors import ConfigError

logger = logging.getLogger("aca_e2e.config")

DEFAULT_CONFIG_FILE = "config.json"

# --- Defaults ---
# Keys map one-to-one onto Config attributes. Environment variables override
# config.json, which overrides these values.
DEFAULTS = {
    "aca_url": "http://localhost:4200",
    "api_host": "http://localhost:8080",
    "admin_username": "admin",
    "admin_password": "admin",
    "screenshot_url": "",
    "screenshot_username": "",
    "screenshot_password": "",
    "headless": True,
    "window_size": "1280,800",
    "ui_timeout": 20.0,
    "api_wait_timeout": 60.0,
    "api_poll_interval": 1.0,
    "output_dir": "e2e-output",
}

ENV_VARS = {
    "aca_url": "ACA_URL",
    "api_host": "API_HOST",
    "admin_username": "ADMIN_USERNAME",
    "admin_password": "ADMIN_PASSWORD",
    "screenshot_url": "SCREENSHOT_URL",
    "screenshot_username": "SCREENSHOT_USERNAME",
    "screenshot_password": "SCREENSHOT_PASSWORD",
    "headless": "E2E_HEADLESS",
    "window_size": "E2E_WINDOW_SIZE",
    "ui_timeout": "E2E_UI_TIMEOUT",
    "api_wait_timeout": "E2E_API_WAIT_TIMEOUT",
    "api_poll_interval": "E2E_API_POLL_INTERVAL",
    "output_dir": "E2E_OUTPUT_DIR",
}

FLOAT_KEYS = ("ui_timeout", "api_wait_timeout", "api_poll_interval")
BOOL_KEYS = ("headless",)


class Config:
    """
    Settings shared by the REST client, the page objects and the upload collector.

    Attributes mirror the keys of DEFAULTS.
    """

    def __init__(self, **values):
        merged = dict(DEFAULTS)
        merged.update(values)
        for key, value in merged.items():
            setattr(self, key, _coerce(key, value))

    def as_dict(self):
        return {key: getattr(self, key) for key in DEFAULTS}

    def __repr__(self):
        shown = {k: v for k, v in self.as_dict().items() if "password" not in k}
        return f"Config({shown})"


def _coerce(key, value):
    if key in FLOAT_KEYS:
        try:
            return float(value)
        except (TypeError, ValueError):
            raise ConfigError(f"Invalid number for '{key}': {value!r}")
    if key in BOOL_KEYS and isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return value


def read_config_file(path):
    """
    Reads overrides from a JSON config file.

    A missing or malformed file is logged and treated as empty.

    Args:
        path (str): Path to the JSON file.

    Returns:
        dict: Known keys found in the file.
    """
    try:
        with open(path, "r") as f:
            data = json.load(f)
    except FileNotFoundError:
        logger.info(f"{path} not found. Using defaults and environment variables.")
        return {}
    except json.JSONDecodeError:
        logger.error(f"Error decoding {path}. Ignoring it.")
        return {}

    if not isinstance(data, dict):
        logger.error(f"{path} does not contain a JSON object. Ignoring it.")
        return {}

    unknown = [k for k in data if k not in DEFAULTS]
    if unknown:
        logger.warning(f"Ignoring unknown keys in {path}: {unknown}")
    return {k: v for k, v in data.items() if k in DEFAULTS}


def read_environment(environ=None):
    environ = os.environ if environ is None else environ
    values = {}
    for key, var in ENV_VARS.items():
        if environ.get(var) not in (None, ""):
            values[key] = environ[var]
    return values


def load_config(path=None, environ=None):
    """
    Builds the Config from defaults, config.json and the environment.

    Args:
        path (str, optional): JSON file to read. Defaults to $ACA_E2E_CONFIG or ./config.json.
        environ (dict, optional): Environment mapping, os.environ when omitted.

    Returns:
        Config: The merged configuration.
    """
    environ = os.environ if environ is None else environ
    path = path or environ.get("ACA_E2E_CONFIG", DEFAULT_CONFIG_FILE)

    values = read_config_file(path)
    values.update(read_environment(environ))
    config = Config(**values)
    logger.debug(f"Loaded configuration: {config!r}")
    return config
