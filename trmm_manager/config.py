import os
import sys
from dataclasses import dataclass
from typing import Union


VERSION = "v1.0.0"
APP_NAME = "trmm-manager"

API_KEY_HEADER = "X-API-KEY"
DEMO_BASE_URL = "demo"
DEFAULT_REQUEST_TIMEOUT_S = 45.0


def _is_packaged_runtime() -> bool:
    """Return True when running from a packaged executable (Nuitka/PyInstaller)."""
    if bool(getattr(sys, "frozen", False)):
        return True
    if "__compiled__" in globals():
        return True
    main_mod = sys.modules.get("__main__")
    if main_mod is not None and hasattr(main_mod, "__compiled__"):
        return True
    return False


def _float_env(name: str, default: float) -> float:
    """Read a positive float env var, falling back to the default."""
    raw = str(os.environ.get(name, "") or "").strip()
    if not raw:
        return float(default)
    try:
        value = float(raw)
    except ValueError:
        return float(default)
    return value if value > 0 else float(default)


def _verify_env() -> Union[bool, str]:
    """Resolve TLS verification mode: a CA bundle path or a boolean."""
    ca_bundle = str(os.environ.get("TRMM_CA_BUNDLE", "") or "").strip()
    if ca_bundle:
        return ca_bundle
    return os.environ.get("TRMM_VERIFY_TLS", "1") != "0"


def user_config_dir() -> str:
    """Per-user data directory for profiles, keys and logs."""
    if sys.platform.startswith("win"):
        base = os.environ.get("APPDATA") or os.path.expanduser("~")
        return os.path.join(base, APP_NAME)
    if sys.platform == "darwin":
        return os.path.join(os.path.expanduser("~"), "Library", "Application Support", APP_NAME)
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return os.path.join(xdg, APP_NAME)
    return os.path.join(os.path.expanduser("~"), ".config", APP_NAME)


RUNTIME_PACKAGED = _is_packaged_runtime()

DEBUG = os.environ.get("TRMM_DEBUG", "0") == "1"
CONSOLE_LOG = os.environ.get("TRMM_CONSOLE", "0") == "1"
LOG_ENABLED = os.environ.get("TRMM_LOG", "0") == "1" or CONSOLE_LOG

REQUEST_TIMEOUT_S = _float_env("TRMM_REQUEST_TIMEOUT_S", DEFAULT_REQUEST_TIMEOUT_S)
VERIFY_TLS = _verify_env()

DATA_DIR = os.path.abspath(str(os.environ.get("TRMM_DATA_DIR", "") or "").strip() or user_config_dir())
PROFILE_DB_FILE = os.path.join(DATA_DIR, "profiles.db")
SECRET_STORE_FILE = os.path.join(DATA_DIR, "api_keys.json")
SETTINGS_FILE = os.path.join(DATA_DIR, "launcher_settings.json")
LOG_FILE = os.path.join(DATA_DIR, "trmm-manager.log")


@dataclass(frozen=True)
class ClientConfig:
    """Request settings threaded into every screen controller."""

    timeout_s: float = DEFAULT_REQUEST_TIMEOUT_S
    verify: Union[bool, str] = True
    api_key_header: str = API_KEY_HEADER

    @classmethod
    def from_env(cls) -> "ClientConfig":
        """Snapshot the current module-level configuration."""
        return cls(timeout_s=REQUEST_TIMEOUT_S, verify=VERIFY_TLS, api_key_header=API_KEY_HEADER)


def reload_from_env() -> None:
    """Reload runtime configuration from environment variables."""
    global DEBUG, CONSOLE_LOG, LOG_ENABLED
    global REQUEST_TIMEOUT_S, VERIFY_TLS
    global DATA_DIR, PROFILE_DB_FILE, SECRET_STORE_FILE, SETTINGS_FILE, LOG_FILE

    DEBUG = os.environ.get("TRMM_DEBUG", "0") == "1"
    CONSOLE_LOG = os.environ.get("TRMM_CONSOLE", "0") == "1"
    LOG_ENABLED = os.environ.get("TRMM_LOG", "0") == "1" or CONSOLE_LOG

    REQUEST_TIMEOUT_S = _float_env("TRMM_REQUEST_TIMEOUT_S", DEFAULT_REQUEST_TIMEOUT_S)
    VERIFY_TLS = _verify_env()

    DATA_DIR = os.path.abspath(str(os.environ.get("TRMM_DATA_DIR", "") or "").strip() or user_config_dir())
    PROFILE_DB_FILE = os.path.join(DATA_DIR, "profiles.db")
    SECRET_STORE_FILE = os.path.join(DATA_DIR, "api_keys.json")
    SETTINGS_FILE = os.path.join(DATA_DIR, "launcher_settings.json")
    LOG_FILE = os.path.join(DATA_DIR, "trmm-manager.log")
