"""
Configuration management for the Counter GUI application.

This module provides centralized configuration management, supporting:
- Loading from JSON config files
- Environment variable fallback
- Qt QSettings for window geometry
- Validation and type safety for all settings
"""

import os
import json
import logging
from dataclasses import dataclass, asdict
from typing import Optional, List
from pathlib import Path

from PySide6 import QtCore

from counter_gui.constants import (
    BACKEND_URL_DEFAULT, BACKEND_TIMEOUT_DEFAULT, BACKEND_TIMEOUT_MAX,
    WINDOW_WIDTH_DEFAULT, WINDOW_HEIGHT_DEFAULT,
    WINDOW_WIDTH_MIN, WINDOW_HEIGHT_MIN,
    RECONNECT_POLICY_DEFAULT, RECONNECT_POLICY_DISCARD_LOCAL, RECONNECT_POLICY_REPLAY_LOCAL,
)

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
VALID_LOG_LEVELS = {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging for the client.

    This is the single place the client calls logging.basicConfig. Calling it
    again only adjusts the level.

    Args:
        level: Logging level name; defaults to the LOG_LEVEL env var or 'INFO'
    """
    level_name = (level or os.environ.get('LOG_LEVEL', 'INFO')).upper()
    if level_name not in VALID_LOG_LEVELS:
        level_name = 'INFO'
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level_name, format=LOG_FORMAT)
    root.setLevel(level_name)


@dataclass
class BackendSettings:
    """Counter backend connection settings.

    Attributes:
        base_url: Base URL of the counter backend (scheme, host and port)
        timeout: Per-request timeout in seconds
    """
    base_url: str = BACKEND_URL_DEFAULT
    timeout: float = BACKEND_TIMEOUT_DEFAULT

    def validate(self) -> List[str]:
        """Validate settings and return list of error messages (empty if valid)."""
        errors = []
        if not self.base_url or not isinstance(self.base_url, str):
            errors.append("Backend URL must be a non-empty string")
        elif not self.base_url.startswith(('http://', 'https://')):
            errors.append("Backend URL must start with http:// or https://")
        if not isinstance(self.timeout, (int, float)) or not (0 < self.timeout <= BACKEND_TIMEOUT_MAX):
            errors.append(f"Backend timeout must be a number in (0, {BACKEND_TIMEOUT_MAX}]")
        return errors


@dataclass
class UISettings:
    """User interface configuration settings.

    Attributes:
        window_width: Main window width in pixels
        window_height: Main window height in pixels
    """
    window_width: int = WINDOW_WIDTH_DEFAULT
    window_height: int = WINDOW_HEIGHT_DEFAULT

    def validate(self) -> List[str]:
        """Validate settings and return list of error messages (empty if valid)."""
        errors = []
        if not isinstance(self.window_width, int) or self.window_width < WINDOW_WIDTH_MIN:
            errors.append(f"Window width must be an integer >= {WINDOW_WIDTH_MIN}")
        if not isinstance(self.window_height, int) or self.window_height < WINDOW_HEIGHT_MIN:
            errors.append(f"Window height must be an integer >= {WINDOW_HEIGHT_MIN}")
        return errors


@dataclass
class AppSettings:
    """Application-level configuration settings.

    Attributes:
        log_level: Logging level ('DEBUG', 'INFO', 'WARNING', 'ERROR')
        reconnect_policy: What to do with offline edits on reconnect
            ('discard_local' or 'replay_local')
    """
    log_level: str = 'INFO'
    reconnect_policy: str = RECONNECT_POLICY_DEFAULT

    def validate(self) -> List[str]:
        """Validate settings and return list of error messages (empty if valid)."""
        errors = []
        if self.log_level.upper() not in VALID_LOG_LEVELS:
            errors.append(f"Log level must be one of {VALID_LOG_LEVELS}")
        valid_policies = {RECONNECT_POLICY_DISCARD_LOCAL, RECONNECT_POLICY_REPLAY_LOCAL}
        if self.reconnect_policy not in valid_policies:
            errors.append(f"Reconnect policy must be one of {valid_policies}")
        return errors


class ConfigManager:
    """Centralized configuration manager for the Counter GUI.

    Configuration sources, highest priority first:
    1. JSON config file
    2. Environment variables
    3. Default values

    Window geometry is stored using Qt QSettings.

    Attributes:
        backend_settings: Backend connection configuration
        ui_settings: User interface configuration
        app_settings: Application-level configuration
        _config_file: Path to JSON config file (if loaded)
        _qsettings: Qt QSettings instance for user preferences
    """

    def __init__(self, config_file: Optional[str] = None, load_defaults: bool = True):
        """Initialize ConfigManager.

        Args:
            config_file: Optional path to JSON config file. If None, will try
                        ~/.counter_gui/config.json
            load_defaults: Whether to look for the user config file when
                        config_file is None
        """
        self.backend_settings = BackendSettings()
        self.ui_settings = UISettings()
        self.app_settings = AppSettings()
        self._config_file: Optional[str] = config_file
        self._qsettings = QtCore.QSettings('CounterApp', 'CounterGUI')

        self._load_from_environment()
        if config_file:
            self._load_from_file(config_file)
        elif load_defaults:
            self._load_from_default_locations()

        errors = self.validate()
        if errors:
            logger.warning(f"Configuration validation errors: {errors}")

    def _load_from_environment(self) -> None:
        """Load configuration from environment variables."""
        base_url = os.environ.get('COUNTER_BACKEND_URL')
        if base_url:
            self.backend_settings.base_url = base_url

        timeout = os.environ.get('COUNTER_BACKEND_TIMEOUT')
        if timeout:
            try:
                self.backend_settings.timeout = float(timeout)
            except (ValueError, TypeError):
                logger.warning(f"Invalid COUNTER_BACKEND_TIMEOUT environment variable: {timeout}")

        log_level = os.environ.get('LOG_LEVEL')
        if log_level:
            self.app_settings.log_level = log_level.upper()

        policy = os.environ.get('COUNTER_RECONNECT_POLICY')
        if policy:
            self.app_settings.reconnect_policy = policy.lower()

    def _load_from_file(self, file_path: str) -> bool:
        """Load configuration from JSON file.

        Args:
            file_path: Path to JSON config file

        Returns:
            True if loaded successfully, False otherwise
        """
        if not os.path.exists(file_path):
            logger.debug(f"Config file not found: {file_path}")
            return False

        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse config file {file_path}: {e}")
            return False
        except OSError as e:
            logger.error(f"Failed to read config file {file_path}: {e}", exc_info=True)
            return False

        if 'backend_settings' in data:
            backend_data = data['backend_settings']
            if 'base_url' in backend_data:
                self.backend_settings.base_url = str(backend_data['base_url'])
            if 'timeout' in backend_data:
                try:
                    self.backend_settings.timeout = float(backend_data['timeout'])
                except (ValueError, TypeError):
                    logger.warning(f"Invalid timeout in config: {backend_data['timeout']}")

        if 'ui_settings' in data:
            ui_data = data['ui_settings']
            for key in ('window_width', 'window_height'):
                if key in ui_data:
                    try:
                        setattr(self.ui_settings, key, int(ui_data[key]))
                    except (ValueError, TypeError):
                        logger.warning(f"Invalid {key} in config: {ui_data[key]}")

        if 'app_settings' in data:
            app_data = data['app_settings']
            if 'log_level' in app_data:
                self.app_settings.log_level = str(app_data['log_level']).upper()
            if 'reconnect_policy' in app_data:
                self.app_settings.reconnect_policy = str(app_data['reconnect_policy']).lower()

        self._config_file = file_path
        logger.info(f"Loaded configuration from {file_path}")
        return True

    def _load_from_default_locations(self) -> None:
        """Try loading from the default user config file."""
        user_config_file = Path.home() / '.counter_gui' / 'config.json'
        if user_config_file.exists():
            self._load_from_file(str(user_config_file))

    def save_to_file(self, file_path: Optional[str] = None) -> bool:
        """Save current configuration to JSON file.

        Args:
            file_path: Optional path to save to. If None, uses _config_file or creates user config.

        Returns:
            True if saved successfully, False otherwise
        """
        save_path = file_path or self._config_file
        if not save_path:
            save_path = str(Path.home() / '.counter_gui' / 'config.json')

        data = {
            'backend_settings': asdict(self.backend_settings),
            'ui_settings': asdict(self.ui_settings),
            'app_settings': asdict(self.app_settings)
        }
        try:
            os.makedirs(os.path.dirname(save_path), exist_ok=True)
            with open(save_path, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2)
        except OSError as e:
            logger.error(f"Failed to save config file {save_path}: {e}", exc_info=True)
            return False

        self._config_file = save_path
        logger.info(f"Saved configuration to {save_path}")
        return True

    def validate(self) -> List[str]:
        """Validate all configuration settings.

        Returns:
            List of error messages (empty if all valid)
        """
        errors = []
        errors.extend(self.backend_settings.validate())
        errors.extend(self.ui_settings.validate())
        errors.extend(self.app_settings.validate())
        return errors

    # QSettings methods for window geometry

    def save_window_geometry(self, geometry: bytes) -> None:
        """Save window geometry to QSettings."""
        self._qsettings.setValue('window_geometry', geometry)

    def restore_window_geometry(self) -> Optional[bytes]:
        """Restore window geometry from QSettings."""
        return self._qsettings.value('window_geometry')
