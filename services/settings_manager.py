"""
Settings Manager.

Handles application settings with JSON file storage.
"""

import base64
import json
import logging
import os
import platform
from dataclasses import dataclass, field, asdict, fields
from pathlib import Path
from typing import Optional

from models import DEFAULT_ZOOM_INTENSITY, LINK_HIT_WIDTH
from .persistence import DEFAULT_KEY_PREFIX

logger = logging.getLogger(__name__)


@dataclass
class EditorSettings:
    """Canvas interaction and rendering settings."""
    zoom_intensity: float = DEFAULT_ZOOM_INTENSITY
    grid_spacing: int = 20
    show_hint_overlay: bool = True
    link_hit_width: float = LINK_HIT_WIDTH   # Width of the invisible click halo, world units


@dataclass
class StorageSettings:
    """Where the topology snapshot is kept."""
    key_prefix: str = DEFAULT_KEY_PREFIX
    # Empty means "topology_store.json" next to the settings file
    store_path: str = ""


@dataclass
class ShortcutSettings:
    """Single-key tool shortcuts (Qt key names)."""
    select: str = "V"
    pan: str = "Space"
    link: str = "L"
    delete: list = field(default_factory=lambda: ["Delete", "Backspace"])
    cancel: str = "Escape"


def _section_from_dict(section_cls, data: dict):
    """Build a settings section, ignoring keys it does not know."""
    known = {f.name for f in fields(section_cls)}
    return section_cls(**{k: v for k, v in data.items() if k in known})


@dataclass
class AppSettings:
    """Complete application settings."""
    editor: EditorSettings = field(default_factory=EditorSettings)
    storage: StorageSettings = field(default_factory=StorageSettings)
    shortcuts: ShortcutSettings = field(default_factory=ShortcutSettings)
    window_geometry: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "editor": asdict(self.editor),
            "storage": asdict(self.storage),
            "shortcuts": asdict(self.shortcuts),
            "window_geometry": self.window_geometry,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AppSettings":
        """Create from dictionary."""
        settings = cls()

        if "editor" in data:
            settings.editor = _section_from_dict(EditorSettings, data["editor"])
        if "storage" in data:
            settings.storage = _section_from_dict(StorageSettings, data["storage"])
        if "shortcuts" in data:
            settings.shortcuts = _section_from_dict(ShortcutSettings, data["shortcuts"])
        if "window_geometry" in data:
            settings.window_geometry = data["window_geometry"]

        return settings


class SettingsManager:
    """
    Manages application settings with JSON file storage.

    Settings file location:
    - Windows: %APPDATA%/TopologyEditor/settings.json
    - Linux: ~/.config/TopologyEditor/settings.json
    - macOS: ~/Library/Application Support/TopologyEditor/settings.json
    """

    APP_NAME = "TopologyEditor"
    SETTINGS_FILE = "settings.json"
    STORE_FILE = "topology_store.json"

    def __init__(self, config_override: Optional[str] = None):
        """
        Initialize settings manager.

        Args:
            config_override: Optional path to override config file location.
                            Useful for testing.
        """
        self._settings = AppSettings()
        self._config_override = config_override
        self._settings_path = self._get_settings_path()
        self._ensure_settings_dir()
        self.load()

    @property
    def settings(self) -> AppSettings:
        """Get current settings."""
        return self._settings

    @property
    def settings_path(self) -> str:
        """Get the settings file path."""
        return str(self._settings_path)

    @property
    def editor(self) -> EditorSettings:
        return self._settings.editor

    @property
    def storage(self) -> StorageSettings:
        return self._settings.storage

    @property
    def shortcuts(self) -> ShortcutSettings:
        return self._settings.shortcuts

    def get_store_path(self) -> Path:
        """Get the topology store file for the current settings."""
        if self._settings.storage.store_path:
            return Path(self._settings.storage.store_path).expanduser()
        return self._settings_path.parent / self.STORE_FILE

    def _get_settings_path(self) -> Path:
        """Get platform-specific settings directory."""
        if self._config_override:
            return Path(self._config_override)

        system = platform.system()

        if system == "Windows":
            base = os.environ.get("APPDATA", os.path.expanduser("~"))
            config_dir = Path(base) / self.APP_NAME
        elif system == "Darwin":  # macOS
            config_dir = Path.home() / "Library" / "Application Support" / self.APP_NAME
        else:  # Linux and others
            xdg_config = os.environ.get("XDG_CONFIG_HOME", os.path.expanduser("~/.config"))
            config_dir = Path(xdg_config) / self.APP_NAME

        return config_dir / self.SETTINGS_FILE

    def _ensure_settings_dir(self):
        """Create settings directory if it doesn't exist."""
        try:
            self._settings_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warning(f"Cannot create settings directory: {e}")

    def load(self) -> bool:
        """Load settings from file."""
        if not self._settings_path.exists():
            return False

        try:
            with open(self._settings_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            self._settings = AppSettings.from_dict(data)
            return True
        except (OSError, ValueError, TypeError, AttributeError) as e:
            logger.error(f"Error loading settings: {e}")
            return False

    def save(self) -> bool:
        """Save settings to file."""
        try:
            self._ensure_settings_dir()
            with open(self._settings_path, "w", encoding="utf-8") as f:
                json.dump(self._settings.to_dict(), f, indent=2)
            return True
        except OSError as e:
            logger.error(f"Error saving settings: {e}")
            return False

    def reset(self):
        """Reset settings to defaults."""
        self._settings = AppSettings()
        self.save()

    def save_window_geometry(self, geometry: bytes, state: bytes):
        """Save window geometry and state."""
        self._settings.window_geometry = {
            "geometry": base64.b64encode(geometry).decode("ascii"),
            "state": base64.b64encode(state).decode("ascii"),
        }
        self.save()

    def get_window_geometry(self) -> tuple:
        """Get saved window geometry and state."""
        geo = self._settings.window_geometry
        if not geo:
            return None, None

        try:
            geometry = base64.b64decode(geo.get("geometry", ""))
            state = base64.b64decode(geo.get("state", ""))
            return geometry, state
        except (ValueError, TypeError):
            return None, None


# Global settings instance
_settings_manager: Optional[SettingsManager] = None


def get_settings(config_override: Optional[str] = None) -> SettingsManager:
    """
    Get the global settings manager instance.

    Args:
        config_override: Optional path to override config location.
                        Only used on first call to initialize.
    """
    global _settings_manager
    if _settings_manager is None:
        _settings_manager = SettingsManager(config_override)
    return _settings_manager


def reset_settings_manager():
    """Reset the global settings manager (useful for testing)."""
    global _settings_manager
    _settings_manager = None
