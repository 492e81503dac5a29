"""Services package."""

from .kv_store import (
    StoreError,
    KeyValueStore,
    MemoryKeyValueStore,
    JsonFileKeyValueStore,
)
from .persistence import (
    PersistenceAdapter,
    TopologySnapshot,
    DEFAULT_KEY_PREFIX,
)
from .settings_manager import (
    SettingsManager,
    AppSettings,
    EditorSettings,
    StorageSettings,
    ShortcutSettings,
    get_settings,
    reset_settings_manager,
)
from .interaction import (
    TopologyEditor,
    EditorChange,
    PointerButton,
    DEFAULT_SHORTCUTS,
    shortcuts_from_settings,
)

__all__ = [
    # Storage
    "StoreError",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "JsonFileKeyValueStore",
    # Persistence
    "PersistenceAdapter",
    "TopologySnapshot",
    "DEFAULT_KEY_PREFIX",
    # Settings
    "SettingsManager",
    "AppSettings",
    "EditorSettings",
    "StorageSettings",
    "ShortcutSettings",
    "get_settings",
    "reset_settings_manager",
    # Editor
    "TopologyEditor",
    "EditorChange",
    "PointerButton",
    "DEFAULT_SHORTCUTS",
    "shortcuts_from_settings",
]
