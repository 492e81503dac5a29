"""
Topology persistence.

Saves and restores {nodes, links, background image, view state} as
four separate keys in a key-value store. Each key is loaded on its
own: a corrupt or missing value only resets that one field.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from models import NetworkNode, NetworkLink, ViewState
from .kv_store import KeyValueStore

logger = logging.getLogger(__name__)


DEFAULT_KEY_PREFIX = "topology_v3"

# Written then removed to check the store works at all
_PROBE_KEY = "__topology_store_probe__"


@dataclass
class TopologySnapshot:
    """Everything that is persisted for one editor session."""
    nodes: list[NetworkNode] = field(default_factory=list)
    links: list[NetworkLink] = field(default_factory=list)
    background_image: Optional[str] = None
    view: ViewState = field(default_factory=ViewState)


class PersistenceAdapter:
    """
    Reads and writes topology snapshots through a key-value store.

    If the store is unavailable, loads return defaults and saves are
    skipped; nothing here raises to the caller.
    """

    def __init__(self, store: Optional[KeyValueStore], key_prefix: str = DEFAULT_KEY_PREFIX):
        self._store = store
        self._prefix = key_prefix
        self._available: Optional[bool] = None

    @property
    def nodes_key(self) -> str:
        return f"{self._prefix}_nodes"

    @property
    def links_key(self) -> str:
        return f"{self._prefix}_links"

    @property
    def background_key(self) -> str:
        return f"{self._prefix}_bg"

    @property
    def view_key(self) -> str:
        return f"{self._prefix}_view"

    def is_available(self) -> bool:
        """Check (once) that the store accepts writes."""
        if self._available is None:
            self._available = self._probe()
        return self._available

    def _probe(self) -> bool:
        if self._store is None:
            return False
        try:
            self._store.set(_PROBE_KEY, _PROBE_KEY)
            self._store.remove(_PROBE_KEY)
            return True
        except Exception as e:
            logger.warning(f"Topology store unavailable, persistence disabled: {e}")
            return False

    # ------------------------------------------------------------------
    # Load
    # ------------------------------------------------------------------

    def load(self) -> TopologySnapshot:
        """Load a snapshot, substituting defaults for bad fields."""
        snapshot = TopologySnapshot()
        if not self.is_available():
            return snapshot

        snapshot.nodes = self._load_list(self.nodes_key, NetworkNode.from_dict)
        snapshot.links = self._load_list(self.links_key, NetworkLink.from_dict)
        snapshot.background_image = self._read(self.background_key) or None
        snapshot.view = self._load_view()

        logger.info(
            f"Loaded topology: {len(snapshot.nodes)} nodes, {len(snapshot.links)} links"
        )
        return snapshot

    def _read(self, key: str) -> Optional[str]:
        try:
            return self._store.get(key)
        except Exception as e:
            logger.warning(f"Failed to read {key}: {e}")
            return None

    def _load_json(self, key: str):
        raw = self._read(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError as e:
            logger.warning(f"Ignoring corrupt value for {key}: {e}")
            return None

    def _load_list(self, key: str, factory: Callable[[dict], object]) -> list:
        data = self._load_json(key)
        if data is None:
            return []
        if not isinstance(data, list):
            logger.warning(f"Ignoring {key}: expected a list")
            return []
        try:
            return [factory(entry) for entry in data]
        except (KeyError, ValueError, TypeError) as e:
            logger.warning(f"Ignoring {key}: malformed entry ({e!r})")
            return []

    def _load_view(self) -> ViewState:
        data = self._load_json(self.view_key)
        if data is None:
            return ViewState()
        try:
            return ViewState.from_dict(data)
        except (KeyError, ValueError, TypeError) as e:
            logger.warning(f"Ignoring {self.view_key}: malformed view state ({e!r})")
            return ViewState()

    # ------------------------------------------------------------------
    # Save
    # ------------------------------------------------------------------

    def _write(self, key: str, value: Optional[str]) -> bool:
        if not self.is_available():
            return False
        try:
            if value is None:
                self._store.remove(key)
            else:
                self._store.set(key, value)
            return True
        except Exception as e:
            logger.warning(f"Failed to save {key}: {e}")
            return False

    def save_nodes(self, nodes: list[NetworkNode]) -> bool:
        return self._write(self.nodes_key, json.dumps([n.to_dict() for n in nodes]))

    def save_links(self, links: list[NetworkLink]) -> bool:
        return self._write(self.links_key, json.dumps([l.to_dict() for l in links]))

    def save_background(self, image: Optional[str]) -> bool:
        """Store the background data URL, or remove the key when there is none."""
        return self._write(self.background_key, image or None)

    def save_view(self, view: ViewState) -> bool:
        return self._write(self.view_key, json.dumps(view.to_dict()))

    def save(self, snapshot: TopologySnapshot) -> bool:
        """Write every field of a snapshot."""
        results = [
            self.save_nodes(snapshot.nodes),
            self.save_links(snapshot.links),
            self.save_background(snapshot.background_image),
            self.save_view(snapshot.view),
        ]
        return all(results)
