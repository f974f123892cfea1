# apps/htmlclient/config/loader.py
from __future__ import annotations
import copy
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml
from django.conf import settings
from django.core.signals import setting_changed
from django.dispatch import receiver

log = logging.getLogger("htmlclient.config.loader")

BASE_DIR = Path(settings.BASE_DIR)
CFG_ROOT = BASE_DIR / "configs" / "htmlclient"
CONFIG_FILES = ("config.yml", "config.yaml")

_MISSING = object()


def split_path(path: str) -> List[str]:
    """
    "client/html/basket/bulk" et "client.html.basket.bulk" désignent la même clé.
    Les segments vides sont ignorés.
    """
    raw = (path or "").replace(".", "/")
    return [seg.strip() for seg in raw.split("/") if seg.strip()]


def _deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Deep-merge prédictible:
      - dict: récursif
      - list/tuple: REPLACE (on ne concatène pas)
      - scalaires: override écrase base
    """
    out: Dict[str, Any] = dict(base or {})
    for k, v in (override or {}).items():
        if k in out and isinstance(out[k], Mapping) and isinstance(v, Mapping):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out


def _load_yaml(path: Path) -> Dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ValueError(f"YAML invalide ({path}): {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"{path}: la racine doit être un mapping (type={type(data)}).")
    return data


def _files_sentinel(root: Path) -> float:
    mtimes = []
    for name in CONFIG_FILES:
        path = root / name
        if path.exists():
            try:
                mtimes.append(path.stat().st_mtime)
            except OSError:
                continue
    return max(mtimes) if mtimes else 0.0


@lru_cache(maxsize=4)
def _load_tree_cached(root: str, sentinel: float) -> Dict[str, Any]:
    # sentinel force l'invalidation LRU quand les fichiers changent.
    tree: Dict[str, Any] = {}
    for name in CONFIG_FILES:
        path = Path(root) / name
        if path.exists():
            tree = _deep_merge(tree, _load_yaml(path))
            log.debug("Config loaded from %s", path)
    overrides = getattr(settings, "HTMLCLIENT_CONFIG", None) or {}
    if isinstance(overrides, Mapping):
        tree = _deep_merge(tree, overrides)
    return tree


def load_tree(root: Optional[Path] = None) -> Dict[str, Any]:
    folder = Path(root or CFG_ROOT)
    return _load_tree_cached(str(folder), _files_sentinel(folder))


def clear_config_cache() -> None:
    """Force le rechargement (utile en scripts et en tests)."""
    _load_tree_cached.cache_clear()


def _lookup(tree: Mapping[str, Any], parts: List[str]) -> Any:
    current: Any = tree
    for seg in parts:
        if not isinstance(current, Mapping) or seg not in current:
            return _MISSING
        current = current[seg]
    return current


class ConfigProvider:
    """
    Typed read access to the client configuration tree.

    Values come from the YAML files in configs/htmlclient, with the
    HTMLCLIENT_CONFIG setting merged on top. ``set()`` writes into a local
    overlay that shadows the shared tree for this provider only.
    """

    def __init__(self, tree: Optional[Mapping[str, Any]] = None) -> None:
        self._tree: Mapping[str, Any] = tree if tree is not None else load_tree()
        self._local: Dict[str, Any] = {}

    def get(self, path: str, default: Any = None) -> Any:
        parts = split_path(path)
        if not parts:
            return default
        local = _lookup(self._local, parts)
        shared = _lookup(self._tree, parts)
        if local is _MISSING and shared is _MISSING:
            return default
        if local is _MISSING:
            return copy.deepcopy(shared)
        if isinstance(local, Mapping) and isinstance(shared, Mapping):
            return _deep_merge(copy.deepcopy(shared), local)
        return copy.deepcopy(local)

    def subtree(self, path: str) -> Dict[str, Any]:
        value = self.get(path, {})
        return dict(value) if isinstance(value, Mapping) else {}

    def set(self, path: str, value: Any) -> None:
        parts = split_path(path)
        if not parts:
            raise ValueError("Empty configuration path")
        node = self._local
        for seg in parts[:-1]:
            nxt = node.get(seg)
            if not isinstance(nxt, dict):
                nxt = {}
                node[seg] = nxt
            node = nxt
        node[parts[-1]] = value


@receiver(setting_changed)
def _reset_on_setting_change(sender, setting, **kwargs):
    # override_settings(HTMLCLIENT_CONFIG=...) dans les tests
    if setting == "HTMLCLIENT_CONFIG":
        clear_config_cache()
