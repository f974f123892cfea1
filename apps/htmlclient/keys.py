# apps/htmlclient/keys.py
from __future__ import annotations
import json
from hashlib import sha256
from typing import Any, Iterable, Mapping, Optional

PHASES = ("body", "header")


def _json_default(obj: Any) -> Any:
    if isinstance(obj, (set, frozenset)):
        return sorted(obj, key=str)
    return str(obj)


def _json_stable(obj: Any) -> str:
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False, default=_json_default)


def filter_params(params: Optional[Mapping[str, Any]], prefixes: Iterable[str]) -> dict:
    """Keep the request parameters whose name starts with one of the prefixes."""
    prefixes = tuple(p for p in (prefixes or ()) if p)
    if not params or not prefixes:
        return {}
    return {k: params[k] for k in params if str(k).startswith(prefixes)}


def build_cache_key(
    page_id: str,
    site: str,
    phase: str,
    namespace: str,
    config: Optional[Mapping[str, Any]] = None,
    params: Optional[Mapping[str, Any]] = None,
    locale: str = "",
) -> str:
    """
    Clé déterministe : sha256 (hex complet, jamais tronqué) d'un document JSON
    canonique. Toute valeur de config différente donne une clé différente.
    """
    if phase not in PHASES:
        raise ValueError(f"Unknown render phase '{phase}' (expected one of {PHASES})")
    payload = {
        "uid": str(page_id or ""),
        "site": str(site or ""),
        "locale": str(locale or ""),
        "phase": phase,
        "ns": str(namespace or ""),
        "config": dict(config or {}),
        "params": dict(params or {}),
    }
    digest = sha256(_json_stable(payload).encode("utf-8")).hexdigest()
    return f"{namespace}:{phase}:{digest}"
