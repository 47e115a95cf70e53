"""Persistent cache of evidence reports keyed by specification fingerprint."""

from __future__ import annotations

import json
import threading
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence

_CACHE_VERSION = 1


class ReportCache:
    """Stores serialised reports, the latest per specification fingerprint.

    With ``path=None`` the cache lives in memory only.
    """

    def __init__(self, path: Path | None) -> None:
        self._path = path
        self._entries: Dict[str, Dict[str, object]] = {}
        self._dirty = False
        self._lock = threading.Lock()
        if self._path is not None:
            self._load(self._path)

    def get(self, fingerprint: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            entry = self._entries.get(fingerprint)
        if not entry:
            return None
        report = entry.get("report")
        return report if isinstance(report, dict) else None

    def targets(self, fingerprint: str) -> List[str]:
        with self._lock:
            entry = self._entries.get(fingerprint) or {}
        targets = entry.get("targets")
        return [str(item) for item in targets] if isinstance(targets, list) else []

    def store(self, fingerprint: str, *, targets: Sequence[str], report: Dict[str, Any]) -> None:
        with self._lock:
            self._entries[fingerprint] = {
                "targets": list(targets),
                "report": report,
                "updated_at": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
            }
            self._dirty = True

    def fingerprints(self) -> List[str]:
        with self._lock:
            return sorted(self._entries)

    def prune(self, keys_to_keep: Iterable[str]) -> None:
        keep = set(keys_to_keep)
        with self._lock:
            removed = [key for key in self._entries if key not in keep]
            for key in removed:
                self._entries.pop(key, None)
            if removed:
                self._dirty = True

    def persist(self) -> None:
        with self._lock:
            if not self._dirty or self._path is None:
                return
            payload = {
                "version": _CACHE_VERSION,
                "entries": self._entries,
            }
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
            self._dirty = False

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._dirty = True

    # ------------------------------------------------------------------
    # Internal helpers

    def _load(self, path: Path) -> None:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return
        except (OSError, json.JSONDecodeError):
            return
        if not isinstance(data, dict) or data.get("version") != _CACHE_VERSION:
            return
        entries = data.get("entries")
        if not isinstance(entries, dict):
            return
        valid_entries: Dict[str, Dict[str, object]] = {}
        for key, raw in entries.items():
            if not isinstance(key, str) or not isinstance(raw, dict):
                continue
            if not isinstance(raw.get("report"), dict):
                continue
            valid_entries[key] = raw
        self._entries = valid_entries
        self._dirty = False


__all__ = ["ReportCache"]
