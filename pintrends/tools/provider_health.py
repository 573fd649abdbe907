"""
Provider health tracking: circuit breaker for upstream failures.

When Google Trends answers 429 for a keyword at 2pm, the next search at
2:00:05 should not hammer it again; the resolver goes straight to the next
tier instead. This module stores failure history in a lightweight JSON file
and applies a linear backoff capped at provider_max_backoff_seconds.

Schema:
  {provider_name: {last_failure_time, failure_count, status, backoff_until, last_successful_call}}
"""

import json
import logging
import threading
from dataclasses import dataclass, asdict
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, List, Optional

from pintrends.config import Settings, get_settings

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ProviderStatus:
    provider_name: str
    failure_count: int = 0
    status: str = "healthy"          # healthy | degraded | broken
    last_failure_time: Optional[str] = None   # ISO UTC
    backoff_until: Optional[str] = None       # ISO UTC
    last_successful_call: Optional[str] = None

    def is_available(self) -> bool:
        if self.status == "healthy":
            return True
        if self.backoff_until:
            cutoff = datetime.fromisoformat(self.backoff_until)
            if cutoff.tzinfo is None:
                cutoff = cutoff.replace(tzinfo=timezone.utc)
            return _utcnow() >= cutoff
        return False


class ProviderHealthTracker:
    """
    Lightweight circuit breaker for external providers.

    Usage:
        tracker = ProviderHealthTracker()
        if tracker.is_available("gemini"):
            try:
                result = await gemini_call(...)
                tracker.record_success("gemini")
            except Exception as e:
                tracker.record_failure("gemini", str(e))

    Pass db_path=None to keep state in memory only.
    """

    def __init__(self, db_path: Optional[Path] = None, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.db_path = Path(db_path) if db_path else None
        if self.db_path:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._statuses: Dict[str, ProviderStatus] = {}
        self._lock = threading.Lock()
        self._load()

    def _load(self):
        if self.db_path and self.db_path.exists():
            try:
                with open(self.db_path) as f:
                    raw = json.load(f)
                self._statuses = {k: ProviderStatus(**v) for k, v in raw.items()}
            except (OSError, ValueError, TypeError) as e:
                logger.warning(f"Ignoring unreadable provider health file {self.db_path}: {e}")
                self._statuses = {}

    def _save(self):
        if not self.db_path:
            return
        try:
            with open(self.db_path, "w") as f:
                json.dump({k: asdict(v) for k, v in self._statuses.items()}, f, indent=2)
        except OSError as e:
            logger.warning(f"Failed to persist provider health: {e}")

    def _get(self, provider: str) -> ProviderStatus:
        if provider not in self._statuses:
            self._statuses[provider] = ProviderStatus(provider_name=provider)
        return self._statuses[provider]

    def record_failure(self, provider: str, error: str = ""):
        """Record an upstream failure and set backoff.

        Rate limit errors (429) get shorter backoffs since they reset quickly.
        Resets failure count if the last failure was over 10 minutes ago.
        """
        with self._lock:
            s = self._get(provider)

            if s.last_failure_time:
                last = datetime.fromisoformat(s.last_failure_time)
                if last.tzinfo is None:
                    last = last.replace(tzinfo=timezone.utc)
                if (_utcnow() - last).total_seconds() > 600:
                    s.failure_count = 0

            s.last_failure_time = _utcnow().isoformat()
            s.failure_count += 1

            cfg = self.settings
            is_rate_limit = "429" in error or "rate" in error.lower()
            base = cfg.provider_ratelimit_base_seconds if is_rate_limit else cfg.provider_error_base_seconds
            backoff = timedelta(seconds=min(base * s.failure_count, cfg.provider_max_backoff_seconds))

            s.backoff_until = (_utcnow() + backoff).isoformat()
            s.status = "broken" if s.failure_count >= cfg.provider_broken_threshold else "degraded"

            logger.debug(f"Provider '{provider}' failure #{s.failure_count}: {error[:60]}")
            self._save()

    def record_success(self, provider: str):
        """Reset health on successful call."""
        with self._lock:
            s = self._get(provider)
            s.failure_count = 0
            s.status = "healthy"
            s.backoff_until = None
            s.last_successful_call = _utcnow().isoformat()
            self._save()

    def is_available(self, provider: str) -> bool:
        with self._lock:
            return self._get(provider).is_available()

    def filter_available(self, providers: List[str]) -> List[str]:
        """Return only currently-healthy providers from the list."""
        return [p for p in providers if self.is_available(p)]

    def status_report(self) -> Dict[str, dict]:
        with self._lock:
            return {k: asdict(v) for k, v in self._statuses.items()}
