"""Runtime settings for report runs."""
from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Mapping, Optional

from botocore.config import Config

ENV_PREFIX = "IAM_DUMP_"


@dataclass(frozen=True)
class DumpSettings:
    """Polling and transport knobs.

    ``poll_interval`` is the first delay between two status checks of the same
    last-accessed job; each further check multiplies it by ``poll_backoff`` up
    to ``max_poll_interval``. ``max_poll_attempts`` bounds the number of
    non-terminal checks per job, ``None`` means no bound.
    """

    poll_interval: float = 1.0
    poll_backoff: float = 1.5
    max_poll_interval: float = 10.0
    max_poll_attempts: Optional[int] = 120
    boto_max_attempts: int = 5
    boto_retry_mode: str = "standard"
    boto_read_timeout: int = 30
    boto_connect_timeout: int = 10

    def __post_init__(self) -> None:
        if self.poll_interval < 0:
            raise ValueError("poll_interval must not be negative")
        if self.poll_backoff < 1:
            raise ValueError("poll_backoff must be at least 1")
        if self.max_poll_interval < self.poll_interval:
            raise ValueError("max_poll_interval must not be smaller than poll_interval")
        if self.max_poll_attempts is not None and self.max_poll_attempts < 1:
            raise ValueError("max_poll_attempts must be at least 1")
        if self.boto_max_attempts < 1:
            raise ValueError("boto_max_attempts must be at least 1")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "DumpSettings":
        """Build settings from ``IAM_DUMP_*`` environment variables."""

        env = os.environ if environ is None else environ
        defaults = cls()

        def _get(name: str, convert, default):
            raw = env.get(ENV_PREFIX + name)
            if raw is None or raw == "":
                return default
            try:
                return convert(raw)
            except ValueError as exc:
                raise ValueError(f"Invalid value for {ENV_PREFIX}{name}: {raw!r}") from exc

        attempts_raw = env.get(ENV_PREFIX + "MAX_POLL_ATTEMPTS")
        if attempts_raw is not None and attempts_raw.strip().lower() in ("0", "none", "unbounded"):
            max_poll_attempts: Optional[int] = None
        else:
            max_poll_attempts = _get("MAX_POLL_ATTEMPTS", int, defaults.max_poll_attempts)

        return cls(
            poll_interval=_get("POLL_INTERVAL", float, defaults.poll_interval),
            poll_backoff=_get("POLL_BACKOFF", float, defaults.poll_backoff),
            max_poll_interval=_get("MAX_POLL_INTERVAL", float, defaults.max_poll_interval),
            max_poll_attempts=max_poll_attempts,
            boto_max_attempts=_get("BOTO_MAX_ATTEMPTS", int, defaults.boto_max_attempts),
            boto_retry_mode=env.get(ENV_PREFIX + "BOTO_RETRY_MODE") or defaults.boto_retry_mode,
            boto_read_timeout=_get("BOTO_READ_TIMEOUT", int, defaults.boto_read_timeout),
            boto_connect_timeout=_get("BOTO_CONNECT_TIMEOUT", int, defaults.boto_connect_timeout),
        )

    def with_overrides(self, **changes) -> "DumpSettings":
        """Return a copy with every non-``None`` keyword applied."""

        return replace(self, **{key: value for key, value in changes.items() if value is not None})

    def boto_config(self, tag: str = "iam-dump") -> Config:
        return Config(
            retries={"max_attempts": self.boto_max_attempts, "mode": self.boto_retry_mode},
            read_timeout=self.boto_read_timeout,
            connect_timeout=self.boto_connect_timeout,
            user_agent_extra=tag,
        )


__all__ = ["DumpSettings", "ENV_PREFIX"]
