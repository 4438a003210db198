"""Logging configuration and audit logging."""

import json
import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterator, Union

from calamari_backend.calamari.errors import CalamariError

from .config import get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging() -> None:
    """Configure application logging."""
    settings = get_settings()
    level = getattr(logging, settings.log_level)

    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    # The transport logs each Calamari request itself
    for name in ("httpx", "httpcore"):
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


class AuditLogger:
    """Audit trail of cluster-changing requests, one JSON object per line."""

    def __init__(
        self,
        enabled: Union[bool, None] = None,
        path: Union[str, Path, None] = None,
    ) -> None:
        """Initialize audit logger.

        Args:
            enabled: Write entries; defaults to ``audit_log_enabled``
            path: Audit file; defaults to ``audit_log_file``
        """
        settings = get_settings()
        self.enabled = settings.audit_log_enabled if enabled is None else enabled
        self.path = str(path or settings.audit_log_file)
        self.logger = logging.getLogger(f"audit:{self.path}")
        self.logger.propagate = False

        if self.enabled and not self.logger.handlers:
            Path(self.path).parent.mkdir(parents=True, exist_ok=True)
            handler = logging.FileHandler(self.path)
            handler.setFormatter(logging.Formatter("%(message)s"))
            self.logger.addHandler(handler)
            self.logger.setLevel(logging.INFO)

    def record(
        self,
        action: str,
        user: str,
        mon: Union[str, None],
        cluster: Any,
        outcome: str,
        details: Union[Dict[str, Any], None] = None,
    ) -> None:
        """Write one audit entry.

        Args:
            action: What was done, e.g. ``pool.create`` or ``osd.update``
            user: API key owner
            mon: Monitor host the request went to
            cluster: Cluster name or fsid
            outcome: ``SUCCESS`` or ``FAILED``
            details: Request parameters and, on failure, the error
        """
        if not self.enabled:
            return

        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "action": action,
            "user": user,
            "mon": mon,
            "cluster": cluster,
            "outcome": outcome,
            "details": details or {},
        }
        self.logger.info(json.dumps(entry, default=str))

    @contextmanager
    def track(
        self,
        action: str,
        user: str,
        mon: Union[str, None],
        cluster: Any,
        details: Union[Dict[str, Any], None] = None,
    ) -> Iterator[None]:
        """Audit the enclosed backend call, whether it succeeds or raises."""
        try:
            yield
        except Exception as e:
            failure = dict(details or {})
            if isinstance(e, CalamariError):
                failure.update({"error_code": e.error_code, "error": e.message})
            else:
                failure.update({"error_code": type(e).__name__, "error": str(e)})
            self.record(action, user, mon, cluster, "FAILED", failure)
            raise
        self.record(action, user, mon, cluster, "SUCCESS", details)


# Global audit logger instance
audit_logger = AuditLogger()
