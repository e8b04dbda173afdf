from __future__ import annotations

from weatherdash.services.digest.base import DigestDispatcher
from weatherdash.services.digest.mailer import EmailDigestDispatcher, render_digest
from weatherdash.services.digest.job import run_daily_digest

__all__ = ["DigestDispatcher", "EmailDigestDispatcher", "render_digest", "run_daily_digest"]
