"""Shared utility helpers (datetime, id generation)."""

from permit_workflow.shared.utils.datetime import ensure_utc, utc_now
from permit_workflow.shared.utils.generators import generate_cuid

__all__ = ["ensure_utc", "generate_cuid", "utc_now"]
