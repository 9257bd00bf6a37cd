"""
Request identity
================
There is no auth layer in front of the journal: a client may name its
user in the ``X-User-Id`` header, otherwise the configured demo user is
assumed. Kept in one dependency so a real token check can slot in later.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Header

from moodjournal.config import get_settings


def current_user_id(
    x_user_id: Optional[str] = Header(default=None, description="Journal owner; defaults to the demo user"),
) -> str:
    if x_user_id and x_user_id.strip():
        return x_user_id.strip()
    return get_settings().default_user_id
