"""Serialization of converted block documents."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Mapping, Sequence

from mdnotion.blocks import JsonBlock


def render_document(
    metadata: Mapping[str, datetime | str],
    blocks: Sequence[JsonBlock],
) -> str:
    """Return ``metadata`` plus a ``"blocks"`` array as pretty-printed JSON.

    Datetimes become whole-second UTC timestamps with a ``Z`` suffix.
    """

    document: dict[str, object] = {
        key: _utc_stamp(value) if isinstance(value, datetime) else str(value)
        for key, value in metadata.items()
    }
    document["blocks"] = list(blocks)
    return json.dumps(document, ensure_ascii=False, indent=2) + "\n"


def _utc_stamp(value: datetime) -> str:
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


__all__ = ["render_document"]
