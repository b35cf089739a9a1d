from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from .platforms import PlatformKey
from .staging import StagingTree


def render_manifest(version: str, platform_key: PlatformKey, now: datetime) -> Dict[str, Any]:
    built_at = now.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
    return {"version": version, "platform": platform_key.key, "built_at": built_at}


def write_manifest(
    tree: StagingTree,
    version: str,
    platform_key: PlatformKey,
    now: Optional[datetime] = None,
) -> Path:
    doc = render_manifest(version, platform_key, now or datetime.now(timezone.utc))
    tree.manifest_path.write_text(json.dumps(doc, indent=2) + "\n", encoding="utf-8")
    return tree.manifest_path
