"""Templates for the protective files written into the secured store."""
from pathlib import Path

import config

TEMPLATE_DIR = config.BASE_DIR / "templates"

CONTROL_DESCRIPTOR = "control-descriptor"
RENDER_SCRIPT = "render-script"


class AssetProvider:
    """Supplies bootstrap templates. Override asset_path or content_for to customise them."""

    def asset_path(self, key: str) -> Path | None:
        if key == CONTROL_DESCRIPTOR:
            return TEMPLATE_DIR / "htaccess.tpl"
        if key == RENDER_SCRIPT:
            return TEMPLATE_DIR / "read.py.tpl"
        return None

    def content_for(self, key: str) -> bytes | None:
        path = self.asset_path(key)
        if path is None:
            return None
        return path.read_bytes()
