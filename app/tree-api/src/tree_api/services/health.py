import os

from component_tree.config import Settings


async def health_check(build_settings: Settings) -> str:
    return "ok" if os.path.isdir(build_settings.output_dir) else "missing"
