from typing import Annotated

from fastapi import Depends

from component_tree.config import Settings, settings


def get_build_settings() -> Settings:
    """FastAPI dependency returning the settings used to locate and build documents."""
    return settings


BuildSettings = Annotated[Settings, Depends(get_build_settings)]
