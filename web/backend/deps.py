from fastapi import Depends

from sonicstream.core.config import Config, load_config
from sonicstream.domain.library.importer import PlaylistImporter


def get_config() -> Config:
    """FastAPI dependency for configuration."""
    return load_config()


def get_importer(config: Config = Depends(get_config)) -> PlaylistImporter:
    """FastAPI dependency for a playlist importer wired from configuration."""
    return PlaylistImporter(config)
