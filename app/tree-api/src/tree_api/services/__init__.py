from tree_api.services import health as healthService
from tree_api.services import trees as treesService

__all__ = ["healthService", "treesService"]
