"""Region extraction strategies. Importing this package registers all of them."""

from huepoint.engine.strategies import hybrid, precision, streaming
from huepoint.engine.strategies.registry import ExtractionContext, StrategySpec, get_registry

__all__ = [
    "hybrid",
    "precision",
    "streaming",
    "ExtractionContext",
    "StrategySpec",
    "get_registry",
]
