"""Build dispatch: target validation and parser execution."""

from .dispatcher import BuildDispatcher
from .targets import AuxiliaryStep, BuildContext, TargetStrategy, default_strategies

__all__ = [
    "BuildDispatcher",
    "AuxiliaryStep",
    "BuildContext",
    "TargetStrategy",
    "default_strategies",
]
