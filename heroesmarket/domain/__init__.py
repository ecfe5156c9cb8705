"""Domain layer facade for HeroesMarket.

This package groups the pure business rules that do not concern
infrastructure or interface details.
"""

from . import models

__all__ = ["models"]
