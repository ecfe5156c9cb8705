"""Application wiring for HeroesMarket (configuration)."""

from .config import MarketSettings, load_config, load_settings

__all__ = ["MarketSettings", "load_config", "load_settings"]
