"""Configuration models and YAML loading."""

from .loader import load_config
from .schema import AppConfig, CompareConfig, ReshapeConfig, SummaryConfig

__all__ = ["AppConfig", "CompareConfig", "ReshapeConfig", "SummaryConfig", "load_config"]
