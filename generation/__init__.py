"""
Procedural generation of divisions, clubs, players and staff for Touchline.
"""
from .config import WorldConfig
from .generate import generate_world

__all__ = ["WorldConfig", "generate_world"]
