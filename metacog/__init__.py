"""
Metacog: an autonomous, multi-agent research collective.

A Metacognitive Architect steers a pool of specialist agents through
repeated research cycles, recording what they find in a shared
knowledge graph until a proof is reached or the mission is stopped.
"""

from .config import MissionConfig
from .app import MetacogApp

__all__ = ["MissionConfig", "MetacogApp"]
