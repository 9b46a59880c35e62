"""
Reusable network scenarios.
"""

from .simple_cycle import SimpleCycle, build_simple_cycle, simple_cycle_components

__all__ = [
    'SimpleCycle',
    'build_simple_cycle',
    'simple_cycle_components',
]
