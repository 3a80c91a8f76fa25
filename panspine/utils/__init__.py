"""
Utilities module for PanSpine.

- PangenomeService: stateful load / walk / feature facade
- setup_logging: shared logging configuration
"""

from .pipeline import PangenomeService, setup_logging

__all__ = [
    'PangenomeService',
    'setup_logging',
]
