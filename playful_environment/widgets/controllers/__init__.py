"""
Controllers Module - Extracted controllers from MainWindow

Provides focused controllers for:
- generation_controller: Collaborator requests and session records
"""

from .generation_controller import GenerationController

__all__ = [
    'GenerationController',
]
