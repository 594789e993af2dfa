"""
Submarine cable data and route classification
"""

from .dataset import CableDataset, CableRoute, LandingPoint
from .provider import CableProvider
from .store import CableStore
from .classifier import RouteClassifier

__all__ = [
    'CableDataset', 'CableRoute', 'LandingPoint',
    'CableProvider', 'CableStore', 'RouteClassifier',
]
