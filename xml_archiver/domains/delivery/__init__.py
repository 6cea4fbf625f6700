"""
Delivery

Hands settled paths to the archiver and resubmits failed commits.
"""

from .retry_queue import DeliveryQueue

__all__ = ["DeliveryQueue"]
