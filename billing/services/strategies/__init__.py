from .alternative import AlternativeServiceStrategy
from .base import AbstractBillingStrategy
from .hours import HoursStrategy
from .jornal import JornalStrategy
from .quantity import QuantityStrategy

__all__ = [
    "AbstractBillingStrategy",
    "AlternativeServiceStrategy",
    "HoursStrategy",
    "JornalStrategy",
    "QuantityStrategy",
]
