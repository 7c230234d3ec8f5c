"""
Factory for group calculation strategies.

Strategies are registered per GroupMode; the orchestrator asks the factory
for the calculator matching a group's classified mode.
"""

import logging
from typing import Dict, Optional, Type

from .calendar_policy import CalendarPolicy
from .contracts import GroupCalculationContext
from .enums import GroupMode
from .strategies.base import AbstractBillingStrategy

logger = logging.getLogger(__name__)


class StrategyNotFoundError(Exception):
    """Raised when no strategy is registered for a mode"""

    pass


class BillingStrategyFactory:
    def __init__(self):
        self._strategies: Dict[GroupMode, Type[AbstractBillingStrategy]] = {}

    def register_strategy(
        self, mode: GroupMode, strategy_class: Type[AbstractBillingStrategy]
    ) -> None:
        """
        Register a strategy implementation for a mode.

        Raises:
            ValueError: If strategy_class doesn't inherit from AbstractBillingStrategy
        """
        if not issubclass(strategy_class, AbstractBillingStrategy):
            raise ValueError(
                f"Strategy class {strategy_class} must inherit from AbstractBillingStrategy"
            )

        self._strategies[mode] = strategy_class
        logger.debug(
            f"Registered strategy {mode.value} with class {strategy_class.__name__}",
            extra={
                "mode": mode.value,
                "strategy_class": strategy_class.__name__,
                "action": "strategy_registered",
            },
        )

    def create_calculator(
        self,
        mode: GroupMode,
        context: GroupCalculationContext,
        calendar: Optional[CalendarPolicy] = None,
    ) -> AbstractBillingStrategy:
        """
        Raises:
            StrategyNotFoundError: If the mode has no registered strategy
        """
        if mode not in self._strategies:
            raise StrategyNotFoundError(
                f"Strategy {mode.value} not found. "
                f"Available strategies: {[m.value for m in self._strategies]}"
            )
        return self._strategies[mode](context, calendar)

    def get_available_strategies(self) -> list:
        return list(self._strategies.keys())

    def is_strategy_available(self, mode: GroupMode) -> bool:
        return mode in self._strategies


# Global factory instance
_global_factory = BillingStrategyFactory()


def get_billing_factory() -> BillingStrategyFactory:
    return _global_factory


def register_default_strategies() -> None:
    """
    Register the four calculation modes.

    Called from BillingConfig.ready().
    """
    # Imported here to avoid circular imports at app loading
    from .strategies.alternative import AlternativeServiceStrategy
    from .strategies.hours import HoursStrategy
    from .strategies.jornal import JornalStrategy
    from .strategies.quantity import QuantityStrategy

    factory = get_billing_factory()
    factory.register_strategy(GroupMode.JORNAL, JornalStrategy)
    factory.register_strategy(GroupMode.HOURS, HoursStrategy)
    factory.register_strategy(GroupMode.ALTERNATIVE_SERVICE, AlternativeServiceStrategy)
    factory.register_strategy(GroupMode.QUANTITY, QuantityStrategy)

    logger.info(
        "Default billing strategies registered",
        extra={
            "action": "default_strategies_registered",
            "registered_strategies": [m.value for m in factory.get_available_strategies()],
        },
    )
