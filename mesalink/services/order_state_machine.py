"""
Máquina de estados dos pedidos.

Somente avanços de um passo são permitidos:

    pending -> preparing -> ready -> delivered (terminal)
"""
from typing import Dict, FrozenSet, List

from mesalink.core.exceptions import InvalidTransitionError
from mesalink.db.models.order import OrderStatus

ORDER_TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.PREPARING}),
    OrderStatus.PREPARING: frozenset({OrderStatus.READY}),
    OrderStatus.READY: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset(),
}

TERMINAL_STATUSES = frozenset(status for status, targets in ORDER_TRANSITIONS.items() if not targets)


class OrderStateMachine:
    def __init__(self, transitions: Dict[OrderStatus, FrozenSet[OrderStatus]] = ORDER_TRANSITIONS):
        self._transitions = transitions

    def allowed_from(self, current: OrderStatus) -> List[str]:
        """Próximos status permitidos, sempre derivados da entrada do status atual."""
        ordered = [status for status in OrderStatus if status in self._transitions.get(current, frozenset())]
        return [status.value for status in ordered]

    def is_noop(self, current: OrderStatus, target: OrderStatus) -> bool:
        return current == target

    def can_transition(self, current: OrderStatus, target: OrderStatus) -> bool:
        return target in self._transitions.get(current, frozenset())

    def validate(self, current: OrderStatus, target: OrderStatus) -> None:
        """Levanta InvalidTransitionError se `target` não é um avanço legal a partir de `current`."""
        if self.is_noop(current, target):
            return
        if not self.can_transition(current, target):
            raise InvalidTransitionError(current.value, self.allowed_from(current))


order_state_machine = OrderStateMachine()
