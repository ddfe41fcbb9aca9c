"""
Apply a tentative state, await confirmation, then keep or revert it.
"""
import logging
from typing import Awaitable, Callable, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict

from pickup_manager.core.exceptions import PickupManagerError

logger = logging.getLogger(__name__)

S = TypeVar("S")


class OptimisticOutcome(BaseModel, Generic[S]):
    """
    Result of an optimistic update.

    confirmed: state is the state produced by the confirming call.
    rolled back: state is the state from before the update and error holds the cause.
    """
    confirmed: bool
    state: S
    error: Optional[PickupManagerError] = None

    model_config = ConfigDict(arbitrary_types_allowed=True)

    @property
    def rolled_back(self) -> bool:
        return not self.confirmed


async def apply_optimistic(
        current: S,
        tentative: S,
        confirm: Callable[[S], Awaitable[S]],
        publish: Optional[Callable[[S], None]] = None,
) -> OptimisticOutcome[S]:
    """
    Show a tentative state while the confirming operation runs.

    Args:
        current: State before the update
        tentative: State to show while waiting
        confirm: Coroutine function receiving the tentative state and returning
            the confirmed one; PickupManagerError means the update was refused
        publish: Called with each state as it becomes current

    Returns:
        OptimisticOutcome with the confirmed state or the restored one
    """
    if publish:
        publish(tentative)

    try:
        confirmed = await confirm(tentative)
    except PickupManagerError as e:
        logger.warning(f"Optimistic update rolled back: {str(e)}")
        if publish:
            publish(current)
        return OptimisticOutcome(confirmed=False, state=current, error=e)

    if publish:
        publish(confirmed)
    return OptimisticOutcome(confirmed=True, state=confirmed)
