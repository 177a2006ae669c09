"""Boot phase state machine implementation."""

from enum import Enum, auto
from typing import ClassVar

from pyboiler.errors import BoilerError


class BootPhase(Enum):
    """Configuration readiness phases.

    State transitions:
        UNINITIALIZED -> SYNC_READY: Synchronous assembly completed
        SYNC_READY -> FULLY_READY: Enrichment pass completed
    """

    UNINITIALIZED = auto()
    SYNC_READY = auto()
    FULLY_READY = auto()


class BootStateError(BoilerError):
    """Raised when an invalid phase transition is attempted."""

    def __init__(self, from_phase: BootPhase, to_phase: BootPhase) -> None:
        """Initialize the error.

        Args:
            from_phase: The current phase.
            to_phase: The attempted target phase.
        """
        self.from_phase = from_phase
        self.to_phase = to_phase
        super().__init__(
            f"Invalid phase transition: {from_phase.name} -> {to_phase.name}"
        )


class BootStateMachine:
    """State machine for the boot sequence.

    Phases only ever advance; there is no way back to UNINITIALIZED.
    """

    VALID_TRANSITIONS: ClassVar[dict[BootPhase, set[BootPhase]]] = {
        BootPhase.UNINITIALIZED: {BootPhase.SYNC_READY},
        BootPhase.SYNC_READY: {BootPhase.FULLY_READY},
        BootPhase.FULLY_READY: set(),  # Terminal state
    }

    def __init__(self) -> None:
        """Initialize the state machine in UNINITIALIZED phase."""
        self._phase = BootPhase.UNINITIALIZED

    @property
    def phase(self) -> BootPhase:
        """Get the current phase."""
        return self._phase

    def can_transition(self, to_phase: BootPhase) -> bool:
        """Check if a transition to the given phase is valid.

        Args:
            to_phase: The target phase.

        Returns:
            True if the transition is valid, False otherwise.
        """
        return to_phase in self.VALID_TRANSITIONS.get(self._phase, set())

    def transition(self, to_phase: BootPhase) -> None:
        """Transition to a new phase.

        Args:
            to_phase: The target phase.

        Raises:
            BootStateError: If the transition is invalid.
        """
        if not self.can_transition(to_phase):
            raise BootStateError(self._phase, to_phase)
        self._phase = to_phase

    def is_initialized(self) -> bool:
        """Check if the synchronous pass has completed."""
        return self._phase != BootPhase.UNINITIALIZED

    def is_fully_ready(self) -> bool:
        """Check if the enrichment pass has completed."""
        return self._phase == BootPhase.FULLY_READY
