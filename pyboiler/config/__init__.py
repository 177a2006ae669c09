"""Configuration assembly and boot phase tracking."""

from pyboiler.config.initializer import AssemblyRequest, Initializer
from pyboiler.config.state_machine import BootPhase, BootStateError, BootStateMachine
from pyboiler.config.value import ConfigValue


__all__ = [
    "AssemblyRequest",
    "BootPhase",
    "BootStateError",
    "BootStateMachine",
    "ConfigValue",
    "Initializer",
]
