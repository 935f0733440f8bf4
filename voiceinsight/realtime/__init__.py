"""Live sampling of an input device."""

from .scheduler import AsyncioScheduler, VirtualScheduler
from .device import InputDevice, ArrayInputDevice, SoundDeviceInput, acquire_input_device
from .controller import ControllerState, RealtimeController, measure_buffer

__all__ = [
    "AsyncioScheduler",
    "VirtualScheduler",
    "InputDevice",
    "ArrayInputDevice",
    "SoundDeviceInput",
    "acquire_input_device",
    "ControllerState",
    "RealtimeController",
    "measure_buffer",
]
