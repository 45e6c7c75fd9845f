"""Audio: the tone gate driven by the sound timer.

The machine never synthesizes sound. It only tells a tone device to start
or stop, from the timer transition in Processor.update_timers(). The
device is an explicit handle owned by the run loop and handed to the
processor; there is no process-wide audio state.
"""

from typing import Protocol


class ToneDevice(Protocol):
    """Anything that can play and stop a continuous tone."""

    def start_tone(self) -> None: ...

    def stop_tone(self) -> None: ...

    def is_playing(self) -> bool: ...


class SilentTone:
    """Tone device that tracks on/off state without producing sound.

    Used when no audio backend is attached, and in tests.

    Attributes:
        starts: Number of start_tone() calls that turned the tone on
        stops: Number of stop_tone() calls that turned it off
    """

    def __init__(self):
        self._playing = False
        self.starts = 0
        self.stops = 0

    def start_tone(self) -> None:
        if not self._playing:
            self._playing = True
            self.starts += 1

    def stop_tone(self) -> None:
        if self._playing:
            self._playing = False
            self.stops += 1

    def is_playing(self) -> bool:
        return self._playing


def gate_tone(device: ToneDevice, sound_timer: int) -> None:
    """Start the tone while ST > 0 and stop it once ST reaches zero."""
    playing = device.is_playing()
    if sound_timer > 0 and not playing:
        device.start_tone()
    elif sound_timer == 0 and playing:
        device.stop_tone()
