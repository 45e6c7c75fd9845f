"""Keypad: logical key state shared between the input loop and the engine.

Physical key mapping lives with whoever polls the device. This module only
deals in logical keys 0x0-0xF: the input loop reports presses through
on_down()/on_up(), and the engine queries them through is_key_down() and
the blocking wait_for_key().
"""

import threading
from typing import Optional

from .errors import InputClosed


KEY_COUNT = 16


class KeyPressSignal:
    """One-shot signal carrying a single key value from one thread to another.

    Exactly one waiter, exactly one set(). A set() that happens before
    wait() is not lost.
    """

    def __init__(self):
        self._event = threading.Event()
        self._value: Optional[int] = None

    def set(self, value: Optional[int]) -> None:
        self._value = value
        self._event.set()

    def is_set(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: Optional[float] = None) -> Optional[int]:
        """Block until set() is called and return its value.

        Raises:
            TimeoutError: If timeout elapses first
        """
        if not self._event.wait(timeout):
            raise TimeoutError("No key press before timeout")
        return self._value


class Keypad:
    """State of the 16 logical keys plus the wait-for-key handoff."""

    def __init__(self):
        self._down = [False] * KEY_COUNT
        self._lock = threading.Lock()
        self._waiter: Optional[KeyPressSignal] = None
        self._closed = False

    def is_key_down(self, value: int) -> bool:
        """Whether logical key `value` is currently held.

        Values outside 0x0-0xF are never down.
        """
        if not 0 <= value < KEY_COUNT:
            return False
        return self._down[value]

    def wait_for_key(self, timeout: Optional[float] = None) -> int:
        """Block until the next key press and return its logical value.

        Only presses that happen after this call are seen.

        Raises:
            InputClosed: If the keypad is closed before a key arrives
            TimeoutError: If timeout elapses first
        """
        signal = KeyPressSignal()
        with self._lock:
            if self._closed:
                raise InputClosed("Keypad is closed")
            self._waiter = signal
        try:
            value = signal.wait(timeout)
        finally:
            with self._lock:
                if self._waiter is signal:
                    self._waiter = None
        if value is None:
            raise InputClosed("Keypad closed while waiting for a key")
        return value

    def on_down(self, value: int) -> bool:
        """Record a key press from the input loop.

        Returns:
            False if value is not a logical key, True otherwise
        """
        if not 0 <= value < KEY_COUNT:
            return False
        with self._lock:
            self._down[value] = True
            waiter, self._waiter = self._waiter, None
        if waiter is not None:
            waiter.set(value)
        return True

    def on_up(self, value: int) -> bool:
        """Record a key release from the input loop."""
        if not 0 <= value < KEY_COUNT:
            return False
        self._down[value] = False
        return True

    def close(self) -> None:
        """Release any blocked waiter and refuse further waits."""
        with self._lock:
            self._closed = True
            waiter, self._waiter = self._waiter, None
        if waiter is not None:
            waiter.set(None)

    def reopen(self) -> None:
        """Accept waits again after close()."""
        with self._lock:
            self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def waiting(self) -> bool:
        """Whether the engine is currently blocked in wait_for_key()."""
        return self._waiter is not None
