"""Erasable buffer for passwords lifted out of a connection string."""

from __future__ import annotations

from types import TracebackType


class SecurePassword:
    """Password held in a mutable buffer that is zeroed on release.

    Erasure is best effort: Python may still hold the source string elsewhere,
    but this object never hands out a second buffer and overwrites its own
    bytes on :meth:`clear`, on context-manager exit and on collection.
    """

    __slots__ = ("_buffer", "_cleared")

    def __init__(self, value: str | bytes | bytearray) -> None:
        if isinstance(value, str):
            self._buffer = bytearray(value, "utf-8")
        else:
            self._buffer = bytearray(value)
        self._cleared = False

    @classmethod
    def from_setting(cls, value: str | None) -> SecurePassword | None:
        """Wrap a setting value; blank values mean "not configured"."""

        if value is None or not value.strip():
            return None
        return cls(value)

    @property
    def cleared(self) -> bool:
        return self._cleared

    def get_secret_value(self) -> str:
        """Decode the password for the one consumer allowed to use it."""

        if self._cleared:
            raise ValueError("Password buffer has already been cleared")
        return self._buffer.decode("utf-8")

    def clear(self) -> None:
        """Overwrite the buffer with zeros."""

        self._buffer[:] = bytes(len(self._buffer))
        self._cleared = True

    def __len__(self) -> int:
        return 0 if self._cleared else len(self._buffer)

    def __bool__(self) -> bool:
        return not self._cleared

    def __enter__(self) -> SecurePassword:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.clear()

    def __del__(self) -> None:  # pragma: no cover - depends on collector timing
        buffer = getattr(self, "_buffer", None)
        if buffer is not None:
            buffer[:] = bytes(len(buffer))

    def __reduce__(self) -> object:
        raise TypeError("SecurePassword cannot be pickled")

    def __repr__(self) -> str:
        state = "cleared" if self._cleared else "**********"
        return f"SecurePassword('{state}')"

    __str__ = __repr__


__all__ = ["SecurePassword"]
