from __future__ import annotations

import struct

from .errors import MalformedStreamError

__all__ = ["StreamInput", "StreamOutput", "VINT_MAX", "VINT_MAX_BYTES"]

VINT_MAX = 0xFFFFFFFF
VINT_MAX_BYTES = 5

_INT64 = struct.Struct(">q")


class StreamOutput:
    def __init__(self) -> None:
        self._buf = bytearray()

    def write_byte(self, value: int) -> None:
        self._buf.append(value & 0xFF)

    def write_bool(self, value: bool) -> None:
        self.write_byte(1 if value else 0)

    def write_vint(self, value: int) -> None:
        if value < 0 or value > VINT_MAX:
            raise ValueError(f"vint out of range: {value}")
        while value > 0x7F:
            self._buf.append((value & 0x7F) | 0x80)
            value >>= 7
        self._buf.append(value)

    def write_long(self, value: int) -> None:
        try:
            self._buf += _INT64.pack(value)
        except struct.error as exc:
            raise ValueError(f"long out of int64 range: {value}") from exc

    def write_string(self, value: str) -> None:
        raw = value.encode("utf-8")
        self.write_vint(len(raw))
        self._buf += raw

    def write_optional_string(self, value: str | None) -> None:
        if value is None:
            self.write_bool(False)
            return
        self.write_bool(True)
        self.write_string(value)

    def getvalue(self) -> bytes:
        return bytes(self._buf)


class StreamInput:
    def __init__(self, data: bytes | bytearray | memoryview) -> None:
        self._data = memoryview(bytes(data))
        self._pos = 0

    def remaining(self) -> int:
        return len(self._data) - self._pos

    def _take(self, size: int) -> memoryview:
        if size > self.remaining():
            raise MalformedStreamError(
                f"need {size} bytes at offset {self._pos}, {self.remaining()} remaining"
            )
        chunk = self._data[self._pos : self._pos + size]
        self._pos += size
        return chunk

    def read_byte(self) -> int:
        return self._take(1)[0]

    def read_bool(self) -> bool:
        flag = self.read_byte()
        if flag not in (0, 1):
            raise MalformedStreamError(f"invalid presence flag {flag} at offset {self._pos - 1}")
        return flag == 1

    def read_vint(self) -> int:
        value = 0
        for shift in range(0, 7 * VINT_MAX_BYTES, 7):
            b = self.read_byte()
            value |= (b & 0x7F) << shift
            if not b & 0x80:
                if value > VINT_MAX:
                    raise MalformedStreamError(f"vint out of range: {value}")
                return value
        raise MalformedStreamError(f"vint longer than {VINT_MAX_BYTES} bytes")

    def read_long(self) -> int:
        return _INT64.unpack(self._take(_INT64.size))[0]

    def read_string(self) -> str:
        size = self.read_vint()
        raw = self._take(size)
        try:
            return str(raw, "utf-8")
        except UnicodeDecodeError as exc:
            raise MalformedStreamError(f"invalid utf-8 string: {exc}") from exc

    def read_optional_string(self) -> str | None:
        if self.read_bool():
            return self.read_string()
        return None

    def ensure_consumed(self) -> None:
        if self.remaining():
            raise MalformedStreamError(f"{self.remaining()} trailing bytes after offset {self._pos}")
