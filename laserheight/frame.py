"""Decoding of the optical-flow / laser range frames sent by the sensor."""

from __future__ import annotations

import enum
import functools
import operator
import struct
from dataclasses import dataclass

HEADER = b"\xfe\x0a"
PAYLOAD_SIZE = 12
TAIL = 0x55

# flow_x, flow_y (signed), integration timespan, distance, valid, confidence
_LAYOUT = struct.Struct("<hhHHBB")


@dataclass(frozen=True)
class LaserData:
    """One decoded frame together with the height used for derived values."""

    flow_x_integral: int
    flow_y_integral: int
    integration_timespan: int
    distance: int
    valid: int
    confidence: int
    height_mm: float = 1.0

    @property
    def angle_x_rad(self) -> float:
        """Angular displacement around X in radians."""
        return self.flow_x_integral / 10000.0

    @property
    def angle_y_rad(self) -> float:
        """Angular displacement around Y in radians."""
        return self.flow_y_integral / 10000.0

    @property
    def time_ms(self) -> float:
        """Integration time in milliseconds."""
        return self.integration_timespan / 1000.0

    @property
    def angular_vel_x(self) -> float:
        """Angular velocity around X in rad/ms, 0.0 when no time elapsed."""
        return self.angle_x_rad / self.time_ms if self.time_ms > 0 else 0.0

    @property
    def angular_vel_y(self) -> float:
        """Angular velocity around Y in rad/ms, 0.0 when no time elapsed."""
        return self.angle_y_rad / self.time_ms if self.time_ms > 0 else 0.0

    @property
    def disp_x_mm(self) -> float:
        """Displacement along X in millimetres."""
        return self.angle_x_rad * self.height_mm

    @property
    def disp_y_mm(self) -> float:
        """Displacement along Y in millimetres."""
        return self.angle_y_rad * self.height_mm

    @property
    def vel_x_mm_per_ms(self) -> float:
        """Velocity along X in mm/ms, 0.0 when no time elapsed."""
        return self.disp_x_mm / self.time_ms if self.time_ms > 0 else 0.0

    @property
    def vel_y_mm_per_ms(self) -> float:
        """Velocity along Y in mm/ms, 0.0 when no time elapsed."""
        return self.disp_y_mm / self.time_ms if self.time_ms > 0 else 0.0


def decode_payload(payload: bytes, height_mm: float = 1.0) -> LaserData:
    """Decode the 12 bytes that follow a frame header.

    Raises ValueError if the length, tail byte or checksum is wrong.
    """
    payload = bytes(payload)
    if len(payload) != PAYLOAD_SIZE:
        raise ValueError(f"payload must be {PAYLOAD_SIZE} bytes, got {len(payload)}")
    if payload[11] != TAIL:
        raise ValueError(f"bad frame tail 0x{payload[11]:02x}")
    checksum = functools.reduce(operator.xor, payload[:10], 0)
    if checksum != payload[10]:
        raise ValueError(
            f"checksum mismatch: computed 0x{checksum:02x}, frame has 0x{payload[10]:02x}"
        )
    flow_x, flow_y, timespan, distance, valid, confidence = _LAYOUT.unpack_from(payload)
    return LaserData(
        flow_x_integral=flow_x,
        flow_y_integral=flow_y,
        integration_timespan=timespan,
        distance=distance,
        valid=valid,
        confidence=confidence,
        height_mm=height_mm,
    )


class _State(enum.Enum):
    WAIT_HEAD1 = enum.auto()
    WAIT_HEAD2 = enum.auto()
    READ_PAYLOAD = enum.auto()


class FrameDecoder:
    """Incremental decoder that finds frames in an arbitrary byte stream."""

    def __init__(self, height_mm: float = 1.0) -> None:
        self.height_mm = height_mm
        self._state = _State.WAIT_HEAD1
        self._payload = bytearray()

    def reset(self) -> None:
        """Drop any partially received frame."""
        self._state = _State.WAIT_HEAD1
        self._payload.clear()

    def feed(self, data: bytes) -> list[LaserData]:
        """Consume bytes and return every complete, valid frame found in them."""
        frames = []
        for byte in bytes(data):
            frame = self._push(byte)
            if frame is not None:
                frames.append(frame)
        return frames

    def _push(self, byte: int) -> LaserData | None:
        if self._state is _State.WAIT_HEAD1:
            if byte == HEADER[0]:
                self._state = _State.WAIT_HEAD2
        elif self._state is _State.WAIT_HEAD2:
            if byte == HEADER[1]:
                self._state = _State.READ_PAYLOAD
                self._payload.clear()
            elif byte != HEADER[0]:
                self._state = _State.WAIT_HEAD1
        else:
            self._payload.append(byte)
            if len(self._payload) >= PAYLOAD_SIZE:
                payload = bytes(self._payload)
                self.reset()
                try:
                    return decode_payload(payload, self.height_mm)
                except ValueError:
                    return None
        return None