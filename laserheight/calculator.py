"""Obstacle height from two laser range sensors mounted at a known angle."""

from __future__ import annotations

import math
import threading
from typing import Callable

from .frame import LaserData
from .sensor import DEFAULT_BAUDRATE, LaserSerial

HeightCallback = Callable[[float], None]

_MIN_DENOMINATOR = 1e-6


def compute_height(dist1: float, dist2: float, angle_rad: float, center_buff: float) -> float:
    """Return the triangle height for two ranges separated by ``angle_rad``.

    Both ranges are extended by ``center_buff`` (the offset from the sensors
    to the centre of rotation).  The result is ``d1*d2*sin(a) / |d1 - d2|``
    where ``|d1 - d2|`` is the third side given by the law of cosines; a
    degenerate triangle yields 0.0.
    """
    d1 = float(dist1) + center_buff
    d2 = float(dist2) + center_buff
    denominator = math.sqrt(d1 * d1 + d2 * d2 - 2 * d1 * d2 * math.cos(angle_rad))
    if denominator > _MIN_DENOMINATOR:
        return (d1 * d2 * math.sin(angle_rad)) / denominator
    return 0.0


class LaserHeightCalculator:
    """Combine readings of two sensors into height measurements.

    A height is computed each time both sensors have delivered a fresh,
    non-zero distance since the previous computation.
    """

    def __init__(
        self,
        sensor1: LaserSerial,
        sensor2: LaserSerial,
        angle_deg: float,
        center_buff: float,
    ) -> None:
        self.sensor1 = sensor1
        self.sensor2 = sensor2
        self.angle_rad = math.radians(angle_deg)
        self.center_buff = center_buff
        self._cond = threading.Condition()
        self._running = False
        self._thread: threading.Thread | None = None
        self._dist1 = 0
        self._dist2 = 0
        self._latest = 0.0
        self._new_data = False
        self._callback: HeightCallback | None = None
        sensor1.callback = self._on_sensor1
        sensor2.callback = self._on_sensor2

    @classmethod
    def from_devices(
        cls,
        device1: str,
        device2: str,
        angle_deg: float,
        center_buff: float,
        baudrate: int = DEFAULT_BAUDRATE,
    ) -> LaserHeightCalculator:
        """Open both serial devices and build a calculator over them."""
        sensor1 = LaserSerial(device1, baudrate)
        try:
            sensor2 = LaserSerial(device2, baudrate)
        except Exception:
            sensor1.close()
            raise
        return cls(sensor1, sensor2, angle_deg, center_buff)

    @property
    def running(self) -> bool:
        """Whether the calculation thread is active."""
        return self._running

    def start(self, callback: HeightCallback | None = None) -> bool:
        """Start reading both sensors and computing heights.

        Returns False if the calculation is already running.
        """
        with self._cond:
            if self._running:
                return False
            self._callback = callback
            self._running = True
        self.sensor1.start_async_read()
        self.sensor2.start_async_read()
        self._thread = threading.Thread(
            target=self._calculate, name="laser-height", daemon=True
        )
        self._thread.start()
        return True

    def stop(self) -> None:
        """Stop the sensors and the calculation thread."""
        with self._cond:
            if not self._running:
                return
            self._running = False
            self._cond.notify_all()
        self.sensor1.stop_async_read()
        self.sensor2.stop_async_read()
        thread, self._thread = self._thread, None
        if thread is not None and thread is not threading.current_thread():
            thread.join()

    def latest_height(self) -> float | None:
        """Return the newest height not yet fetched, or None if there is none."""
        with self._cond:
            if not self._new_data:
                return None
            self._new_data = False
            return self._latest

    def __enter__(self) -> LaserHeightCalculator:
        return self

    def __exit__(self, *args) -> None:
        self.stop()
        self.sensor1.close()
        self.sensor2.close()

    def _on_sensor1(self, data: LaserData) -> None:
        with self._cond:
            self._dist1 = data.distance
            self._cond.notify()

    def _on_sensor2(self, data: LaserData) -> None:
        with self._cond:
            self._dist2 = data.distance
            self._cond.notify()

    def _ready(self) -> bool:
        return not self._running or (self._dist1 > 0 and self._dist2 > 0)

    def _calculate(self) -> None:
        while True:
            with self._cond:
                self._cond.wait_for(self._ready)
                if not self._running:
                    break
                dist1, dist2 = self._dist1, self._dist2
                self._dist1 = 0
                self._dist2 = 0

            print(
                f"Received distances - Sensor1: {dist1} mm, Sensor2: {dist2} mm",
                flush=True,
            )
            height = compute_height(dist1, dist2, self.angle_rad, self.center_buff)

            with self._cond:
                self._latest = height
                self._new_data = True

            callback = self._callback
            if callback is not None:
                callback(height)