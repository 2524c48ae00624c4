"""Serial-port access to a single laser range / optical-flow sensor."""

from __future__ import annotations

import logging
import threading
from typing import Callable

import serial

from .frame import FrameDecoder, LaserData

DEFAULT_BAUDRATE = 460800
READ_TIMEOUT = 0.5

log = logging.getLogger(__name__)


class SensorError(Exception):
    """Raised when the serial port cannot be opened or read."""


class LaserSerial:
    """A laser sensor attached to a serial port.

    ``port`` may be any already-open object with ``read(size)`` and
    ``close()``; otherwise ``device`` is opened with pyserial.
    """

    def __init__(
        self,
        device: str | None = None,
        baudrate: int = DEFAULT_BAUDRATE,
        port=None,
    ) -> None:
        self.height_mm = 1.0
        self.callback: Callable[[LaserData], None] | None = None
        self._port = port
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        if port is None and device is not None:
            self.open(device, baudrate)

    def open(self, device: str, baudrate: int = DEFAULT_BAUDRATE) -> None:
        """Open and configure ``device`` as 8N1 raw with no flow control."""
        if self._port is not None:
            self.close()
        try:
            self._port = serial.Serial(
                device,
                baudrate,
                bytesize=serial.EIGHTBITS,
                parity=serial.PARITY_NONE,
                stopbits=serial.STOPBITS_ONE,
                rtscts=False,
                xonxoff=False,
                timeout=READ_TIMEOUT,
            )
        except (serial.SerialException, OSError, ValueError) as exc:
            raise SensorError(f"cannot open {device}: {exc}") from exc

    def close(self) -> None:
        """Close the port if it is open."""
        port, self._port = self._port, None
        if port is not None:
            port.close()

    def is_open(self) -> bool:
        """Whether a port is currently open."""
        return self._port is not None and bool(getattr(self._port, "is_open", True))

    def read_frame(self, height_mm: float | None = None) -> LaserData:
        """Block until one valid frame has been read and return it."""
        height = self.height_mm if height_mm is None else height_mm
        frame = self._read_until(height, lambda: False)
        assert frame is not None
        return frame

    def start_async_read(self) -> None:
        """Start delivering frames to ``callback`` from a background thread."""
        if self.callback is None:
            return
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._reader, name="laser-reader", daemon=True)
        self._thread.start()

    def stop_async_read(self) -> None:
        """Stop the background reader and wait for it to finish."""
        self._stop.set()
        thread, self._thread = self._thread, None
        if thread is not None and thread is not threading.current_thread():
            thread.join()

    def __enter__(self) -> LaserSerial:
        return self

    def __exit__(self, *args) -> None:
        self.stop_async_read()
        self.close()

    def _read_until(self, height_mm: float, should_stop: Callable[[], bool]) -> LaserData | None:
        decoder = FrameDecoder(height_mm)
        while not should_stop():
            port = self._port
            if port is None:
                raise SensorError("port is not open")
            try:
                chunk = port.read(1)
            except (serial.SerialException, OSError) as exc:
                raise SensorError(f"read error: {exc}") from exc
            if not chunk:
                continue
            frames = decoder.feed(chunk)
            if frames:
                return frames[0]
        return None

    def _reader(self) -> None:
        while not self._stop.is_set():
            try:
                data = self._read_until(self.height_mm, self._stop.is_set)
            except SensorError as exc:
                if not self.is_open():
                    break
                log.warning("%s", exc)
                self._stop.wait(READ_TIMEOUT)
                continue
            callback = self.callback
            if data is not None and callback is not None:
                callback(data)