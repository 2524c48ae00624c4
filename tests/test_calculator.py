import functools
import math
import operator
import queue
import struct

import pytest

from laserheight.calculator import LaserHeightCalculator, compute_height
from laserheight.sensor import LaserSerial, SensorError


class FakePort:
    def __init__(self, data=b""):
        self._bytes = queue.Queue()
        for b in data:
            self._bytes.put(bytes([b]))
        self.is_open = True

    def read(self, size=1):
        try:
            return self._bytes.get(timeout=0.01)
        except queue.Empty:
            return b""

    def close(self):
        self.is_open = False


def make_frame(distance, flow_x=0, flow_y=0, timespan=1000, valid=1, confidence=100):
    body = struct.pack("<hhHHBB", flow_x, flow_y, timespan, distance, valid, confidence)
    checksum = functools.reduce(operator.xor, body, 0)
    return b"\xfe\x0a" + body + bytes([checksum, 0x55])


def make_calculator(data1, data2, angle_deg=90.0, center_buff=0.0):
    s1 = LaserSerial(port=FakePort(data1))
    s2 = LaserSerial(port=FakePort(data2))
    return LaserHeightCalculator(s1, s2, angle_deg, center_buff)


def test_right_triangle_height():
    assert compute_height(3, 4, math.pi / 2, 0.0) == pytest.approx(2.4)


def test_center_buff_extends_both_ranges():
    assert compute_height(1, 2, math.pi / 2, 2.0) == pytest.approx(
        compute_height(3, 4, math.pi / 2, 0.0)
    )


def test_symmetric_in_distances():
    a = compute_height(300, 450, math.radians(6.0), 55.0)
    b = compute_height(450, 300, math.radians(6.0), 55.0)
    assert a == pytest.approx(b)


def test_degenerate_triangle_gives_zero():
    assert compute_height(100, 100, 0.0, 0.0) == 0.0


@pytest.mark.parametrize("d1,d2", [(300, 400), (1000, 20), (55, 56)])
def test_height_not_longer_than_shorter_side(d1, d2):
    h = compute_height(d1, d2, math.radians(30.0), 10.0)
    assert 0.0 < h <= min(d1, d2) + 10.0 + 1e-9


def test_latest_height_none_before_start():
    calc = make_calculator(b"", b"")
    assert calc.latest_height() is None


def test_async_calculation_delivers_height(capsys):
    calc = make_calculator(make_frame(300), make_frame(400))
    heights = queue.Queue()
    with calc:
        assert calc.start(heights.put) is True
        height = heights.get(timeout=5)
    expected = compute_height(300, 400, math.radians(90.0), 0.0)
    assert height == pytest.approx(expected)
    assert calc.latest_height() == pytest.approx(expected)
    assert calc.latest_height() is None
    out = capsys.readouterr().out
    assert "Sensor1: 300 mm" in out
    assert "Sensor2: 400 mm" in out


def test_no_height_until_both_sensors_report():
    calc = make_calculator(make_frame(300), b"")
    heights = queue.Queue()
    calc.start(heights.put)
    try:
        with pytest.raises(queue.Empty):
            heights.get(timeout=0.3)
        assert calc.latest_height() is None
    finally:
        calc.stop()


def test_start_twice_returns_false():
    calc = make_calculator(b"", b"")
    assert calc.start(lambda h: None) is True
    try:
        assert calc.start(lambda h: None) is False
        assert calc.running is True
    finally:
        calc.stop()
    assert calc.running is False


def test_exit_closes_sensors():
    calc = make_calculator(b"", b"")
    with calc:
        calc.start()
    assert calc.sensor1.is_open() is False
    assert calc.sensor2.is_open() is False


def test_from_devices_missing_device_raises():
    with pytest.raises(SensorError):
        LaserHeightCalculator.from_devices(
            "/nonexistent/laser-a", "/nonexistent/laser-b", 6.0, 55.0
        )