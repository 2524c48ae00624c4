# laserheight

Read laser rangefinder / optical-flow modules over a serial port and work
out the height of an obstacle from two sensors mounted at a known angle.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Command line

```
laserheight --help
laserheight [device1] [device2] [--angle DEG] [--center-buff MM] [--baudrate BAUD]
```

| argument        | default        | meaning                                             |
|-----------------|----------------|-----------------------------------------------------|
| `device1`       | `/dev/ttyUSB4` | serial port of the first sensor                     |
| `device2`       | `/dev/ttyUSB5` | serial port of the second sensor                    |
| `--angle`       | `6.0`          | angle between the sensors in degrees                |
| `--center-buff` | `55.0`         | offset from the sensors to the centre of rotation, mm |
| `--baudrate`    | `460800`       | serial baud rate                                    |

The command opens both sensors and starts the height calculation. For each
pair of fresh distances it prints a line
`Received distances - Sensor1: ... mm, Sensor2: ... mm` followed by
`Obstacle height: ... mm`. Press Enter (or Ctrl-C) to stop. If a port cannot
be opened, the error is printed to standard error and the command exits
with status 1.

## Frame format

Each sensor sends 14-byte frames:

| bytes | meaning                                         |
|-------|-------------------------------------------------|
| 0-1   | header `FE 0A`                                  |
| 2-3   | X flow integral, signed little-endian, ×10000   |
| 4-5   | Y flow integral, signed little-endian, ×10000   |
| 6-7   | integration timespan in µs, unsigned            |
| 8-9   | distance in mm, unsigned                        |
| 10    | valid flag                                      |
| 11    | confidence                                      |
| 12    | XOR of the ten payload bytes before it          |
| 13    | trailer `55`                                    |

A frame whose trailer or checksum is wrong is dropped, and the decoder then
searches for the next header.

## Library use

### Decoding frames (`laserheight.frame`)

Decode bytes without any hardware:

```python
from laserheight.frame import FrameDecoder

decoder = FrameDecoder(height_mm=700.0)
for data in decoder.feed(chunk):
    print(data.distance, data.vel_x_mm_per_ms, data.vel_y_mm_per_ms)
```

`FrameDecoder.feed(data)` may be given bytes in pieces of any size; it keeps
a partly received frame between calls and returns a list of every complete,
valid frame. `FrameDecoder.reset()` drops a partial frame.

`decode_payload(payload, height_mm=1.0)` turns one 12-byte payload (the bytes
after the header) into a `LaserData`, and raises `ValueError` if the length,
trailer or checksum is wrong.

`LaserData` is a frozen dataclass holding the raw fields
(`flow_x_integral`, `flow_y_integral`, `integration_timespan`, `distance`,
`valid`, `confidence`) and `height_mm`. Derived values are properties:
`angle_x_rad`, `angle_y_rad`, `time_ms`, `angular_vel_x`, `angular_vel_y`,
`disp_x_mm`, `disp_y_mm`, `vel_x_mm_per_ms`, `vel_y_mm_per_ms`. Displacements
are the angle multiplied by `height_mm`; velocities are 0.0 when the
integration time is zero.

### One sensor (`laserheight.sensor`)

```python
from laserheight.sensor import LaserSerial

with LaserSerial("/dev/ttyUSB0") as sensor:
    data = sensor.read_frame(700.0)
    print(data.distance)
```

The port is opened 8N1 with no flow control at 460800 baud unless another
`baudrate` is given. `LaserSerial(port=...)` accepts any already-open object
with `read(size)` and `close()` instead of a device name.

`read_frame(height_mm=None)` blocks until one valid frame arrives; without
an argument it uses the sensor's `height_mm` attribute (1.0 by default).

For background reading, set `sensor.callback` to a function taking a
`LaserData`, then call `start_async_read()`; `stop_async_read()` stops the
thread and waits for it. Leaving the `with` block stops reading and closes
the port. `open(device, baudrate)`, `close()` and `is_open()` manage the
port directly.

`SensorError` is raised when the port cannot be opened or read, or when
reading from a closed port.

### Two sensors (`laserheight.calculator`)

```python
from laserheight.calculator import LaserHeightCalculator, compute_height

calc = LaserHeightCalculator.from_devices("/dev/ttyUSB4", "/dev/ttyUSB5", 6.0, 55.0)
with calc:
    calc.start(lambda h: print(f"height: {h} mm"))
    ...
    print(calc.latest_height())
```

`LaserHeightCalculator(sensor1, sensor2, angle_deg, center_buff)` can also be
built over two `LaserSerial` objects; it takes over their `callback`
attributes. A height is computed each time both sensors have delivered a
fresh, non-zero distance since the previous computation.

- `start(callback=None)` starts both sensors and the calculation thread; it
  returns `False` if already running.
- `stop()` stops the sensors and the thread.
- `latest_height()` returns the newest height not yet fetched, or `None`.
- `running` tells whether the calculation is active.
- Leaving the `with` block stops the calculation and closes both sensors.

`compute_height(dist1, dist2, angle_rad, center_buff)` evaluates

    h = d1·d2·sin θ / sqrt(d1² + d2² − 2·d1·d2·cos θ)

where each distance has `center_buff` added to it first. The result is 0.0
when the denominator is 1e-6 or less.

## What it does not do

The package only listens: it sends nothing to the sensors and cannot change
their settings. Measurements are printed or passed to callbacks; nothing is
recorded or stored.