[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "laserheight"
version = "0.1.0"
description = "Read optical-flow laser rangefinder frames over serial and triangulate obstacle height from two sensors"
requires-python = ">=3.10"
dependencies = [
    "pyserial",
]
keywords = ["laser", "rangefinder", "serial", "optical flow", "triangulation", "height"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Instrument Drivers",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
laserheight = "laserheight.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["laserheight"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]
