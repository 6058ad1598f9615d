[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "lidarkit"
version = "0.1.0"
description = "LiDAR driver parameters, packet messages, frame assembly, point-cloud conversion, UDP message framing and an NTRIP correction relay"
requires-python = ">=3.10"
keywords = ["lidar", "point cloud", "msop", "difop", "ntrip", "gnss", "rtk", "nmea", "velodyne"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering",
    "Topic :: Scientific/Engineering :: GIS",
]
dependencies = [
    "pyyaml>=6.0",
    "pyserial>=3.5",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
]

[project.scripts]
lidarkit-ntrip = "lidarkit.ntrip:main"

[tool.hatch.build.targets.wheel]
packages = ["lidarkit"]

[tool.hatch.build.targets.sdist]
include = ["lidarkit", "tests", "README.md", "pyproject.toml"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
ignore_missing_imports = true
