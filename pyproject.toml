[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "armorsight"
version = "0.1.0"
description = "Light-bar pairing, serial frames and alpha-beta target tracking for armor-plate vision"
requires-python = ">=3.10"
dependencies = []
keywords = ["robotics", "vision", "tracking", "armor", "alpha-beta filter"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Image Recognition",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["armorsight"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
