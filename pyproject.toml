[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gamekit"
version = "0.1.0"
description = "Game runtime helpers: binary chunk files, polled TCP connections, skeletal animation, debug lines, sprite batching and lighting setup."
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = ["game", "animation", "skinning", "sprites", "lighting", "networking"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["gamekit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
