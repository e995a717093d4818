[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "stermcore"
version = "0.9.2"
description = "Terminal emulator core: VT100/xterm escape parsing, screen buffer with scrollback, selection, key mapping and pty handling"
requires-python = ">=3.10"
keywords = ["terminal", "vt100", "xterm", "escape-sequences", "pty", "emulator"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Terminals :: Terminal Emulators/X Terminals",
]
dependencies = [
    "wcwidth",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["stermcore"]

[tool.pytest.ini_options]
addopts = "-ra"
