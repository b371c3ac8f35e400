[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "spotconnect"
version = "0.1.0"
description = "Building blocks for a Spotify Connect speaker: Shannon cipher, access-point protocol messages, login blobs, audio chunk handling and device configuration"
requires-python = ">=3.10"
dependencies = [
    "cryptography",
]
keywords = [
    "spotify",
    "spotify-connect",
    "shannon",
    "mercury",
    "protobuf",
    "audio",
    "speaker",
]
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
    "Topic :: Multimedia :: Sound/Audio :: Players",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["spotconnect"]

[tool.pytest.ini_options]
addopts = "-ra"
