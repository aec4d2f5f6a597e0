[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "kbeclient"
version = "0.1.0"
description = "Client-side protocol toolkit for KBEngine game servers: streams, bundles, data types, entities, entity calls and Blowfish encryption."
requires-python = ">=3.10"
dependencies = [
    "pycryptodome",
]
keywords = ["kbengine", "game", "client", "mmo", "networking", "protocol", "blowfish"]
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
    "Typing :: Typed",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["kbeclient"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
