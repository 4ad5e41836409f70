[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "btkit"
version = "0.1.0"
description = "QR Code generation and raw-mode terminal helpers for Bitcoin tooling"
requires-python = ">=3.10"
dependencies = []
keywords = ["bitcoin", "qrcode", "qr", "reed-solomon", "terminal", "vt100"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Office/Business :: Financial",
    "Topic :: Multimedia :: Graphics",
    "Topic :: Terminals",
    "Topic :: Software Development :: Libraries :: Python Modules",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest", "hypothesis"]

[tool.hatch.build.targets.wheel]
packages = ["btkit"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
strict = true
