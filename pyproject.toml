[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "owlkit"
version = "0.1.0"
description = "Shared helpers for cross-chain bridge services: amount conversion, address checksums, configuration table caches and transaction bodies."
requires-python = ">=3.10"
dependencies = [
    "pycryptodome",
]
keywords = [
    "bridge",
    "blockchain",
    "evm",
    "starknet",
    "bitcoin",
    "checksum",
    "configuration",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["owlkit"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
