[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "kuberlogic-cli"
version = "0.0.16"
description = "Command-line client for the KuberLogic API server: manage services, backups and restores"
requires-python = ">=3.10"
keywords = ["kuberlogic", "kubernetes", "cli", "backup", "restore", "diagnostics"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Systems Administration",
]
dependencies = [
    "httpx",
    "pyyaml",
]

[project.optional-dependencies]
test = [
    "pytest",
    "httpx",
    "pyyaml",
]

[project.scripts]
kuberlogic = "kuberlogic_cli.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["kuberlogic_cli"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
ignore_missing_imports = true
