[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "nodeprobe"
version = "0.1.0"
description = "Node health helpers: OS and uptime facts, log start times, kernel cmdline and module stats, in-process metrics, Prometheus text parsing, process control and a download bandwidth check."
requires-python = ">=3.10"
dependencies = [
    "psutil",
]
keywords = [
    "monitoring",
    "node",
    "health",
    "metrics",
    "prometheus",
    "kernel",
    "uptime",
    "bandwidth",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: POSIX :: Linux",
    "Operating System :: MacOS",
    "Operating System :: Microsoft :: Windows",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Monitoring",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
nodeprobe-nethealth = "nodeprobe.nethealth:main"

[tool.hatch.build.targets.wheel]
packages = ["nodeprobe"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
