[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "anode"
version = "0.1.0"
description = "Concurrency building blocks: monitors, completables, a thread pool, poison-aware cells, backoff and deadlines, with lock and executor benchmarks"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "concurrency",
    "threading",
    "monitor",
    "thread-pool",
    "executor",
    "backoff",
    "deadline",
    "benchmark",
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
    "Topic :: Software Development :: Libraries",
    "Topic :: System :: Benchmark",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
anode-exec-bench = "anode.exec_bench:main"
anode-quad-bench = "anode.quad_bench:main"
anode-pl-bench = "anode.pl_bench:main"

[tool.hatch.build.targets.wheel]
packages = ["anode"]

[tool.hatch.build.targets.sdist]
include = ["anode", "tests", "pyproject.toml"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
