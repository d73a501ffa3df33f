[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "spanpool"
version = "0.1.0"
description = "A three-tier size-class memory pool: thread caches, a central cache and a page cache over simulated aligned pages"
requires-python = ">=3.10"
dependencies = []
keywords = ["memory-pool", "allocator", "size-class", "span", "free-list", "simulation"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
spanpool-benchmark = "spanpool.benchmark:main"

[tool.hatch.build.targets.wheel]
packages = ["spanpool"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]
