[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "cronkit"
version = "0.1.0"
description = "Six-field cron expressions with second resolution and an in-process job scheduler"
requires-python = ">=3.10"
dependencies = []
keywords = ["cron", "scheduler", "crontab", "jobs", "timer"]
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
    "Topic :: Office/Business :: Scheduling",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
cronkit-example = "cronkit.example:main"

[tool.hatch.build.targets.wheel]
packages = ["cronkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
