[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "fancydiag"
version = "7.5.0"
description = "Diagnostic protocol types: severities, source spans, labeled spans and span reading over source code."
requires-python = ">=3.10"
dependencies = []
keywords = ["diagnostics", "errors", "source-span", "error-reporting"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["fancydiag"]

[tool.pytest.ini_options]
addopts = "-ra"
