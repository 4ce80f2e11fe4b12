[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "arkitect"
version = "0.1.0"
description = "Describe rules for a project's files in YAML and verify that the project respects them"
requires-python = ">=3.10"
keywords = ["architecture", "linting", "rules", "quality", "yaml", "files"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Quality Assurance",
]
dependencies = [
    "pyyaml",
    "jsonschema",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
arkitect = "arkitect.commands:main"

[tool.hatch.build.targets.wheel]
packages = ["arkitect"]

[tool.pytest.ini_options]
addopts = "-ra"
