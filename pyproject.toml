[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "caveflyer"
version = "1.0.0"
description = "A procedurally generated cave-flying environment for reinforcement learning agents"
requires-python = ">=3.10"
keywords = [
    "reinforcement-learning",
    "environment",
    "procedural-generation",
    "entity-component-system",
    "game",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Scientific/Engineering :: Artificial Intelligence",
    "Topic :: Games/Entertainment :: Simulation",
]
dependencies = [
    "pillow",
    "numpy",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["caveflyer"]

[tool.pytest.ini_options]
addopts = "-ra"
