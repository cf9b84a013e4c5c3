[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "kcretro"
version = "0.1.0"
description = "A FOCAL interpreter and the scoring and board rules of a brick-breaking game"
requires-python = ">=3.10"
dependencies = []
keywords = ["focal", "interpreter", "retro", "pdp-8", "kc85", "game"]
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
    "Topic :: Software Development :: Interpreters",
    "Topic :: Games/Entertainment :: Arcade",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
focal = "kcretro.interpreter:main"

[tool.hatch.build.targets.wheel]
packages = ["kcretro"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
