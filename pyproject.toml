[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "parlc"
version = "0.1.0"
description = "Compiler for the PArL language: lexer, LL(1) parser, semantic checks and stack-machine code generation"
requires-python = ">=3.10"
dependencies = []
keywords = ["compiler", "parl", "ll1", "parser", "lexer", "code-generation"]
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
    "Topic :: Software Development :: Compilers",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
parlc = "parlc.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["parlc"]

[tool.pytest.ini_options]
addopts = "-ra"
