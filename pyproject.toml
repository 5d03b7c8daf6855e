[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "sasmvm"
version = "0.1.0"
description = "A small stack virtual machine for a simple assembly language, with a multicast pairing demo"
requires-python = ">=3.10"
dependencies = []
keywords = ["virtual machine", "stack machine", "assembly", "interpreter", "lexer", "multicast"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Interpreters",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
sasmvm = "sasmvm.cli:main"
sasmvm-receiver = "sasmvm.receiver:main"
sasmvm-sender = "sasmvm.sender:main"

[tool.hatch.build.targets.wheel]
packages = ["sasmvm"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
