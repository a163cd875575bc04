[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ptforge"
version = "0.0.7"
description = "Turn Nessus, Nmap and Burp Suite reports into concise CSV, JSON or terminal findings"
requires-python = ">=3.10"
dependencies = []
keywords = ["pentest", "nessus", "nmap", "burp", "reporting", "ssl", "ssh"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Information Technology",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Security",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
ptforge = "ptforge.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["ptforge"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
