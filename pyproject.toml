[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "namonflow"
version = "1.0.0"
description = "Netflow records, packet header parsing and pcap-ng block writing for per-application network monitoring"
requires-python = ">=3.10"
dependencies = []
keywords = ["netflow", "pcapng", "network", "monitoring", "packet", "capture"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking :: Monitoring",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["namonflow"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
