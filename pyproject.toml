[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "krmkit"
version = "0.1.0"
description = "KRM resource helpers and resource-list functions that generate ConfigMaps and Kustomizations"
requires-python = ">=3.10"
dependencies = [
    "pyyaml",
]
keywords = [
    "kubernetes",
    "krm",
    "kpt",
    "kustomize",
    "configmap",
    "resource-list",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Systems Administration",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
gen-configmap = "krmkit.configmap:main"
gen-kustomize-res = "krmkit.kustomize:main"

[tool.hatch.build.targets.wheel]
packages = ["krmkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
