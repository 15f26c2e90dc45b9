[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "kubestatemetrics"
version = "1.9.0"
description = "Prometheus text exposition of Kubernetes object state: metric families, a metrics store, filtering and sharding."
requires-python = ">=3.10"
dependencies = []
keywords = [
    "kubernetes",
    "prometheus",
    "metrics",
    "monitoring",
    "exposition",
    "sharding",
]
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
    "Topic :: System :: Monitoring",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["kubestatemetrics"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
