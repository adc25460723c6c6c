[build-system]
requires = ["setuptools>=61"]
build-backend = "setuptools.build_meta"

[project]
name = "pathtracer"
version = "0.1.0"
description = "A small Monte Carlo path tracer that renders text scene files to BMP images"
requires-python = ">=3.10"
dependencies = ["numpy"]
keywords = ["path tracing", "ray tracing", "rendering", "graphics", "bmp", "ppm", "tga"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Education",
    "Intended Audience :: Science/Research",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Multimedia :: Graphics :: 3D Rendering",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
pathtracer = "pathtracer.render:main"

[tool.setuptools.packages.find]
include = ["pathtracer*"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
