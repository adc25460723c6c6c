"""Monte Carlo path tracer for text scene descriptions, with BMP, PPM and TGA image output."""

__version__ = "0.1.0"

__all__ = ["camera", "geometry", "image", "lights", "material", "objects", "render", "scene_parser"]