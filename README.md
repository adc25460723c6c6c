# pathtracer

A compact Monte Carlo path tracer. It reads a plain-text scene description
and writes the rendered picture as a 24-bit BMP file.

## Installation

```
pip install .
```

numpy is the only dependency. Install the `test` extra to run the tests
with pytest.

## Command line

```
pathtracer scene.txt output.bmp
```

The same command is available as `python -m pathtracer.render`.

The scene file must end in `.txt`. The command first echoes each argument it
was given. With the wrong number of arguments it prints a usage line and
exits with status 1. A scene that cannot be read is reported on standard
error, also with status 1. Otherwise every pixel is sampled 32 times with
jittered positions. The colours are clamped to [0, 1], gamma corrected
(1/2.2) and written as a BMP.

## Scene files

Tokens are separated by whitespace. At the top level a scene may hold a
`PerspectiveCamera`, a `Background`, `Lights`, `Materials` and a `Group`:

```
PerspectiveCamera {
    center 0 0 10
    direction 0 0 -1
    up 0 1 0
    angle 30
    width 200
    height 200
}
Background { color 0 0 0 }
Lights {
    numLights 1
    AreaLight {
        position -1 4.9 -1
        uvec 2 0 0
        vvec 0 0 2
        color 10 10 10
    }
}
Materials {
    numMaterials 2
    Material { diffuseColor 0.8 0.8 0.8 type DIFF }
    Material { diffuseColor 0.9 0.9 0.9 refractiveIndex 1.5 type REFR }
}
Group {
    numObjects 2
    MaterialIndex 0
    Plane { normal 0 1 0 offset -2 }
    MaterialIndex 1
    Sphere { center 0 0 0 radius 1 }
}
```

- The camera angle is the field of view in degrees.
- The background colour defaults to `0.5 0.5 0.5`.
- A scene without lights is accepted, with a `UserWarning`.
- Lights are `DirectionalLight { direction … color … }`,
  `PointLight { position … color … }` and
  `AreaLight { position … uvec … vvec … color … }`. An area light is the
  parallelogram spanned by `uvec` and `vvec` from its `position` corner.
- `Material` (or `PhongMaterial`) accepts `diffuseColor`, `specularColor`,
  `emissionColor`, `shininess`, `reflectivity`, `refractivity`,
  `refractiveIndex`, `type` and `texture`. The type is one of `DIFF`, `SPEC`,
  `REFR` or `METAL`, and `DIFF` is the default.
- Objects are `Sphere`, `Plane`, `Triangle` (`vertex0`, `vertex1`,
  `vertex2`), `TriangleMesh { obj_file name.obj }`, nested `Group`s and
  `Transform`. `MaterialIndex n` sets the material for the objects that
  follow it.
- A `Transform` takes any number of `Scale`, `UniformScale`, `Translate`,
  `XRotate`, `YRotate`, `ZRotate` (degrees), `Rotate { axis degrees }` and
  `Matrix4f { 16 values, column by column }` entries, followed by the object
  they apply to.

Mesh files are Wavefront OBJ files with triangular faces. Only `v` and `f`
lines are used. The file name is opened relative to the current directory.

Malformed input raises `pathtracer.scene_parser.SceneError`, a subclass of
`ValueError`.

## How surfaces are rendered

- `DIFF` surfaces get direct light from every light, with a shadow ray for
  each, and one cosine-weighted indirect bounce.
- `SPEC` surfaces are perfect mirrors.
- `REFR` surfaces mix reflection and refraction by Schlick's approximation.
  A ray that cannot refract is totally reflected.
- `METAL` surfaces reflect with a fixed fuzz of 0.8.
- Paths stop at depth 20. Beyond depth 5 they are ended by Russian roulette.

## Library use

```python
from pathtracer.scene_parser import load_scene, parse_scene
from pathtracer.render import render

scene = load_scene("scene.txt")    # or parse_scene(text)
image = render(scene, 8)           # 8 samples per pixel
image.save("preview.bmp")          # BMP for .bmp names, TGA otherwise
```

The package is split into these modules:

- `pathtracer.geometry` holds `vec3`, `normalized`, `randf`, `Ray` and `Hit`.
- `pathtracer.material` holds `Material` and `MaterialType`.
  `Material.shade` computes a Phong term, which the renderer itself does not
  use.
- `pathtracer.camera` holds `Camera` and `PerspectiveCamera`.
- `pathtracer.lights` holds `DirectionalLight`, `PointLight` and `AreaLight`.
- `pathtracer.objects` holds `Group`, `Plane`, `Sphere`, `Triangle`,
  `Transform` and `Mesh` (with `Mesh.from_obj`). It also has the 4x4 matrix
  helpers `scaling`, `uniform_scaling`, `translation`, `rotate_x`,
  `rotate_y`, `rotate_z` and `rotation`.
- `pathtracer.render` holds `trace_ray`, `render`, `reflect`, `refract`,
  `cosine_sample_hemisphere`, `clamp` and `main`.

`pathtracer.image.Image` also reads and writes binary PPM (P6) and
uncompressed 24-bit TGA files through `Image.load_ppm`, `Image.save_ppm`,
`Image.load_tga` and `Image.save_tga`.

## What it does not do

- Textures are not drawn. The `texture` entry of a material is read and
  ignored.
- The `reflectivity`, `refractivity` and `specularColor` settings are stored
  but do not affect rendering. Only the material type does.
- Rendering is single-threaded and brute force, with no acceleration
  structure.
- The command always renders with 32 samples per pixel and only writes BMP.
  Other sample counts and formats are available through `render` and `Image`.