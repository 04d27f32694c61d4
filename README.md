# gamekit

Building blocks for small real-time games, written in Python with numpy.

## What is inside

- `gamekit.chunks` reads and writes tagged binary chunks. A chunk is a four-byte
  magic tag, a four-byte native-endian size, and then packed records.
  `read_chunk(stream, magic, element)` and `write_chunk(magic, items, stream, element)`
  take an optional `struct` format (or `struct.Struct`) for the records. Without one,
  the payload is plain bytes. When reading, a bad header, a wrong magic tag, a size
  that does not divide evenly, or short data raises `ChunkError`.
- `gamekit.connection` provides TCP connections polled with `select`.
  - `Server(port)` listens on a port. Its `port` property gives the bound port.
  - `Client(host, port)` connects to a server and holds one `connection`.
  - Both have `poll(on_event, timeout)`, which calls your callback with the
    `Connection` and a `ConnectionEvent` (`OPEN`, `RECV`, `CLOSE`).
  - Bytes queued with `Connection.send_raw` or added to `send_buffer` are written out
    while polling. Bytes that arrive are appended to `recv_buffer`.
  - Both classes work as context managers and close their sockets on exit.
- `gamekit.bone_animation` loads skinned meshes with a bone hierarchy and named
  animations.
  - Load with `BoneAnimation.load(path)` or `BoneAnimation.read(stream)`. Bad data
    raises `ValueError`.
  - `lookup` finds an animation by name and raises `KeyError` if it is missing.
    `get_frame` returns the pose of every bone in one frame. `bounding_box` gives the
    mesh's corners.
  - `BoneAnimationPlayer` plays an animation either once or in a loop (`LoopOrOnce`).
    `update(elapsed)` advances it, and `done()` reports when a play-once animation
    has finished.
  - `bone_matrices()` returns the skinning matrices for the current frame as an array
    of shape `(bones, 3, 4)`.
- `gamekit.draw_lines` provides `DrawLines`, which collects coloured line segments
  (`draw`) and wireframe boxes (`draw_box`) as `LineVertex` records in `attribs`,
  together with a `world_to_clip` matrix.
- `gamekit.sprite_batch` provides `SpriteBatch`.
  - It builds the view-to-clip matrix (`to_clip`) in one of two `AlignMode`s:
    `PIXEL_PERFECT` or `SLOPPY`.
  - `draw` turns a sprite into two textured, tinted triangles of `SpriteVertex`.
  - A sprite is any object with `min_px`, `max_px` and `anchor_px`.
- `gamekit.orbit_camera` provides `OrbitCamera`, a z-up trackball camera.
  - It is controlled with `begin_drag`, `tumble`, `pan` and `dolly`.
  - `rotation()` and `position()` report where it is looking from.
  - The module also has `roughness_for(name, y)`, the demo scene's material
    roughness rule.
- `gamekit.lighting` describes scene lights.
  - `Light` holds a `LightType`, an energy, a 4x4 transform and a spot angle.
  - `light_uniforms(lights, max_lights)` packs the first `max_lights` lights
    (40 by default) into `LightUniforms` arrays.
  - `light_shader_params(light)` gives the shader type code and cutoff for a light.
- `gamekit.light_volumes` supports deferred lighting.
  - `light_volume(light)` returns a `LightVolume`. It holds the bounding
    `VolumeMesh` and the scaled transform for drawing that light.
  - `view_for_key(key, current)` maps the keys `1`–`4` to a `BufferView`.

## Examples

```python
import io
from gamekit.chunks import read_chunk, write_chunk

buf = io.BytesIO()
write_chunk("pts0", [(0.0, 1.0), (2.0, 3.0)], buf, "2f")
buf.seek(0)
points = read_chunk(buf, "pts0", "2f")   # [(0.0, 1.0), (2.0, 3.0)]
```

```python
from gamekit.connection import ConnectionEvent, Server

def echo(connection, event):
    if event is ConnectionEvent.RECV:
        data = bytes(connection.recv_buffer)
        connection.recv_buffer.clear()
        connection.send_raw(data)

with Server("1337") as server:
    while True:
        server.poll(echo, 1.0)
```

## What it does not do

gamekit computes data and does not put anything on screen. It has:

- no OpenGL calls, shaders or textures;
- no window or input event loop;
- no game client or server program and no command-line entry point.

Vertex lists, matrices and uniform values are returned for your own renderer to
upload. Key and mouse handling is left to the caller, who passes the results to the
camera and view helpers.

## Installing and testing

```
pip install .
pip install ".[test]"
pytest
```