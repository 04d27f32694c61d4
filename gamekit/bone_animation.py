"""Skinned meshes with a bone hierarchy and baked animation frames.

The file format is a sequence of chunks (see :mod:`gamekit.chunks`):

``str0``
    raw bytes that bone and animation names index into;
``bon0``
    bones: name begin/end, parent index (``0xFFFFFFFF`` for a root) and a
    column-major 4x3 inverse bind matrix;
``frm0``
    pose bones (position, rotation quaternion stored x, y, z, w, scale),
    one per bone for every frame;
``act0``
    animations: name begin/end and a half-open frame range;
``msh0``
    skinned vertices.
"""

from __future__ import annotations

import enum
import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, List, Optional, Tuple, Union

import numpy as np

from .chunks import read_chunk

__all__ = [
    "NO_PARENT",
    "Bone",
    "PoseBone",
    "Animation",
    "SkinnedVertex",
    "BoneAnimation",
    "LoopOrOnce",
    "BoneAnimationPlayer",
]

log = logging.getLogger(__name__)

NO_PARENT = 0xFFFFFFFF

_BONE_FORMAT = "3I12f"
_POSE_FORMAT = "3f4f3f"
_ANIMATION_FORMAT = "4I"
_VERTEX_FORMAT = "3f3f4B2f4f4I"

Vec3 = Tuple[float, float, float]
Vec4 = Tuple[float, float, float, float]


def _mat4x3(values) -> np.ndarray:
    """Build a 3x4 matrix from twelve column-major floats."""
    return np.array(values, dtype=float).reshape(4, 3).T.copy()


def _homogeneous(mat3x4: np.ndarray) -> np.ndarray:
    """Extend a 3x4 affine matrix to 4x4."""
    return np.vstack((mat3x4, (0.0, 0.0, 0.0, 1.0)))


def _quat_to_mat3(rotation: Vec4) -> np.ndarray:
    x, y, z, w = rotation
    return np.array(
        [
            [1 - 2 * (y * y + z * z), 2 * (x * y - w * z), 2 * (x * z + w * y)],
            [2 * (x * y + w * z), 1 - 2 * (x * x + z * z), 2 * (y * z - w * x)],
            [2 * (x * z - w * y), 2 * (y * z + w * x), 1 - 2 * (x * x + y * y)],
        ],
        dtype=float,
    )


@dataclass
class Bone:
    """A skeleton bone; ``parent`` is None for a root."""

    name: str
    parent: Optional[int]
    inverse_bind_matrix: np.ndarray


@dataclass(frozen=True)
class PoseBone:
    """One bone's local transform in one frame; rotation is (x, y, z, w)."""

    position: Vec3
    rotation: Vec4
    scale: Vec3


@dataclass(frozen=True)
class Animation:
    """A named half-open range of frames ``[begin, end)``."""

    name: str
    begin: int = 0
    end: int = 0


@dataclass(frozen=True)
class SkinnedVertex:
    position: Vec3
    normal: Vec3
    color: Tuple[int, int, int, int]
    tex_coord: Tuple[float, float]
    bone_weights: Vec4
    bone_indices: Tuple[int, int, int, int]


@dataclass
class BoneAnimation:
    """A skinned mesh, its skeleton and the animations defined on it."""

    bones: List[Bone] = field(default_factory=list)
    frame_bones: List[PoseBone] = field(default_factory=list)
    animations: List[Animation] = field(default_factory=list)
    vertices: List[SkinnedVertex] = field(default_factory=list)

    @classmethod
    def read(cls, stream: BinaryIO) -> "BoneAnimation":
        """Read an animation from a binary stream; raises ValueError on bad data."""
        strings = read_chunk(stream, "str0")

        def name_of(begin: int, end: int, what: str) -> str:
            if not (begin <= end <= len(strings)):
                raise ValueError(f"{what} has out-of-range name begin/end")
            return strings[begin:end].decode("utf-8", errors="surrogateescape")

        bones: List[Bone] = []
        for record in read_chunk(stream, "bon0", _BONE_FORMAT):
            begin, end, parent = record[:3]
            name = name_of(begin, end, "bone")
            if not (parent == NO_PARENT or parent < len(bones)):
                raise ValueError("bone has invalid parent")
            bones.append(
                Bone(
                    name=name,
                    parent=None if parent == NO_PARENT else parent,
                    inverse_bind_matrix=_mat4x3(record[3:]),
                )
            )

        frame_bones = [
            PoseBone(tuple(r[0:3]), tuple(r[3:7]), tuple(r[7:10]))
            for r in read_chunk(stream, "frm0", _POSE_FORMAT)
        ]
        if not bones:
            raise ValueError("animation has no bones")
        if len(frame_bones) % len(bones) != 0:
            raise ValueError("frame bones is not divisible by bones")
        frames = len(frame_bones) // len(bones)

        animations: List[Animation] = []
        for name_begin, name_end, begin, end in read_chunk(stream, "act0", _ANIMATION_FORMAT):
            name = name_of(name_begin, name_end, "animation")
            if not (begin <= end <= frames):
                raise ValueError("animation has out-of-range frames begin/end")
            animations.append(Animation(name, begin, end))

        vertices: List[SkinnedVertex] = []
        for r in read_chunk(stream, "msh0", _VERTEX_FORMAT):
            indices = tuple(r[16:20])
            if any(i >= len(bones) for i in indices):
                raise ValueError("animation mesh has out of range vertex index")
            vertices.append(
                SkinnedVertex(
                    position=tuple(r[0:3]),
                    normal=tuple(r[3:6]),
                    color=tuple(r[6:10]),
                    tex_coord=tuple(r[10:12]),
                    bone_weights=tuple(r[12:16]),
                    bone_indices=indices,
                )
            )

        result = cls(bones, frame_bones, animations, vertices)
        lo, hi = result.bounding_box()
        log.info(
            "bounding box of animation mesh is [%g,%g]x[%g,%g]x[%g,%g]",
            lo[0], hi[0], lo[1], hi[1], lo[2], hi[2],
        )
        return result

    @classmethod
    def load(cls, path: Union[str, Path]) -> "BoneAnimation":
        """Read an animation from a file."""
        log.info("Reading bone-based animation from '%s'.", path)
        with open(path, "rb") as stream:
            return cls.read(stream)

    @property
    def frame_count(self) -> int:
        return len(self.frame_bones) // len(self.bones) if self.bones else 0

    def lookup(self, name: str) -> Animation:
        """Return the animation called ``name``; raises KeyError if absent."""
        for animation in self.animations:
            if animation.name == name:
                return animation
        raise KeyError(f"Animation with name '{name}' does not exist.")

    def get_frame(self, frame: int) -> List[PoseBone]:
        """Return the pose of every bone in ``frame``."""
        if not 0 <= frame < self.frame_count:
            raise IndexError(f"frame {frame} out of range")
        count = len(self.bones)
        return self.frame_bones[frame * count:(frame + 1) * count]

    def bounding_box(self) -> Tuple[np.ndarray, np.ndarray]:
        """Return (min, max) corners of the mesh's vertex positions."""
        lo = np.full(3, math.inf)
        hi = np.full(3, -math.inf)
        for vertex in self.vertices:
            lo = np.minimum(lo, vertex.position)
            hi = np.maximum(hi, vertex.position)
        return lo, hi


class LoopOrOnce(enum.Enum):
    ONCE = "once"
    LOOP = "loop"


def _span(anim: Animation) -> int:
    # unsigned 32-bit arithmetic, as stored in the file
    return (anim.end - 1 - anim.begin) % (1 << 32)


class BoneAnimationPlayer:
    """Plays one animation, tracking a position from 0.0 (start) to 1.0 (end)."""

    def __init__(
        self,
        banims: BoneAnimation,
        anim: Animation,
        loop_or_once: LoopOrOnce = LoopOrOnce.ONCE,
        speed: float = 1.0,
    ) -> None:
        self.banims = banims
        self.anim = anim
        self.loop_or_once = loop_or_once
        self.position = 0.0
        self.position_per_second = 1.0
        self.set_speed(speed)

    def set_speed(self, speed: float, fps: float = 24.0) -> None:
        duration = _span(self.anim) / fps
        if duration == 0:
            self.position_per_second = math.copysign(math.inf, speed) if speed else math.nan
        else:
            self.position_per_second = speed / duration

    def update(self, elapsed: float) -> None:
        self.position += elapsed * self.position_per_second
        if self.loop_or_once is LoopOrOnce.LOOP:
            self.position -= math.floor(self.position)
        else:
            self.position = max(min(self.position, 1.0), 0.0)

    def bone_matrices(self) -> np.ndarray:
        """Return the skinning matrices, shape (bones, 3, 4), for the current frame."""
        anim = self.anim
        if anim.end <= anim.begin:
            raise ValueError("animation has no frames")
        frame = math.floor(_span(anim) * self.position + anim.begin)
        frame = min(max(frame, anim.begin), anim.end - 1)
        pose = self.banims.get_frame(frame)

        count = len(self.banims.bones)
        to_object = np.empty((count, 3, 4))
        result = np.empty((count, 3, 4))
        for b, (pose_bone, bone) in enumerate(zip(pose, self.banims.bones)):
            rs = _quat_to_mat3(pose_bone.rotation) * np.asarray(pose_bone.scale, dtype=float)
            trs = np.column_stack((rs, pose_bone.position))
            if bone.parent is None:
                # root position is cleared
                to_object[b] = np.eye(3, 4)
            else:
                to_object[b] = to_object[bone.parent] @ _homogeneous(trs)
            result[b] = to_object[b] @ _homogeneous(bone.inverse_bind_matrix)
        return result

    def done(self) -> bool:
        return self.loop_or_once is LoopOrOnce.ONCE and self.position >= 1.0