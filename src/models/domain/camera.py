"""
Camera domain models (consumed by the render surface)
"""

import math
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class Vec3:
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __add__(self, other: "Vec3") -> "Vec3":
        return Vec3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: "Vec3") -> "Vec3":
        return Vec3(self.x - other.x, self.y - other.y, self.z - other.z)

    def scaled(self, factor: float) -> "Vec3":
        return Vec3(self.x * factor, self.y * factor, self.z * factor)

    def length(self) -> float:
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

    def distance_to(self, other: "Vec3") -> float:
        return (self - other).length()

    def normalized(self) -> "Vec3":
        length = self.length()
        if length == 0:
            return Vec3()
        return self.scaled(1.0 / length)

    def with_length(self, length: float) -> "Vec3":
        return self.normalized().scaled(length)

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)

    @classmethod
    def from_seq(cls, values) -> "Vec3":
        x, y, z = (float(v) for v in values)
        return cls(x, y, z)


@dataclass(frozen=True)
class CameraView:
    """Camera placement: eye position, orbit target, vertical field of view"""
    position: Vec3
    target: Vec3
    fov: float = 45.0


@dataclass(frozen=True)
class PanLimit:
    """Orbit target may not leave the sphere (origin, radius)"""
    enabled: bool
    radius: float
    origin: Vec3


@dataclass(frozen=True)
class Bounds:
    """Axis-aligned bounding box of the loaded model"""
    min: Vec3
    max: Vec3

    def is_empty(self) -> bool:
        return self.max.x < self.min.x or self.max.y < self.min.y or self.max.z < self.min.z

    def center(self) -> Vec3:
        return (self.min + self.max).scaled(0.5)

    def size(self) -> Vec3:
        return self.max - self.min
