# ==============================================================================
# Saikei Roads - Procedural Road Meshes for Blender
# Copyright (c) 2025 Michael Yoder / Desert Springs Civil Engineering PLLC
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
# You should have received a copy of the GNU General Public License along with
# this program. If not, see <https://www.gnu.org/licenses/>.
#
# Primary Author: Michael Yoder
# Company: Desert Springs Civil Engineering PLLC
# ==============================================================================

"""
3D Vector Utilities for Road Geometry
======================================

Provides lightweight vector, rotation and placement classes for curve
evaluation and mesh sweeping. This avoids dependency on mathutils so the
core layer runs (and is tested) outside Blender.

Coordinates are Y-up: +Y is "up", local +Z is "forward" along the road.
"""

import math
import numbers
from typing import Tuple


class Vector3:
    """Lightweight 3D vector for curve and mesh calculations.

    Attributes:
        x: X coordinate
        y: Y coordinate (up)
        z: Z coordinate

    Example:
        >>> p0 = Vector3(0.0, 0.0, 0.0)
        >>> p1 = Vector3(3.0, 0.0, 4.0)
        >>> print(f"Length: {(p1 - p0).length:.2f}")
        Length: 5.00
    """

    __slots__ = ("x", "y", "z")

    def __init__(self, x=0.0, y=0.0, z=0.0):
        """Initialize vector from coordinates or a 3-item sequence.

        Args:
            x: X coordinate, or any (x, y, z) sequence (tuple, list,
                Vector3, numpy array)
            y: Y coordinate (ignored if x is a sequence)
            z: Z coordinate (ignored if x is a sequence)

        Raises:
            ValueError: If the sequence does not hold exactly 3 coordinates
        """
        if isinstance(x, numbers.Real):
            coords = (x, y, z)
        else:
            coords = tuple(x)
            if len(coords) != 3:
                raise ValueError(f"Vector3 needs 3 coordinates, got {len(coords)}")

        self.x = float(coords[0])
        self.y = float(coords[1])
        self.z = float(coords[2])

    def __sub__(self, other):
        return Vector3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __add__(self, other):
        return Vector3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __mul__(self, scalar):
        return Vector3(self.x * scalar, self.y * scalar, self.z * scalar)

    def __rmul__(self, scalar):
        return self.__mul__(scalar)

    def __truediv__(self, scalar):
        return Vector3(self.x / scalar, self.y / scalar, self.z / scalar)

    def __neg__(self):
        return Vector3(-self.x, -self.y, -self.z)

    def __getitem__(self, index):
        return (self.x, self.y, self.z)[index]

    def __iter__(self):
        yield self.x
        yield self.y
        yield self.z

    def __len__(self):
        return 3

    def __eq__(self, other):
        """Check equality with tolerance."""
        if not isinstance(other, Vector3):
            return False
        return (abs(self.x - other.x) < 1e-9 and
                abs(self.y - other.y) < 1e-9 and
                abs(self.z - other.z) < 1e-9)

    __hash__ = None

    def __repr__(self):
        return f"Vector3({self.x:.3f}, {self.y:.3f}, {self.z:.3f})"

    @property
    def length(self) -> float:
        """Vector magnitude (length)."""
        return math.sqrt(self.x**2 + self.y**2 + self.z**2)

    @property
    def length_squared(self) -> float:
        """Squared length (avoids sqrt for comparisons)."""
        return self.x**2 + self.y**2 + self.z**2

    def normalized(self) -> "Vector3":
        """Return unit vector in same direction.

        Returns:
            Unit vector, or zero vector if length is zero.
        """
        length = self.length
        if length > 0:
            return Vector3(self.x / length, self.y / length, self.z / length)
        return Vector3(0.0, 0.0, 0.0)

    def dot(self, other: "Vector3") -> float:
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: "Vector3") -> "Vector3":
        return Vector3(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x,
        )

    def flattened(self) -> "Vector3":
        """Return the vector with its vertical (Y) component removed."""
        return Vector3(self.x, 0.0, self.z)

    def distance_to(self, other: "Vector3") -> float:
        """Calculate distance to another point."""
        return (other - self).length

    def to_tuple(self) -> Tuple[float, float, float]:
        """Convert to (x, y, z) tuple."""
        return (self.x, self.y, self.z)


UP = Vector3(0.0, 1.0, 0.0)
DOWN = Vector3(0.0, -1.0, 0.0)
RIGHT = Vector3(1.0, 0.0, 0.0)
FORWARD = Vector3(0.0, 0.0, 1.0)


class Quaternion:
    """Unit quaternion describing an orientation.

    Stored as (w, x, y, z). Only the operations needed to orient
    cross-sections along a curve and to move between local and world
    space are provided.
    """

    __slots__ = ("w", "x", "y", "z")

    def __init__(self, w=1.0, x=0.0, y=0.0, z=0.0):
        self.w = float(w)
        self.x = float(x)
        self.y = float(y)
        self.z = float(z)

    @classmethod
    def identity(cls) -> "Quaternion":
        return cls(1.0, 0.0, 0.0, 0.0)

    @classmethod
    def from_axis_angle(cls, axis: Vector3, angle: float) -> "Quaternion":
        """Create a rotation of `angle` radians about `axis`."""
        axis = axis.normalized()
        half = angle * 0.5
        s = math.sin(half)
        return cls(math.cos(half), axis.x * s, axis.y * s, axis.z * s)

    @classmethod
    def from_matrix(cls, m) -> "Quaternion":
        """Create a quaternion from a row-major 3x3 rotation matrix."""
        m00, m01, m02 = m[0]
        m10, m11, m12 = m[1]
        m20, m21, m22 = m[2]
        trace = m00 + m11 + m22

        if trace > 0.0:
            s = math.sqrt(trace + 1.0) * 2.0
            return cls(0.25 * s, (m21 - m12) / s, (m02 - m20) / s, (m10 - m01) / s)
        if m00 > m11 and m00 > m22:
            s = math.sqrt(1.0 + m00 - m11 - m22) * 2.0
            return cls((m21 - m12) / s, 0.25 * s, (m01 + m10) / s, (m02 + m20) / s)
        if m11 > m22:
            s = math.sqrt(1.0 + m11 - m00 - m22) * 2.0
            return cls((m02 - m20) / s, (m01 + m10) / s, 0.25 * s, (m12 + m21) / s)
        s = math.sqrt(1.0 + m22 - m00 - m11) * 2.0
        return cls((m10 - m01) / s, (m02 + m20) / s, (m12 + m21) / s, 0.25 * s)

    @classmethod
    def look_rotation(cls, forward: Vector3, up: Vector3 = UP) -> "Quaternion":
        """Rotation that maps local +Z onto `forward` and keeps local +Y near `up`.

        Args:
            forward: Direction to face (need not be normalized)
            up: Reference up direction

        Returns:
            Orientation quaternion. A zero `forward` gives the identity;
            a `forward` parallel to `up` uses +Z as the reference instead.
        """
        f = forward.normalized()
        if f.length_squared == 0.0:
            return cls.identity()

        r = up.cross(f)
        if r.length_squared < 1e-12:
            r = FORWARD.cross(f)
        r = r.normalized()
        u = f.cross(r)

        # Columns are the rotated basis vectors (right, up, forward)
        return cls.from_matrix((
            (r.x, u.x, f.x),
            (r.y, u.y, f.y),
            (r.z, u.z, f.z),
        ))

    def to_matrix(self) -> Tuple[Tuple[float, float, float], ...]:
        """Row-major 3x3 rotation matrix."""
        w, x, y, z = self.w, self.x, self.y, self.z
        return (
            (1.0 - 2.0 * (y * y + z * z), 2.0 * (x * y - w * z), 2.0 * (x * z + w * y)),
            (2.0 * (x * y + w * z), 1.0 - 2.0 * (x * x + z * z), 2.0 * (y * z - w * x)),
            (2.0 * (x * z - w * y), 2.0 * (y * z + w * x), 1.0 - 2.0 * (x * x + y * y)),
        )

    def rotate(self, v: Vector3) -> Vector3:
        """Rotate a vector by this quaternion."""
        m = self.to_matrix()
        return Vector3(
            m[0][0] * v.x + m[0][1] * v.y + m[0][2] * v.z,
            m[1][0] * v.x + m[1][1] * v.y + m[1][2] * v.z,
            m[2][0] * v.x + m[2][1] * v.y + m[2][2] * v.z,
        )

    def inverse(self) -> "Quaternion":
        """Inverse rotation (conjugate of a unit quaternion)."""
        return Quaternion(self.w, -self.x, -self.y, -self.z)

    def __mul__(self, other):
        """Compose with another quaternion, or rotate a Vector3."""
        if isinstance(other, Vector3):
            return self.rotate(other)
        return Quaternion(
            self.w * other.w - self.x * other.x - self.y * other.y - self.z * other.z,
            self.w * other.x + self.x * other.w + self.y * other.z - self.z * other.y,
            self.w * other.y - self.x * other.z + self.y * other.w + self.z * other.x,
            self.w * other.z + self.x * other.y - self.y * other.x + self.z * other.w,
        )

    def __eq__(self, other):
        if not isinstance(other, Quaternion):
            return False
        return all(abs(a - b) < 1e-9 for a, b in zip(self.to_tuple(), other.to_tuple()))

    __hash__ = None

    def __repr__(self):
        return f"Quaternion({self.w:.4f}, {self.x:.4f}, {self.y:.4f}, {self.z:.4f})"

    def to_tuple(self) -> Tuple[float, float, float, float]:
        """Convert to (w, x, y, z) tuple."""
        return (self.w, self.x, self.y, self.z)


class Placement:
    """Location and rotation of a road object in world space.

    Control points live in the road's local space; raycasts and terrain
    lookups happen in world space.
    """

    def __init__(self, location: Vector3 = None, rotation: Quaternion = None):
        self.location = location if location is not None else Vector3()
        self.rotation = rotation if rotation is not None else Quaternion.identity()

    def to_world(self, point: Vector3) -> Vector3:
        return self.location + self.rotation.rotate(point)

    def to_local(self, point: Vector3) -> Vector3:
        return self.rotation.inverse().rotate(point - self.location)

    def to_world_direction(self, direction: Vector3) -> Vector3:
        return self.rotation.rotate(direction)

    def to_dict(self) -> dict:
        return {
            "location": list(self.location.to_tuple()),
            "rotation": list(self.rotation.to_tuple()),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Placement":
        return cls(
            location=Vector3(data.get("location", (0.0, 0.0, 0.0))),
            rotation=Quaternion(*data.get("rotation", (1.0, 0.0, 0.0, 0.0))),
        )

    def __repr__(self):
        return f"Placement({self.location!r}, {self.rotation!r})"


__all__ = ["Vector3", "Quaternion", "Placement", "UP", "DOWN", "RIGHT", "FORWARD"]
