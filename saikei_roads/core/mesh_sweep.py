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
Mesh Sweep Builder
==================

Sweeps a cross-section template mesh along curve samples.

Road mesh (welded):
    1. One ring (a full copy of the cross-section) per sample, placed at
       position + rotation * local_vertex. Triangle indices are offset by
       ring * vertex_count. UVs and normals are copied verbatim per ring;
       normals are NOT rotated with the ring.
    2. Seam welding: cross-section vertices with local Z > 0 are "rear",
       the rest "front". Each rear vertex of ring i is moved onto its mirror
       partner (the vertex equal to it reflected through Z = 0) on ring
       i + 1, or onto the same-index vertex of ring i + 1 when the template
       has no mirror partner.
    3. Indices are always uint32.

Prop mesh (not welded):
    Whole copies of a prop template at every `stride`-th sample.

Buffers are numpy arrays sized up front from the sample count.
"""

from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple

import numpy as np

from .logging_config import get_logger

logger = get_logger(__name__)

INDEX_DTYPE = np.uint32
MAX_VERTEX_COUNT = int(np.iinfo(INDEX_DTYPE).max) + 1


# =============================================================================
# Data Classes
# =============================================================================

@dataclass
class CrossSectionMesh:
    """
    Read-only template mesh swept along the road (or replicated as a prop).

    Attributes:
        vertices: (N, 3) local positions; the profile lies in the XY plane,
            Z separates the front (Z <= 0) and rear (Z > 0) faces
        triangles: Flat triangle index list (length divisible by 3)
        uvs: (N, 2) texture coordinates (zeros if omitted)
        normals: (N, 3) vertex normals (zeros if omitted)
        name: Optional template name
    """
    vertices: np.ndarray
    triangles: np.ndarray
    uvs: Optional[np.ndarray] = None
    normals: Optional[np.ndarray] = None
    name: str = ""

    def __post_init__(self):
        """Normalize buffers and validate shapes."""
        self.vertices = np.asarray(self.vertices, dtype=np.float64).reshape(-1, 3)
        self.triangles = np.asarray(self.triangles, dtype=np.int64).ravel()
        count = len(self.vertices)

        if len(self.triangles) % 3 != 0:
            raise ValueError(
                f"Triangle index count must be divisible by 3, got {len(self.triangles)}"
            )
        if len(self.triangles) and (self.triangles.min() < 0 or self.triangles.max() >= count):
            raise ValueError("Triangle index out of range for cross-section vertices")

        if self.uvs is None:
            self.uvs = np.zeros((count, 2), dtype=np.float64)
        self.uvs = np.asarray(self.uvs, dtype=np.float64).reshape(-1, 2)

        if self.normals is None:
            self.normals = np.zeros((count, 3), dtype=np.float64)
        self.normals = np.asarray(self.normals, dtype=np.float64).reshape(-1, 3)

        if len(self.uvs) != count or len(self.normals) != count:
            raise ValueError(
                f"UV ({len(self.uvs)}) and normal ({len(self.normals)}) counts "
                f"must match vertex count ({count})"
            )

    @property
    def vertex_count(self) -> int:
        return len(self.vertices)

    @property
    def index_count(self) -> int:
        return len(self.triangles)

    @property
    def triangle_count(self) -> int:
        return len(self.triangles) // 3

    @property
    def rear_mask(self) -> np.ndarray:
        """Boolean mask of rear vertices (local Z > 0)."""
        return self.vertices[:, 2] > 0.0

    def mirror_partners(self, tolerance: float = 0.0) -> np.ndarray:
        """
        Index of each rear vertex's mirror partner across Z = 0.

        Args:
            tolerance: Per-axis match tolerance. 0 requires an exact
                coordinate match.

        Returns:
            Int array of length N; -1 for front vertices and for rear
            vertices without a partner. The first match wins.
        """
        partners = np.full(self.vertex_count, -1, dtype=np.int64)
        rear = np.nonzero(self.rear_mask)[0]
        if not len(rear):
            return partners

        mirrored = self.vertices[rear] * np.array([1.0, 1.0, -1.0])
        if tolerance > 0.0:
            matches = np.all(
                np.abs(mirrored[:, None, :] - self.vertices[None, :, :]) <= tolerance, axis=2
            )
        else:
            matches = np.all(mirrored[:, None, :] == self.vertices[None, :, :], axis=2)

        found = matches.any(axis=1)
        partners[rear[found]] = np.argmax(matches[found], axis=1)
        return partners


@dataclass
class SweptMesh:
    """
    Output mesh buffers.

    Attributes:
        vertices: (V, 3) positions in the road's local space
        indices: Flat uint32 triangle indices
        uvs: (V, 2) texture coordinates
        normals: (V, 3) vertex normals
    """
    vertices: np.ndarray = field(default_factory=lambda: np.zeros((0, 3), dtype=np.float64))
    indices: np.ndarray = field(default_factory=lambda: np.zeros(0, dtype=INDEX_DTYPE))
    uvs: np.ndarray = field(default_factory=lambda: np.zeros((0, 2), dtype=np.float64))
    normals: np.ndarray = field(default_factory=lambda: np.zeros((0, 3), dtype=np.float64))

    @classmethod
    def empty(cls) -> "SweptMesh":
        return cls()

    @property
    def vertex_count(self) -> int:
        return len(self.vertices)

    @property
    def index_count(self) -> int:
        return len(self.indices)

    @property
    def triangle_count(self) -> int:
        return len(self.indices) // 3

    @property
    def triangles(self) -> np.ndarray:
        """Indices as (T, 3) rows."""
        return self.indices.reshape(-1, 3)

    @property
    def is_empty(self) -> bool:
        return self.vertex_count == 0


# =============================================================================
# Ring Placement Helpers
# =============================================================================

def _frames(samples: Sequence) -> Tuple[np.ndarray, np.ndarray]:
    """Sample positions (S, 3) and rotation matrices (S, 3, 3)."""
    positions = np.array([s.position.to_tuple() for s in samples], dtype=np.float64)
    rotations = np.array([s.rotation.to_matrix() for s in samples], dtype=np.float64)
    return positions, rotations


def _place_rings(vertices: np.ndarray, samples: Sequence) -> np.ndarray:
    """Transformed copies of `vertices` at every sample, shape (S, N, 3)."""
    positions, rotations = _frames(samples)
    return positions[:, None, :] + np.einsum("sij,nj->sni", rotations, vertices)


def _tile_indices(triangles: np.ndarray, copies: int, vertex_count: int) -> np.ndarray:
    """Triangle indices repeated `copies` times, each offset by one copy's vertices."""
    if copies * vertex_count > MAX_VERTEX_COUNT:
        raise ValueError(
            f"Mesh would need {copies * vertex_count} vertices, more than a "
            f"32-bit index buffer can address"
        )
    offsets = np.arange(copies, dtype=np.int64) * vertex_count
    return (triangles[None, :] + offsets[:, None]).ravel().astype(INDEX_DTYPE)


# =============================================================================
# Builders
# =============================================================================

def build_road_mesh(
    cross_section: Optional[CrossSectionMesh],
    samples: Sequence,
    mirror_tolerance: float = 0.0
) -> SweptMesh:
    """
    Sweep a cross-section along samples into one welded mesh.

    Args:
        cross_section: Template mesh; None gives an empty mesh
        samples: Curve samples (position + rotation)
        mirror_tolerance: Tolerance for finding rear/front mirror pairs.
            The default 0 requires exact coordinate matches.

    Returns:
        SweptMesh with len(samples) * vertex_count vertices and
        len(samples) * index_count indices
    """
    if cross_section is None or not samples:
        return SweptMesh.empty()

    count = len(samples)
    vertex_count = cross_section.vertex_count

    rings = _place_rings(cross_section.vertices, samples)

    # Weld against the unmodified rings so every ring i reads ring i + 1
    # as it was placed.
    welded = rings.copy()
    if count > 1:
        rear = np.nonzero(cross_section.rear_mask)[0]
        if len(rear):
            partners = cross_section.mirror_partners(mirror_tolerance)[rear]
            targets = np.where(partners >= 0, partners, rear)
            welded[:-1, rear] = rings[1:, targets]

            unmatched = int(np.count_nonzero(partners < 0))
            if unmatched:
                logger.debug(
                    "Cross-section '%s': %d rear vertices without mirror partner, "
                    "snapping to same index", cross_section.name, unmatched
                )

    mesh = SweptMesh(
        vertices=welded.reshape(-1, 3),
        indices=_tile_indices(cross_section.triangles, count, vertex_count),
        uvs=np.tile(cross_section.uvs, (count, 1)),
        normals=np.tile(cross_section.normals, (count, 1)),
    )

    logger.debug("Swept %d rings: %d vertices, %d triangles",
                 count, mesh.vertex_count, mesh.triangle_count)
    return mesh


def build_prop_mesh(
    prop_mesh: Optional[CrossSectionMesh],
    samples: Sequence,
    stride: int = 1
) -> SweptMesh:
    """
    Replicate a prop mesh at every `stride`-th sample.

    Copies are placed like road rings but are not welded. Index offsets
    advance per placed instance, not per sample.

    Args:
        prop_mesh: Template mesh; None gives an empty mesh
        samples: Candidate samples
        stride: Place an instance at samples 0, stride, 2*stride, ...
            (values below 1 are treated as 1)

    Returns:
        SweptMesh with one copy per placed instance
    """
    if prop_mesh is None or not samples:
        return SweptMesh.empty()

    chosen = list(samples)[::max(1, int(stride))]
    instances = len(chosen)
    rings = _place_rings(prop_mesh.vertices, chosen)

    mesh = SweptMesh(
        vertices=rings.reshape(-1, 3),
        indices=_tile_indices(prop_mesh.triangles, instances, prop_mesh.vertex_count),
        uvs=np.tile(prop_mesh.uvs, (instances, 1)),
        normals=np.tile(prop_mesh.normals, (instances, 1)),
    )

    logger.debug("Placed %d prop instances from %d samples", instances, len(samples))
    return mesh


__all__ = [
    "INDEX_DTYPE",
    "CrossSectionMesh",
    "SweptMesh",
    "build_road_mesh",
    "build_prop_mesh",
]
