"""Perspective camera for projecting scene points onto the screen."""

import math

import numpy as np


class PerspectiveCamera:
    """
    Pinhole camera on the z axis looking toward -z.

    Matches the usual vertical-fov perspective projection: points are
    visible when their depth lies in (near, far) and their normalized
    device coordinates fall inside [-1, 1].
    """

    def __init__(
        self,
        fov: float = 75.0,
        aspect: float = 16 / 9,
        near: float = 0.1,
        far: float = 1000.0,
        z: float = 5.0,
    ):
        self.fov = fov
        self.aspect = aspect
        self.near = near
        self.far = far
        self.position = np.array([0.0, 0.0, z])

    @property
    def focal(self) -> float:
        return 1.0 / math.tan(math.radians(self.fov) / 2.0)

    def set_aspect(self, width: int, height: int):
        self.aspect = width / max(height, 1)

    def project(
        self,
        points: np.ndarray,
        width: int,
        height: int,
    ) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        """
        Project world points to pixel coordinates.

        Args:
            points: (N, 3) world positions.
            width, height: Viewport size in pixels.

        Returns:
            (pixels, depths, visible) where pixels is (N, 2) float, depths is
            (N,) distance along the view axis and visible is an (N,) bool mask.
        """
        rel = np.asarray(points, dtype=np.float64) - self.position
        depth = -rel[:, 2]

        in_range = (depth > self.near) & (depth < self.far)
        safe_depth = np.where(in_range, depth, 1.0)

        f = self.focal
        ndc_x = (f / self.aspect) * rel[:, 0] / safe_depth
        ndc_y = f * rel[:, 1] / safe_depth

        visible = in_range & (np.abs(ndc_x) <= 1.0) & (np.abs(ndc_y) <= 1.0)

        pixels = np.empty((len(rel), 2))
        pixels[:, 0] = (ndc_x + 1.0) * 0.5 * width
        pixels[:, 1] = (1.0 - ndc_y) * 0.5 * height
        return pixels, depth, visible

    def point_radius(self, size: float, depth: np.ndarray, height: int) -> np.ndarray:
        """Screen radius of attenuated points of world size `size`."""
        safe_depth = np.maximum(depth, self.near)
        return np.maximum(1.0, size * (height / 2.0) / safe_depth / 2.0)
