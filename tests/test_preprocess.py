"""
Tests for viewer-side world preprocessing.
"""

import numpy as np
import pytest

from motion_fk.acclaim import Segment, static_pose
from motion_fk.preprocess import (
    PreprocessConfig,
    apply_world_transform,
    build_axis_matrix,
    estimate_scale_factor_auto,
    load_axis_presets,
    preprocess,
    segment_points,
    transform_positions,
)


class TestAxisPresets:

    def test_presets_load(self):
        presets = load_axis_presets()
        assert "none" in presets
        assert "y_up_to_z_up" in presets

    def test_flips(self):
        m = build_axis_matrix(np.eye(3), True, False, True)
        assert np.allclose(m, np.diag([-1.0, 1.0, -1.0]))

    def test_bad_matrix_falls_back_to_identity(self):
        assert np.allclose(build_axis_matrix(np.zeros((2, 2)), False, False, False), np.eye(3))

    def test_unknown_preset_is_identity(self, plain_skeleton):
        state = preprocess(plain_skeleton, PreprocessConfig(axis_preset_id="nope", scale_mode="none"))
        assert np.allclose(state.axis_matrix, np.eye(3))


class TestScale:

    def test_factor(self, plain_skeleton):
        state = preprocess(plain_skeleton, PreprocessConfig(scale_mode="factor", scale_factor=2.5))
        assert state.scale_factor == 2.5

    def test_none(self, plain_skeleton):
        state = preprocess(plain_skeleton, PreprocessConfig(scale_mode="none", scale_factor=2.5))
        assert state.scale_factor == 1.0

    def test_auto_small_skeleton_kept(self, plain_skeleton):
        assert estimate_scale_factor_auto(plain_skeleton) == pytest.approx(1.0)

    def test_auto_empty_skeleton(self):
        from motion_fk.acclaim import Skeleton

        assert estimate_scale_factor_auto(Skeleton()) == 1.0


class TestTransformPositions:

    def test_segment_points(self, plain_skeleton):
        pose = static_pose(plain_skeleton)
        pts = segment_points(pose)
        assert pts.shape == (2 * len(pose), 3)
        assert np.allclose(pts[0], pose["hips"].start)
        assert np.allclose(pts[1], pose["hips"].end)

    def test_segment_points_empty(self):
        assert segment_points({}).shape == (0, 3)

    def test_apply_world_transform(self):
        pts = np.array([[0.0, 1.0, 0.0]])
        m = np.array([[1, 0, 0], [0, 0, -1], [0, 1, 0]], dtype=float)
        assert np.allclose(apply_world_transform(pts, m, 2.0), [[0.0, 0.0, 2.0]])

    def test_transform_positions_new_mapping(self, plain_skeleton):
        pose = static_pose(plain_skeleton)
        cfg = PreprocessConfig(scale_mode="factor", scale_factor=10.0, axis_preset_id="none")
        out = transform_positions(pose, preprocess(plain_skeleton, cfg))
        assert out is not pose
        assert list(out) == list(pose)
        assert isinstance(out["hips"], Segment)
        assert np.allclose(out["hips"].end, np.multiply(pose["hips"].end, 10.0))
        assert pose["hips"].end == (1.0, 4.0, 3.0)
