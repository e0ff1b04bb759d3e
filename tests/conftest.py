"""Pytest configuration for pathbox tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield
    # Note: We don't call ti.reset() here; scenes and cameras own their
    # fields, so nothing global needs clearing between tests


@pytest.fixture
def white_material():
    """Plain non-emissive white diffuse material."""
    from pathbox.materials.surface import Material

    return Material(base_color=(1.0, 1.0, 1.0))


@pytest.fixture
def mirror_material():
    """Perfect mirror: always specular, fully smooth, no emission."""
    from pathbox.materials.surface import Material

    return Material(base_color=(1.0, 1.0, 1.0), smoothness=1.0, glossiness=1.0)
