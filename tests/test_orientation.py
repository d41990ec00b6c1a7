from __future__ import annotations

import numpy as np

from crawler.orientation import OrientationReference


def test_forward_points_horizontally_at_target() -> None:
    ref = OrientationReference()
    ref.update(np.array([1.0, 1.0, 0.5]), np.array([1.0, 6.0, 3.0]))

    assert np.allclose(ref.forward, [0.0, 1.0, 0.0], atol=1e-6)
    assert np.allclose(ref.position, [1.0, 1.0, 0.5])


def test_to_local_expresses_target_in_reference_frame() -> None:
    ref = OrientationReference()
    ref.update(np.array([0.0, 0.0, 0.5]), np.array([0.0, 4.0, 0.25]))

    local = ref.to_local(np.array([0.0, 4.0, 0.25]))
    assert np.allclose(local, [4.0, 0.0, -0.25], atol=1e-5)

    # Directions ignore the frame origin.
    assert np.allclose(ref.to_local_direction(np.array([0.0, 2.0, 0.0])), [2.0, 0.0, 0.0], atol=1e-5)
    assert np.allclose(ref.to_local_direction(np.array([1.0, 0.0, 0.0])), [0.0, -1.0, 0.0], atol=1e-5)


def test_target_directly_above_gives_identity_frame() -> None:
    ref = OrientationReference()
    ref.update(np.array([2.0, 3.0, 0.0]), np.array([2.0, 3.0, 9.0]))
    assert np.allclose(ref.forward, [1.0, 0.0, 0.0])


def test_forward_flips_once_target_is_overtaken() -> None:
    ref = OrientationReference()
    target = np.array([5.0, 0.0, 0.0])

    ref.update(np.array([4.9, 0.0, 0.0]), target)
    assert np.allclose(ref.forward, [1.0, 0.0, 0.0], atol=1e-6)

    ref.update(np.array([5.1, 0.0, 0.0]), target)
    assert np.allclose(ref.forward, [-1.0, 0.0, 0.0], atol=1e-6)
