"""
Particle-count change tests: permutation carry-over and state continuity.
"""

import numpy as np
import pytest

from permutation import create_permutation, carry_over_permutation
from particle import ParticleSystem, permute_target
from shapes import generate_cloud_target
from simulation import Simulation, PointerState
from constants import BASE_COLOR, SPAWN_JITTER


def is_bijection(perm, n):
    return perm.shape == (n,) and np.array_equal(np.sort(perm), np.arange(n))


@pytest.mark.parametrize("old_n,new_n", [(0, 5), (5, 0), (10, 10), (100, 150), (150, 100), (1, 1000)])
def test_carry_over_is_bijection(old_n, new_n):
    old = create_permutation(old_n, 7)
    assert is_bijection(carry_over_permutation(old, new_n), new_n)


def test_carry_over_keeps_valid_mappings_when_growing():
    old = create_permutation(100, 3)
    new = carry_over_permutation(old, 150)
    np.testing.assert_array_equal(new[:100], old)
    # New slots take the lowest unused indices in order.
    np.testing.assert_array_equal(new[100:], np.arange(100, 150))


def test_carry_over_repairs_out_of_range_and_duplicates():
    old = np.array([4, 4, 9, -1, 0, 2], dtype=np.int64)
    new = carry_over_permutation(old, 5)
    assert is_bijection(new, 5)
    assert new[0] == 4
    assert new[4] == 0


def test_particle_system_rejects_mismatched_target():
    with pytest.raises(ValueError):
        ParticleSystem(10, np.zeros(9, dtype=np.float32))


def test_particle_system_buffers():
    target = generate_cloud_target(500)
    particles = ParticleSystem(500, target)
    for buf in (particles.positions, particles.velocities, particles.colors,
                particles.home, particles.from_home, particles.to_home):
        assert buf.shape == (1500,)
        assert buf.dtype == np.float32
    assert is_bijection(particles.perm, 500)
    np.testing.assert_array_equal(particles.home, permute_target(target, particles.perm))


def test_resize_continuity_10000_to_15000():
    sim = Simulation({"particle_count": 10000, "mode": "cloud"})
    for t in range(1, 11):
        sim.step(1 / 60, t / 60, PointerState(0.5, 0.5, True))

    before = sim.particles
    positions = before.positions.copy()
    velocities = before.velocities.copy()
    colors = before.colors.copy()

    sim.set_particle_count(15000, now=1.0)
    after = sim.particles
    assert after is not before
    assert after.positions.shape == (45000,)

    assert after.positions[:30000].tobytes() == positions.tobytes()
    assert after.velocities[:30000].tobytes() == velocities.tobytes()
    assert after.colors[:30000].tobytes() == colors.tobytes()
    assert is_bijection(after.perm, 15000)

    # New particles spawn on the active target for the new count.
    target = sim.cache.get_or_create(("cloud",))
    assert len(target) == 45000
    expected = permute_target(target, after.perm)[30000:]
    assert np.max(np.abs(after.positions[30000:] - expected)) <= SPAWN_JITTER / 2 + 1e-6
    assert not after.velocities[30000:].any()
    np.testing.assert_allclose(after.colors[30000:].reshape(-1, 3), np.tile(BASE_COLOR, (5000, 1)))


def test_resize_freezes_carried_homes_before_new_morph():
    target = generate_cloud_target(200)
    particles = ParticleSystem(200, target)
    particles.positions += 1.0
    resized = particles.resized(300, generate_cloud_target(300))
    np.testing.assert_array_equal(resized.home[:600], particles.positions)
    np.testing.assert_array_equal(resized.from_home[:600], particles.positions)
    np.testing.assert_array_equal(resized.to_home[:600], particles.positions)


def test_resize_shrink_keeps_prefix():
    sim = Simulation({"particle_count": 3000, "mode": "heart"})
    sim.step(1 / 60, 0.1, PointerState())
    positions = sim.positions.copy()
    sim.set_particle_count(2000, now=0.5)
    assert sim.particle_count == 2000
    assert sim.positions.tobytes() == positions[:6000].tobytes()
    assert is_bijection(sim.particles.perm, 2000)


def test_resize_clears_cache_and_morphs_to_current_mode():
    sim = Simulation({"particle_count": 1000, "mode": "circle"})
    sim.set_mode("heart", now=0.1)
    sim.set_particle_count(1200, now=2.0)
    assert ("circle",) not in sim.cache
    heart = sim.cache.get_or_create(("heart",))
    assert len(heart) == 3600
    assert sim.morph.start == 2.0
    np.testing.assert_array_equal(sim.particles.to_home, permute_target(heart, sim.particles.perm))
    # The morph starts from the frozen carried positions.
    np.testing.assert_array_equal(sim.particles.from_home[:3000], sim.positions[:3000])


def test_resize_same_count_is_noop():
    sim = Simulation({"particle_count": 500})
    particles = sim.particles
    sim.set_particle_count(500, now=1.0)
    assert sim.particles is particles


def test_resize_rejects_negative_count():
    sim = Simulation({"particle_count": 10})
    with pytest.raises(ValueError):
        sim.set_particle_count(-5, now=0.0)


def test_snapshot_is_detached_copy():
    particles = ParticleSystem(50, generate_cloud_target(50))
    positions, colors = particles.snapshot()
    np.testing.assert_array_equal(positions, particles.positions)
    positions[:] = 0.0
    colors[:] = 0.0
    assert particles.positions.any()
    assert particles.colors.any()
