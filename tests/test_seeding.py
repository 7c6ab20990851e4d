# -- Particle Seeding Tests -- #

'''
Lattice seeding: particle counts, containment, ordering, and rejection
of invalid regions and spacings.

Sean Bowman [02/12/2026]
'''

import math

import numpy as np
import pytest

from PipeFlowSim.sph.errors import InvalidParameterError
from PipeFlowSim.sph.particles import ParticleSystem
from PipeFlowSim.sph.protocols import BoundingBox


@pytest.mark.parametrize('spacing, expectedCount', [
    (0.2, 125),
    (0.25, 64),
    (0.3, 64),
    (0.1, 1000),
])
def testLatticeCountInUnitCube(unitBox, spacing, expectedCount):
    '''A cube of side L seeded at spacing s holds ceil(L / s)^3 particles.'''
    lattice = ParticleSystem.createLattice(unitBox, spacing, restDensity=1000.0)
    assert lattice.nParticles == expectedCount
    assert expectedCount == math.ceil(1.0 / spacing) ** 3


def testLatticeInsideHalfOpenRegion():
    region = BoundingBox((-0.5, 0.2, 1.0), (0.5, 0.7, 1.3))
    lattice = ParticleSystem.createLattice(region, 0.1, restDensity=1000.0)

    positions = lattice.positions
    assert np.all(positions >= region.minCorner)
    assert np.all(positions < region.maxCorner)
    assert lattice.nParticles == 10 * 5 * 3


def testLatticeOrderingXOutermost(unitBox):
    '''Row order runs z fastest, then y, then x.'''
    lattice = ParticleSystem.createLattice(unitBox, 0.25, restDensity=1000.0)
    positions = lattice.positions

    np.testing.assert_array_equal(positions[0], [0.0, 0.0, 0.0])
    np.testing.assert_array_equal(positions[1], [0.0, 0.0, 0.25])
    np.testing.assert_array_equal(positions[4], [0.0, 0.25, 0.0])
    np.testing.assert_array_equal(positions[16], [0.25, 0.0, 0.0])


def testLatticeInitialState(unitBox):
    lattice = ParticleSystem.createLattice(unitBox, 0.25, restDensity=998.0)
    assert np.all(lattice.velocities == 0.0)
    assert np.all(lattice.accelerations == 0.0)
    assert np.all(lattice.densities == 998.0)
    assert np.all(lattice.pressures == 0.0)


def testSeedParticlesAppends(makeEngine):
    engine = makeEngine()
    engine.seedParticles(BoundingBox((0.0, 0.0, 0.0), (0.5, 0.5, 0.5)), 0.25)
    engine.seedParticles(((0.5, 0.5, 0.5), (1.0, 1.0, 1.0)), 0.25)

    assert engine.nParticles == 16
    positions = engine.getPositions()
    np.testing.assert_array_equal(positions[0], [0.0, 0.0, 0.0])
    np.testing.assert_array_equal(positions[8], [0.5, 0.5, 0.5])


@pytest.mark.parametrize('spacing', [0.0, -0.1, float('nan'), float('inf'), float('-inf')])
def testInvalidSpacingRejected(makeEngine, unitBox, spacing):
    engine = makeEngine()
    engine.seedParticles(unitBox, 0.5)
    before = engine.getPositions()

    with pytest.raises(InvalidParameterError):
        engine.seedParticles(unitBox, spacing)

    np.testing.assert_array_equal(engine.getPositions(), before)


@pytest.mark.parametrize('minCorner, maxCorner', [
    ((1.0, 0.0, 0.0), (0.0, 1.0, 1.0)),    # inverted x
    ((0.0, 0.0, 0.0), (1.0, 0.0, 1.0)),    # zero extent in y
    ((0.0, 0.0, float('nan')), (1.0, 1.0, 1.0)),
    ((0.0, 0.0), (1.0, 1.0)),              # wrong dimension
])
def testInvalidRegionRejected(makeEngine, minCorner, maxCorner):
    engine = makeEngine()

    with pytest.raises(InvalidParameterError):
        engine.seedParticles((minCorner, maxCorner), 0.1)

    assert engine.nParticles == 0


def testBoundingBoxDoesNotAliasCallerArrays():
    lower = np.zeros(3)
    upper = np.ones(3)
    box = BoundingBox(lower, upper)

    lower[0] = 5.0
    assert box.minCorner[0] == 0.0
    with pytest.raises(ValueError):
        box.maxCorner[0] = 3.0


def testBoundingBoxGeometry():
    box = BoundingBox.fromSize((2.0, 0.4, 0.5), origin=(1.0, 0.0, -0.5))
    np.testing.assert_allclose(box.size, [2.0, 0.4, 0.5])
    np.testing.assert_allclose(box.center, [2.0, 0.2, -0.25])
    assert box.volume == pytest.approx(0.4)

    mask = box.contains(np.array([[1.0, 0.0, -0.5], [3.0, 0.4, 0.0], [3.1, 0.1, 0.0]]))
    assert mask.tolist() == [True, True, False]
