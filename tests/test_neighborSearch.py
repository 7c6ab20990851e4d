# -- Neighbor Search Tests -- #

'''
Spatial hash, KD-tree and brute force searches must report the same
pairs, each once with i < j, sorted by (i, j).

Sean Bowman [02/12/2026]
'''

import numpy as np
import pytest

from PipeFlowSim.sph.errors import InvalidParameterError
from PipeFlowSim.sph.neighborSearch import (
    BruteForceSearch,
    KdTreeSearch,
    SpatialHashGrid,
    createNeighborSearch,
)


RADIUS = 0.1


def _queryAll(positions, radius=RADIUS):
    results = {}
    for name, search in (
        ('bruteForce', BruteForceSearch()),
        ('spatialHash', SpatialHashGrid(radius)),
        ('kdTree', KdTreeSearch()),
    ):
        search.build(positions)
        results[name] = search.queryPairs(radius)
    return results


@pytest.mark.parametrize('seed', [0, 1, 2])
def testSearchesAgreeOnRandomCloud(seed):
    rng = np.random.default_rng(seed)
    positions = rng.uniform(-0.3, 0.4, size=(400, 3))

    results = _queryAll(positions)
    iRef, jRef = results['bruteForce']
    assert len(iRef) > 0, 'Random cloud should contain neighbor pairs'

    for name in ('spatialHash', 'kdTree'):
        iIdx, jIdx = results[name]
        np.testing.assert_array_equal(iIdx, iRef, err_msg=f'{name} i indices differ')
        np.testing.assert_array_equal(jIdx, jRef, err_msg=f'{name} j indices differ')


def testPairsAreUniqueOrderedAndSorted():
    rng = np.random.default_rng(7)
    positions = rng.uniform(0.0, 0.3, size=(200, 3))

    for name, (iIdx, jIdx) in _queryAll(positions).items():
        assert np.all(iIdx < jIdx), f'{name}: pair with i >= j'
        keys = iIdx * len(positions) + jIdx
        assert np.all(np.diff(keys) > 0), f'{name}: pairs not strictly sorted by (i, j)'


def testPairsAreWithinRadius():
    rng = np.random.default_rng(3)
    positions = rng.uniform(0.0, 0.5, size=(300, 3))

    iIdx, jIdx = _queryAll(positions)['spatialHash']
    dist = np.linalg.norm(positions[iIdx] - positions[jIdx], axis=1)
    assert np.all(dist < RADIUS)


def testPairAtExactlyRadiusExcluded():
    '''Neighbors are strictly closer than the radius.'''
    positions = np.array([[0.0, 0.0, 0.0], [RADIUS, 0.0, 0.0], [0.0, 0.05, 0.0]])

    for name, (iIdx, jIdx) in _queryAll(positions).items():
        assert list(zip(iIdx.tolist(), jIdx.tolist())) == [(0, 2)], name


def testLatticeNeighborCount():
    '''Interior lattice particle at spacing 0.4 h sees every offset with |d| < h.'''
    spacing = 0.04
    axis = np.arange(7) * spacing
    xx, yy, zz = np.meshgrid(axis, axis, axis, indexing='ij')
    positions = np.column_stack([xx.ravel(), yy.ravel(), zz.ravel()])

    grid = SpatialHashGrid(RADIUS)
    grid.build(positions)
    iIdx, jIdx = grid.queryPairs(RADIUS)

    counts = np.bincount(np.concatenate([iIdx, jIdx]), minlength=len(positions))
    center = 3 * 49 + 3 * 7 + 3
    # Integer offsets with a^2 + b^2 + c^2 in {1, ..., 6}: 6 + 12 + 8 + 6 + 24 + 24
    assert counts[center] == 80


def testEmptyAndSingleParticle():
    for positions in (np.zeros((0, 3)), np.array([[0.5, 0.5, 0.5]])):
        for name, (iIdx, jIdx) in _queryAll(positions).items():
            assert len(iIdx) == 0 and len(jIdx) == 0, name


def testGridRejectsRadiusLargerThanCell():
    grid = SpatialHashGrid(0.1)
    grid.build(np.zeros((2, 3)))
    with pytest.raises(InvalidParameterError):
        grid.queryPairs(0.2)


@pytest.mark.parametrize('cellSize', [0.0, -1.0, float('nan')])
def testGridRejectsInvalidCellSize(cellSize):
    with pytest.raises(InvalidParameterError):
        SpatialHashGrid(cellSize)


def testGridOccupiedCells():
    grid = SpatialHashGrid(0.1)
    grid.build(np.array([[0.01, 0.01, 0.01], [0.02, 0.02, 0.02], [0.15, 0.01, 0.01]]))
    assert grid.nOccupiedCells == 2
    assert grid.cellSize == 0.1


def testCreateNeighborSearch():
    assert isinstance(createNeighborSearch('spatialHash', 0.1), SpatialHashGrid)
    assert isinstance(createNeighborSearch('kdTree', 0.1), KdTreeSearch)
    assert isinstance(createNeighborSearch('bruteForce', 0.1), BruteForceSearch)
    with pytest.raises(InvalidParameterError):
        createNeighborSearch('octree', 0.1)
