# -- Neighbor Search for SPH -- #

'''
Neighbor pair search for the SPH engine.

SpatialHashGrid divides space into uniform cubic cells of size equal
to the smoothing radius. Each particle can only interact with
particles in its own cell and the 26 surrounding cells, so pair
distance checks are restricted to those 27 cells instead of all N^2
combinations.

BruteForceSearch checks every pair. It is the reference the other
searches must agree with and is faster for very small particle counts.
KdTreeSearch delegates to scipy's cKDTree.

All searches return pairs sorted by (i, j), so the engine's
scatter-add order, and therefore its floating point result, does not
depend on which search produced the pairs.

References:
-----------
Ihmsen et al. (2011) -- Parallel neighbor search for SPH fluids
Teschner et al. (2003) -- Optimized spatial hashing for collision detection

Sean Bowman [02/12/2026]
'''

from __future__ import annotations

import itertools
from typing import Protocol

import numpy as np
from scipy.spatial import cKDTree

from PipeFlowSim.sph.errors import InvalidParameterError


#--------------------------------------------------------------------#
# -- Neighbor Search Protocol -- #
#--------------------------------------------------------------------#

class NeighborSearch(Protocol):
    '''Finds particle pairs closer than a radius.'''

    def build(self, positions: np.ndarray) -> None:
        '''Index the current particle positions.'''
        ...

    def queryPairs(self, radius: float) -> tuple[np.ndarray, np.ndarray]:
        '''
        Find all particle pairs closer than the given radius.

        Returns:
        --------
        tuple[np.ndarray, np.ndarray] :
            (iIndices, jIndices) where particles i and j are neighbors.
            Each pair appears once with i < j, sorted by (i, j).
        '''
        ...


def _emptyPairs() -> tuple[np.ndarray, np.ndarray]:
    return (np.array([], dtype=np.int64), np.array([], dtype=np.int64))


def _sortPairs(iAll: np.ndarray, jAll: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    '''Order pairs by i, then j.'''
    order = np.lexsort((jAll, iAll))
    return (iAll[order], jAll[order])


#--------------------------------------------------------------------#
# -- Brute Force Search -- #
#--------------------------------------------------------------------#

class BruteForceSearch:
    '''
    All-pairs neighbor search.

    Computes the full upper-triangle distance matrix, O(N^2) in time
    and memory. Intended for small systems and for validating
    the other searches.
    '''

    def __init__(self) -> None:
        self._positions: np.ndarray | None = None

    def build(self, positions: np.ndarray) -> None:
        '''
        Store particle positions for the next query.

        Parameters:
        -----------
        positions : np.ndarray
            Particle positions, shape (N, 3)
        '''
        self._positions = positions

    def queryPairs(self, radius: float) -> tuple[np.ndarray, np.ndarray]:
        '''
        Find all unique particle pairs (i, j) closer than radius.

        Parameters:
        -----------
        radius : float
            Search radius [m]

        Returns:
        --------
        tuple[np.ndarray, np.ndarray] :
            (iIndices, jIndices) arrays of neighbor pair indices
        '''
        if self._positions is None or len(self._positions) < 2:
            return _emptyPairs()

        positions = self._positions
        rowIdx, colIdx = np.triu_indices(len(positions), k=1)
        diff = positions[rowIdx] - positions[colIdx]
        distSq = np.sum(diff * diff, axis=1)

        withinRadius = distSq < radius * radius
        # triu_indices is already row-major, i.e. sorted by (i, j)
        return (
            rowIdx[withinRadius].astype(np.int64),
            colIdx[withinRadius].astype(np.int64),
        )


#--------------------------------------------------------------------#
# -- Spatial Hash Grid -- #
#--------------------------------------------------------------------#

class SpatialHashGrid:
    '''
    Uniform grid spatial hashing for 3D neighbor search.

    Cell size equals the smoothing radius. Particles are binned into
    cells using integer coordinates. For neighbor queries, only the
    27 cells around each occupied cell are searched.

    Distances are checked with one broadcast per (cell, neighbor cell)
    block, so the Python loop runs over occupied cells, not particles.

    Parameters:
    -----------
    cellSize : float
        Grid cell size [m], must be >= the query radius
    '''

    def __init__(self, cellSize: float) -> None:
        if not np.isfinite(cellSize) or cellSize <= 0.0:
            raise InvalidParameterError(f'cellSize must be finite and > 0, got {cellSize}')

        self._cellSize = cellSize
        self._positions: np.ndarray | None = None
        self._cells: dict[tuple, np.ndarray] = {}

        # 13 forward offsets; each adjacent cell pair is visited once
        self._halfStencil = self._computeHalfStencil()

    @property
    def cellSize(self) -> float:
        '''Grid cell edge length [m].'''
        return self._cellSize

    @property
    def nOccupiedCells(self) -> int:
        '''Number of cells holding at least one particle.'''
        return len(self._cells)

    def build(self, positions: np.ndarray) -> None:
        '''
        Bin particles by integer cell coordinate floor(x / cellSize).

        Negative coordinates are fine; cells are keyed by integer tuples
        rather than a fixed-size table.

        Parameters:
        -----------
        positions : np.ndarray
            Particle positions, shape (N, 3)
        '''
        self._positions = positions
        self._cells.clear()

        if len(positions) == 0:
            return

        # Integer cell per particle
        cellIndices = np.floor(positions / self._cellSize).astype(np.int64)

        # Group particle indices by cell: sort by cell key, split at key changes
        uniqueKeys, inverse = np.unique(cellIndices, axis=0, return_inverse=True)
        inverse = inverse.reshape(-1)
        order = np.argsort(inverse, kind='stable')
        splits = np.cumsum(np.bincount(inverse, minlength=len(uniqueKeys)))[:-1]

        for key, members in zip(uniqueKeys, np.split(order, splits)):
            self._cells[tuple(int(k) for k in key)] = members

    def queryPairs(self, radius: float) -> tuple[np.ndarray, np.ndarray]:
        '''
        Find all unique particle pairs (i, j) closer than radius.

        Pairs inside a cell come from its upper triangle; pairs across
        cells come from the 13 forward offsets only, so no pair is seen
        twice.

        Parameters:
        -----------
        radius : float
            Search radius [m], must not exceed the cell size

        Returns:
        --------
        tuple[np.ndarray, np.ndarray] :
            (iIndices, jIndices) arrays of neighbor pair indices

        Raises:
        -------
        InvalidParameterError : If radius is larger than the cell size
        '''
        if radius > self._cellSize:
            raise InvalidParameterError(
                f'Query radius {radius} exceeds grid cell size {self._cellSize}'
            )
        if self._positions is None or not self._cells:
            return _emptyPairs()

        radiusSq = radius * radius
        positions = self._positions
        iChunks: list[np.ndarray] = []
        jChunks: list[np.ndarray] = []

        for cellKey, cellParticles in self._cells.items():
            cellPos = positions[cellParticles]  # shape (nCell, 3)

            # --- Pairs within the same cell --- #
            nCell = len(cellParticles)
            if nCell > 1:
                diff = cellPos[:, np.newaxis, :] - cellPos[np.newaxis, :, :]  # (n, n, 3)
                distSq = np.sum(diff * diff, axis=2)  # (n, n)

                # Upper triangle mask (local i < j)
                rowIdx, colIdx = np.triu_indices(nCell, k=1)
                withinRadius = distSq[rowIdx, colIdx] < radiusSq
                if np.any(withinRadius):
                    iChunks.append(cellParticles[rowIdx[withinRadius]])
                    jChunks.append(cellParticles[colIdx[withinRadius]])

            # --- Pairs with forward neighbor cells --- #
            for offset in self._halfStencil:
                neighborKey = (
                    cellKey[0] + offset[0],
                    cellKey[1] + offset[1],
                    cellKey[2] + offset[2],
                )
                neighborParticles = self._cells.get(neighborKey)
                if neighborParticles is None:
                    continue

                neighborPos = positions[neighborParticles]  # (nB, 3)
                diff = cellPos[:, np.newaxis, :] - neighborPos[np.newaxis, :, :]  # (nA, nB, 3)
                distSq = np.sum(diff * diff, axis=2)  # (nA, nB)

                localI, localJ = np.where(distSq < radiusSq)
                if len(localI) > 0:
                    iChunks.append(cellParticles[localI])
                    jChunks.append(neighborParticles[localJ])

        if not iChunks:
            return _emptyPairs()

        iAll = np.concatenate(iChunks).astype(np.int64)
        jAll = np.concatenate(jChunks).astype(np.int64)

        # Ensure i < j for every pair
        lo = np.minimum(iAll, jAll)
        hi = np.maximum(iAll, jAll)

        return _sortPairs(lo, hi)

    def _computeHalfStencil(self) -> list[tuple[int, int, int]]:
        '''
        Forward offsets of the 3x3x3 neighborhood.

        Of the 26 non-self offsets in the 3x3x3 stencil, only the 13
        that are lexicographically greater than (0, 0, 0) are kept.
        Every unordered pair of adjacent cells is then visited from
        exactly one side.

        Returns:
        --------
        list[tuple[int, int, int]] : Half-stencil offsets
        '''
        return [offset for offset in itertools.product((-1, 0, 1), repeat=3) if offset > (0, 0, 0)]


#--------------------------------------------------------------------#
# -- KD-Tree Search -- #
#--------------------------------------------------------------------#

class KdTreeSearch:
    '''
    Neighbor search backed by scipy.spatial.cKDTree.

    The tree is queried with a slightly padded radius and the result
    is filtered with the same strict distance test the other searches use.
    '''

    def __init__(self) -> None:
        self._positions: np.ndarray | None = None
        self._tree: cKDTree | None = None

    def build(self, positions: np.ndarray) -> None:
        '''
        Build the KD-tree from particle positions.

        Parameters:
        -----------
        positions : np.ndarray
            Particle positions, shape (N, 3)
        '''
        self._positions = positions
        self._tree = cKDTree(positions) if len(positions) > 0 else None

    def queryPairs(self, radius: float) -> tuple[np.ndarray, np.ndarray]:
        '''
        Find all unique particle pairs (i, j) closer than radius.

        Parameters:
        -----------
        radius : float
            Search radius [m]

        Returns:
        --------
        tuple[np.ndarray, np.ndarray] :
            (iIndices, jIndices) arrays of neighbor pair indices
        '''
        if self._tree is None:
            return _emptyPairs()

        # Query slightly wider than radius so rounding inside the tree
        # cannot drop a pair that the strict test below would keep
        pairs = self._tree.query_pairs(radius * (1.0 + 1e-9), output_type='ndarray')
        if len(pairs) == 0:
            return _emptyPairs()

        iAll = pairs[:, 0].astype(np.int64)
        jAll = pairs[:, 1].astype(np.int64)

        diff = self._positions[iAll] - self._positions[jAll]
        strict = np.sum(diff * diff, axis=1) < radius * radius

        return _sortPairs(iAll[strict], jAll[strict])


#--------------------------------------------------------------------#
# -- Factory -- #
#--------------------------------------------------------------------#

def createNeighborSearch(searchType: str, cellSize: float) -> NeighborSearch:
    '''
    Create a neighbor search by type name.

    Parameters:
    -----------
    searchType : str
        'spatialHash', 'kdTree' or 'bruteForce'
    cellSize : float
        Cell size for the spatial hash grid [m]

    Returns:
    --------
    NeighborSearch : Neighbor search instance

    Raises:
    -------
    InvalidParameterError : If search type is unknown
    '''
    if searchType == 'spatialHash':
        return SpatialHashGrid(cellSize)
    elif searchType == 'kdTree':
        return KdTreeSearch()
    elif searchType == 'bruteForce':
        return BruteForceSearch()
    else:
        raise InvalidParameterError(f'Unknown neighbor search type: {searchType}')
