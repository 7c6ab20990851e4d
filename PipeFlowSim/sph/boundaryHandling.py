# -- SPH Boundary Conditions -- #

'''
Reflective wall enforcement for an axis-aligned container.

Particles that leave the bounding box are clamped back onto the
violated wall and the velocity component normal to that wall is
reversed and damped. Each axis is treated independently, so a
particle past a corner is clamped and damped on every violated axis.
There is no tangential friction.

Sean Bowman [02/12/2026]
'''

from __future__ import annotations

import numpy as np

from PipeFlowSim import constants as const
from PipeFlowSim.sph.errors import InvalidParameterError
from PipeFlowSim.sph.particles import ParticleSystem
from PipeFlowSim.sph.protocols import BoundingBox


class BoxBoundary:
    '''
    Rigid, energy-dissipating walls on the faces of a bounding box.

    Parameters:
    -----------
    bounds : BoundingBox
        Container volume [m]
    damping : float
        Fraction of the wall-normal speed kept after a collision,
        in [0, 1] (default 0.5): v_n' = -damping * v_n
    '''

    def __init__(self, bounds: BoundingBox, damping: float = const.wallDamping) -> None:
        if not np.isfinite(damping) or not 0.0 <= damping <= 1.0:
            raise InvalidParameterError(f'damping must be in [0, 1], got {damping}')

        self._bounds = bounds
        self._damping = damping

    @property
    def bounds(self) -> BoundingBox:
        '''Container volume.'''
        return self._bounds

    @property
    def damping(self) -> float:
        '''Wall-normal velocity retention factor.'''
        return self._damping

    def enforceBoundary(self, particles: ParticleSystem) -> int:
        '''
        Clamp particles into the box and reflect their outward velocity.

        Parameters:
        -----------
        particles : ParticleSystem
            The particle system to enforce boundaries on (modified in place)

        Returns:
        --------
        int : Number of wall collisions resolved (one per particle per axis)
        '''
        positions = particles.positions
        velocities = particles.velocities
        lower = self._bounds.minCorner
        upper = self._bounds.maxCorner
        nCollisions = 0

        for d in range(particles.dimensions):
            # Lower wall
            belowMin = positions[:, d] < lower[d]
            positions[belowMin, d] = lower[d]
            velocities[belowMin, d] *= -self._damping

            # Upper wall
            aboveMax = positions[:, d] > upper[d]
            positions[aboveMax, d] = upper[d]
            velocities[aboveMax, d] *= -self._damping

            nCollisions += int(np.count_nonzero(belowMin) + np.count_nonzero(aboveMax))

        return nCollisions
