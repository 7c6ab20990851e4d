# -- SPH Particle System -- #

'''
Dataclass representing the SPH particle system state.

Stores positions, velocities, accelerations, densities and pressures
as contiguous NumPy arrays for vectorized operations. Every particle
carries unit mass, so no mass array is stored: densities are plain
kernel sums and accumulated forces are velocity increments per unit
time.

Sean Bowman [02/12/2026]
'''

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from PipeFlowSim import constants as const
from PipeFlowSim.sph.errors import InvalidParameterError
from PipeFlowSim.sph.protocols import BoundingBox


@dataclass
class ParticleSystem:
    '''
    SPH particle system state.

    All arrays have shape (nParticles, 3) for vector quantities and
    (nParticles,) for scalar quantities. Row i of every array belongs
    to particle i; seeding order defines the row order.

    Parameters:
    -----------
    positions : np.ndarray
        Particle positions [m], shape (N, 3)
    velocities : np.ndarray
        Particle velocities [m/s], shape (N, 3)
    accelerations : np.ndarray
        Velocity increment per unit time from the last force pass
        [m/s^2], shape (N, 3)
    densities : np.ndarray
        Particle densities [kg/m^3], shape (N,)
    pressures : np.ndarray
        Particle pressures [Pa], shape (N,)
    '''

    positions: np.ndarray
    velocities: np.ndarray
    accelerations: np.ndarray
    densities: np.ndarray
    pressures: np.ndarray

    @property
    def nParticles(self) -> int:
        '''Total number of particles.'''
        return self.positions.shape[0]

    @property
    def dimensions(self) -> int:
        '''Number of spatial dimensions.'''
        return self.positions.shape[1]

    def kineticEnergy(self) -> float:
        '''
        Total kinetic energy with unit particle mass.

        KE = (1/2) * sum_i |v_i|^2

        Returns:
        --------
        float : Kinetic energy [m^2/s^2 per unit mass]
        '''
        return 0.5 * float(np.sum(self.velocities * self.velocities))

    def maxSpeed(self) -> float:
        '''
        Maximum velocity magnitude.

        Returns:
        --------
        float : Maximum speed [m/s]
        '''
        if self.nParticles == 0:
            return 0.0
        speeds = np.linalg.norm(self.velocities, axis=1)
        return float(np.max(speeds))

    def meanDensity(self) -> float:
        '''Mean particle density [kg/m^3], 0 for an empty system.'''
        if self.nParticles == 0:
            return 0.0
        return float(np.mean(self.densities))

    def maxDensityError(self, restDensity: float) -> float:
        '''
        Maximum relative density error.

        Returns max |rho_i - rho_0| / rho_0

        Parameters:
        -----------
        restDensity : float
            Rest density rho_0 [kg/m^3]

        Returns:
        --------
        float : Maximum relative density error (dimensionless)
        '''
        if self.nParticles == 0:
            return 0.0
        errors = np.abs(self.densities - restDensity) / restDensity
        return float(np.max(errors))

    def append(self, other: ParticleSystem) -> None:
        '''
        Append another particle system's rows after this one's.

        Parameters:
        -----------
        other : ParticleSystem
            Particles to append (left unmodified)
        '''
        self.positions = np.vstack([self.positions, other.positions])
        self.velocities = np.vstack([self.velocities, other.velocities])
        self.accelerations = np.vstack([self.accelerations, other.accelerations])
        self.densities = np.concatenate([self.densities, other.densities])
        self.pressures = np.concatenate([self.pressures, other.pressures])

    @classmethod
    def empty(cls) -> ParticleSystem:
        '''Create a particle system with no particles.'''
        dim = const.dimensions
        return cls(
            positions=np.zeros((0, dim)),
            velocities=np.zeros((0, dim)),
            accelerations=np.zeros((0, dim)),
            densities=np.zeros(0),
            pressures=np.zeros(0),
        )

    @classmethod
    def createLattice(
        cls,
        region: BoundingBox,
        spacing: float,
        restDensity: float,
    ) -> ParticleSystem:
        '''
        Create particles on a regular lattice filling a box.

        Lattice coordinates along each axis are min + k * spacing for
        every k with min + k * spacing < max (half-open interval), so a
        cube of side L yields ceil(L / spacing)^3 particles. Ordering is
        x outermost, z innermost. Particles start at rest with density
        equal to the rest density and zero pressure.

        Parameters:
        -----------
        region : BoundingBox
            Box to fill [m]
        spacing : float
            Lattice spacing [m], must be finite and > 0
        restDensity : float
            Initial density for every particle [kg/m^3]

        Returns:
        --------
        ParticleSystem : Initialized particle system

        Raises:
        -------
        InvalidParameterError : If spacing is non-positive or non-finite
        '''
        if not math.isfinite(spacing) or spacing <= 0.0:
            raise InvalidParameterError(f'spacing must be finite and > 0, got {spacing}')

        axes = []
        for d in range(const.dimensions):
            lo = region.minCorner[d]
            hi = region.maxCorner[d]
            # Explicit count avoids np.arange overshooting the far bound
            nPoints = math.ceil((hi - lo) / spacing)
            coords = lo + np.arange(nPoints) * spacing
            axes.append(coords[coords < hi])

        # indexing='ij' keeps x as the slowest-varying coordinate
        xx, yy, zz = np.meshgrid(axes[0], axes[1], axes[2], indexing='ij')
        positions = np.column_stack([xx.ravel(), yy.ravel(), zz.ravel()])

        nParticles = positions.shape[0]

        return cls(
            positions=positions,
            velocities=np.zeros((nParticles, const.dimensions)),
            accelerations=np.zeros((nParticles, const.dimensions)),
            densities=np.full(nParticles, float(restDensity)),
            pressures=np.zeros(nParticles),
        )
