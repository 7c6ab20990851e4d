# -- SPH Simulation Protocols -- #

'''
Core data structures and engine protocol for the SPH pipe flow engine.

Defines the bounding volume (BoundingBox), the fluid parameter set
(FluidParameters), the diagnostics snapshot (SimulationState), and
the protocol every SPH engine implementation must satisfy.

Sean Bowman [02/12/2026]
'''

from __future__ import annotations

import math
import numbers
from dataclasses import dataclass
from typing import Protocol, Sequence

import numpy as np

from PipeFlowSim import constants as const
from PipeFlowSim.sph.errors import InvalidParameterError


######################################################################
# -- Bounding Volume -- #
######################################################################

@dataclass(frozen=True, eq=False)
class BoundingBox:
    '''
    Axis-aligned box used for particle seeding and wall collisions.

    The corners are copied on construction and stored read-only, so
    the box never aliases caller-owned geometry.

    Parameters:
    -----------
    minCorner : np.ndarray
        Lower corner (x, y, z) [m]
    maxCorner : np.ndarray
        Upper corner (x, y, z) [m]

    Raises:
    -------
    InvalidParameterError : If a corner is not a finite 3-vector or
        maxCorner <= minCorner on any axis
    '''

    minCorner: np.ndarray
    maxCorner: np.ndarray

    def __post_init__(self) -> None:
        object.__setattr__(self, 'minCorner', _asCorner(self.minCorner, 'minCorner'))
        object.__setattr__(self, 'maxCorner', _asCorner(self.maxCorner, 'maxCorner'))

        if np.any(self.maxCorner <= self.minCorner):
            raise InvalidParameterError(
                f'Degenerate or inverted box: min={self.minCorner.tolist()}, '
                f'max={self.maxCorner.tolist()}'
            )

    @classmethod
    def fromSize(
        cls,
        size: Sequence[float],
        origin: Sequence[float] = (0.0, 0.0, 0.0),
    ) -> BoundingBox:
        '''
        Build a box from its lower corner and edge lengths.

        Parameters:
        -----------
        size : Sequence[float]
            Edge lengths along x, y, z [m]
        origin : Sequence[float]
            Lower corner [m]

        Returns:
        --------
        BoundingBox : Box spanning [origin, origin + size]
        '''
        originArr = np.asarray(origin, dtype=float)
        return cls(originArr, originArr + np.asarray(size, dtype=float))

    @property
    def size(self) -> np.ndarray:
        '''Edge lengths along each axis [m].'''
        return self.maxCorner - self.minCorner

    @property
    def center(self) -> np.ndarray:
        '''Box center [m].'''
        return 0.5 * (self.minCorner + self.maxCorner)

    @property
    def volume(self) -> float:
        '''Box volume [m^3].'''
        return float(np.prod(self.size))

    def contains(self, points: np.ndarray) -> np.ndarray:
        '''
        Test which points lie inside the closed box.

        Parameters:
        -----------
        points : np.ndarray
            Points to test, shape (N, 3)

        Returns:
        --------
        np.ndarray : Boolean mask, shape (N,)
        '''
        points = np.atleast_2d(points)
        inside = (points >= self.minCorner) & (points <= self.maxCorner)
        return np.all(inside, axis=1)


def _asCorner(value, name: str) -> np.ndarray:
    '''Convert a corner to a read-only finite float 3-vector.'''
    try:
        corner = np.array(value, dtype=float).reshape(-1)
    except (TypeError, ValueError) as exc:
        raise InvalidParameterError(f'{name} is not numeric: {value!r}') from exc

    if corner.shape != (const.dimensions,):
        raise InvalidParameterError(
            f'{name} must have {const.dimensions} components, got {corner.shape[0]}'
        )
    if not np.all(np.isfinite(corner)):
        raise InvalidParameterError(f'{name} must be finite, got {corner.tolist()}')

    corner.flags.writeable = False
    return corner


######################################################################
# -- Fluid Parameters -- #
######################################################################

@dataclass(frozen=True)
class FluidParameters:
    '''
    Fluid parameters supplied by the caller.

    Pressure stiffness is not stored directly; the engine derives it
    from the flow rate (see SphEngine.setParameters).

    Parameters:
    -----------
    viscosity : float
        Viscosity coefficient applied to pairwise velocity differences [1/s]
    density : float
        Rest density rho_0 [kg/m^3]
    flowRate : float
        Flow rate, scaled into the pressure stiffness [m^3/s]
    timeStep : float
        Default time step used by step() when none is given [s]

    Raises:
    -------
    InvalidParameterError : If any value is non-finite or out of range
    '''

    viscosity: float = const.viscosityCoefficient
    density: float = const.restDensity
    flowRate: float = const.flowRate
    timeStep: float = const.timeStep

    def __post_init__(self) -> None:
        for name in ('viscosity', 'density', 'flowRate', 'timeStep'):
            value = getattr(self, name)
            if not isinstance(value, numbers.Real) or isinstance(value, bool):
                raise InvalidParameterError(f'{name} must be a number, got {value!r}')
            if not math.isfinite(value):
                raise InvalidParameterError(f'{name} must be finite, got {value}')

        if self.viscosity < 0.0:
            raise InvalidParameterError(f'viscosity must be >= 0, got {self.viscosity}')
        if self.density <= 0.0:
            raise InvalidParameterError(f'density must be > 0, got {self.density}')
        if self.flowRate < 0.0:
            raise InvalidParameterError(f'flowRate must be >= 0, got {self.flowRate}')
        if self.timeStep <= 0.0:
            raise InvalidParameterError(f'timeStep must be > 0, got {self.timeStep}')


######################################################################
# -- Simulation State -- #
######################################################################

@dataclass
class SimulationState:
    '''
    Snapshot of engine diagnostics at a given time.

    Parameters:
    -----------
    time : float
        Accumulated simulation time [s]
    step : int
        Number of completed steps
    dt : float
        Size of the last step [s]
    nParticles : int
        Number of particles
    kineticEnergy : float
        Total kinetic energy with unit particle mass [m^2/s^2]
    maxVelocity : float
        Maximum particle speed [m/s]
    meanDensity : float
        Mean particle density [kg/m^3]
    maxDensityError : float
        Maximum relative density error |rho - rho_0| / rho_0
    '''

    time: float
    step: int
    dt: float
    nParticles: int
    kineticEnergy: float
    maxVelocity: float
    meanDensity: float
    maxDensityError: float


######################################################################
# -- Engine Protocol -- #
######################################################################

class SphEngineProtocol(Protocol):
    '''Protocol for SPH engines driven by a caller-controlled step loop.'''

    def setParameters(self, parameters: FluidParameters) -> None:
        '''Replace the live fluid parameters.'''
        ...

    def seedParticles(self, region: BoundingBox, spacing: float) -> None:
        '''Append particles on a lattice inside region.'''
        ...

    def step(self, deltaTime: float | None = None) -> SimulationState:
        '''Advance the simulation by one time step.'''
        ...

    def reset(self) -> None:
        '''Clear and re-seed the bounding volume deterministically.'''
        ...

    def getPositions(self) -> np.ndarray:
        '''Copy of particle positions, shape (N, 3).'''
        ...

    def getVelocities(self) -> np.ndarray:
        '''Copy of particle velocities, shape (N, 3).'''
        ...
