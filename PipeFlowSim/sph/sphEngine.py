# -- SPH Pipe Flow Engine -- #

'''
SPH engine for fluid in an axis-aligned pipe segment.

The engine owns its particle arrays and bounding box. Callers seed
particles, then advance the simulation one tick at a time with step().
Every step runs four phases to completion, in order:

    1. Density      rho_i = sum_j W_poly6(|r_i - r_j|, h)   (j = i included)
    2. Pressure     p_i = k * (rho_i - rho_0)               (may be negative)
    3. Forces       pressure and viscosity velocity increments per pair
    4. Integrate    kick-drift, then reflective damped walls

All phases read the particle state captured at the start of the step;
neighbor pairs are found once and reused by the density and force
passes. Every particle has unit mass.

Force terms for a pair (i, j) with |r_ij| < h:

    pressure on i:   (x_j - x_i) * (p_i + p_j) / (2 * rho_j)
    viscosity on i:  (v_j - v_i)

    v_i += dt * sum(pressure) + viscosity * dt * sum(viscosity)

The denominator of the pressure term is the density of the *other*
particle of the pair.

Sean Bowman [02/12/2026]
'''

from __future__ import annotations

import logging
import math
import numbers

import numpy as np

from PipeFlowSim import constants as const
from PipeFlowSim.sph.errors import InvalidParameterError, NumericInstabilityError
from PipeFlowSim.sph.protocols import BoundingBox, FluidParameters, SimulationState
from PipeFlowSim.sph.kernels import SphKernel, createKernel
from PipeFlowSim.sph.particles import ParticleSystem
from PipeFlowSim.sph.neighborSearch import NeighborSearch, createNeighborSearch
from PipeFlowSim.sph.boundaryHandling import BoxBoundary
from PipeFlowSim.sph.timeIntegration import StepIntegrator, SymplecticEuler

logger = logging.getLogger(__name__)


class SphEngine:
    '''
    Single-phase SPH engine with a fixed smoothing radius.

    Parameters:
    -----------
    bounds : BoundingBox
        Container volume: collision walls and the region re-seeded by reset()
    parameters : FluidParameters
        Initial fluid parameters
    kernelRadius : float
        Smoothing radius h [m] (default 0.1). Independent of particle spacing.
    neighborSearch : str
        'spatialHash' (default), 'kdTree' or 'bruteForce'
    stiffnessPerFlowRate : float
        Scale from flow rate to pressure stiffness (default 50)
    kernelType : str
        Density kernel (default 'poly6')

    Raises:
    -------
    InvalidParameterError : If any argument is invalid
    '''

    def __init__(
        self,
        bounds: BoundingBox,
        parameters: FluidParameters,
        kernelRadius: float = const.kernelRadius,
        neighborSearch: str = 'spatialHash',
        stiffnessPerFlowRate: float = const.stiffnessPerFlowRate,
        kernelType: str = 'poly6',
    ) -> None:
        if not _isFiniteNumber(kernelRadius) or kernelRadius <= 0.0:
            raise InvalidParameterError(f'kernelRadius must be finite and > 0, got {kernelRadius}')
        if not _isFiniteNumber(stiffnessPerFlowRate) or stiffnessPerFlowRate < 0.0:
            raise InvalidParameterError(
                f'stiffnessPerFlowRate must be finite and >= 0, got {stiffnessPerFlowRate}'
            )

        self._bounds = _asBoundingBox(bounds)
        self._kernelRadius = float(kernelRadius)
        self._stiffnessPerFlowRate = float(stiffnessPerFlowRate)
        self._kernel: SphKernel = createKernel(kernelType)
        self._neighborSearch: NeighborSearch = createNeighborSearch(
            neighborSearch, cellSize=self._kernelRadius,
        )
        self._boundary = BoxBoundary(self._bounds)
        self._integrator: StepIntegrator = SymplecticEuler()

        self._particles = ParticleSystem.empty()
        self._time: float = 0.0
        self._step: int = 0

        self.setParameters(parameters)
        self._dt: float = self._parameters.timeStep

    ######################################################################
    # -- Parameters -- #
    ######################################################################

    def setParameters(self, parameters: FluidParameters) -> None:
        '''
        Replace rest density, viscosity coefficient and pressure stiffness.

        stiffness = flowRate * stiffnessPerFlowRate

        The smoothing radius and existing particles are untouched; the
        new values take effect on the next step.

        Parameters:
        -----------
        parameters : FluidParameters
            New fluid parameters
        '''
        if not isinstance(parameters, FluidParameters):
            raise InvalidParameterError(
                f'parameters must be FluidParameters, got {type(parameters).__name__}'
            )

        self._parameters = parameters
        self._restDensity = parameters.density
        self._viscosity = parameters.viscosity
        self._stiffness = parameters.flowRate * self._stiffnessPerFlowRate

        logger.debug(
            'Parameters set: rho0=%.3f, viscosity=%.4f, stiffness=%.3f',
            self._restDensity, self._viscosity, self._stiffness,
        )

    ######################################################################
    # -- Seeding -- #
    ######################################################################

    def seedParticles(self, region: BoundingBox, spacing: float) -> None:
        '''
        Append particles on a half-open lattice inside region.

        Parameters:
        -----------
        region : BoundingBox
            Box to fill [m]
        spacing : float
            Lattice spacing [m], must be finite and > 0

        Raises:
        -------
        InvalidParameterError : If region or spacing is invalid. Existing
            particles are left unchanged.
        '''
        region = _asBoundingBox(region)
        if not _isFiniteNumber(spacing) or spacing <= 0.0:
            raise InvalidParameterError(f'spacing must be finite and > 0, got {spacing}')

        lattice = ParticleSystem.createLattice(region, float(spacing), self._restDensity)
        self._particles.append(lattice)

        logger.debug(
            'Seeded %d particles at spacing %.4f (total %d)',
            lattice.nParticles, spacing, self._particles.nParticles,
        )

    def setVelocities(self, velocities) -> None:
        '''
        Overwrite particle velocities, e.g. to impose an initial inflow.

        The values are copied; the caller keeps no handle on engine state.

        Parameters:
        -----------
        velocities : array-like
            Shape (N, 3) per-particle velocities, or a single (3,)
            velocity applied to every particle [m/s]

        Raises:
        -------
        InvalidParameterError : If the shape does not match or any value
            is non-finite. Existing velocities are left unchanged.
        '''
        values = np.asarray(velocities, dtype=float)
        target = self._particles.velocities.shape
        if values.shape == (const.dimensions,):
            values = np.broadcast_to(values, target)
        if values.shape != target:
            raise InvalidParameterError(
                f'velocities must have shape {target} or ({const.dimensions},), got {values.shape}'
            )
        if not np.all(np.isfinite(values)):
            raise InvalidParameterError('velocities must be finite')

        self._particles.velocities = np.array(values, dtype=float)

    def reset(self) -> None:
        '''
        Clear all particles and re-seed the bounding box at spacing h.

        Restores time and step counters to zero. Identical parameters
        give identical particle ordering and therefore identical
        subsequent trajectories.
        '''
        self._particles = ParticleSystem.empty()
        self._time = 0.0
        self._step = 0
        self._dt = self._parameters.timeStep
        self.seedParticles(self._bounds, self._kernelRadius)

        logger.info('Engine reset with %d particles', self._particles.nParticles)

    ######################################################################
    # -- Main Time Step -- #
    ######################################################################

    def step(self, deltaTime: float | None = None) -> SimulationState:
        '''
        Advance the simulation by one time step.

        Parameters:
        -----------
        deltaTime : float | None
            Time step [s], must be finite and > 0. Defaults to the
            parameters' timeStep.

        Returns:
        --------
        SimulationState : Diagnostics after the step

        Raises:
        -------
        InvalidParameterError : If deltaTime is invalid (state unchanged)
        NumericInstabilityError : If the step produced non-finite values
        '''
        dt = self._parameters.timeStep if deltaTime is None else deltaTime
        if not _isFiniteNumber(dt) or dt <= 0.0:
            raise InvalidParameterError(f'deltaTime must be finite and > 0, got {dt}')
        dt = float(dt)

        if self._particles.nParticles > 0:
            # Pairs from the start-of-step positions, shared by all passes
            self._neighborSearch.build(self._particles.positions)
            pairs = self._neighborSearch.queryPairs(self._kernelRadius)

            self._computeDensity(pairs)
            self._computePressure()
            self._accumulateForces(pairs)
            self._integrateAndBound(dt)

        self._dt = dt
        self._time += dt
        self._step += 1

        self._checkFinite()
        return self.currentState

    ######################################################################
    # -- Density (Vectorized) -- #
    ######################################################################

    def _computeDensity(self, pairs: tuple[np.ndarray, np.ndarray]) -> None:
        '''
        Compute particle densities by kernel summation.

        rho_i = W(0, h) + sum_{j != i, r_ij < h} W(r_ij, h)

        Kernel evaluation for all pairs at once, then a symmetric
        scatter-add using np.add.at.
        '''
        p = self._particles
        h = self._kernelRadius

        # Self-contribution
        p.densities = np.full(p.nParticles, self._kernel.evaluate(0.0, h))

        iIdx, jIdx = pairs
        if len(iIdx) == 0:
            return

        dist = np.linalg.norm(p.positions[jIdx] - p.positions[iIdx], axis=1)
        wij = self._kernel.evaluateBatch(dist, h)

        np.add.at(p.densities, iIdx, wij)
        np.add.at(p.densities, jIdx, wij)

    ######################################################################
    # -- Pressure (Equation of State) -- #
    ######################################################################

    def _computePressure(self) -> None:
        '''
        Compute pressure from density with a linear equation of state.

        p = k * (rho - rho_0)

        Pressure below rest density is negative (attractive) and is
        not clamped.
        '''
        p = self._particles
        p.pressures = self._stiffness * (p.densities - self._restDensity)

    ######################################################################
    # -- Force Accumulation (Vectorized) -- #
    ######################################################################

    def _accumulateForces(self, pairs: tuple[np.ndarray, np.ndarray]) -> None:
        '''
        Accumulate pressure and viscosity terms into accelerations.

        a_i = sum_j (x_j - x_i) * (p_i + p_j) / (2 * rho_j)
            + viscosity * sum_j (v_j - v_i)

        Each pair contributes to both particles; the pressure term
        for j mirrors the direction and divides by rho_i instead.
        '''
        p = self._particles
        p.accelerations = np.zeros_like(p.positions)

        iIdx, jIdx = pairs
        if len(iIdx) == 0:
            return

        dr = p.positions[jIdx] - p.positions[iIdx]   # i -> j, shape (nPairs, 3)
        dv = p.velocities[jIdx] - p.velocities[iIdx]  # v_j - v_i

        # --- Pressure term --- #
        pressureSum = p.pressures[iIdx] + p.pressures[jIdx]
        coeffI = pressureSum / (2.0 * p.densities[jIdx])
        coeffJ = pressureSum / (2.0 * p.densities[iIdx])

        pressureForce = np.zeros_like(p.positions)
        np.add.at(pressureForce, iIdx, coeffI[:, np.newaxis] * dr)
        np.add.at(pressureForce, jIdx, -coeffJ[:, np.newaxis] * dr)

        # --- Viscosity term --- #
        viscosityForce = np.zeros_like(p.positions)
        np.add.at(viscosityForce, iIdx, dv)
        np.add.at(viscosityForce, jIdx, -dv)

        p.accelerations = pressureForce + self._viscosity * viscosityForce

    ######################################################################
    # -- Integration and Walls -- #
    ######################################################################

    def _integrateAndBound(self, dt: float) -> None:
        '''Kick-drift the particles, then resolve wall collisions.'''
        self._integrator.integrate(self._particles, dt)
        nCollisions = self._boundary.enforceBoundary(self._particles)

        if nCollisions:
            logger.debug('Step %d: %d wall collisions', self._step + 1, nCollisions)

    def _checkFinite(self) -> None:
        '''
        Raise if any position, velocity or density is NaN or infinite.

        Raises:
        -------
        NumericInstabilityError : Naming the first offending field and particle
        '''
        p = self._particles
        for field, values in (
            ('positions', p.positions),
            ('velocities', p.velocities),
            ('densities', p.densities),
        ):
            bad = ~np.isfinite(values)
            if bad.ndim > 1:
                bad = np.any(bad, axis=1)
            if np.any(bad):
                index = int(np.argmax(bad))
                logger.error(
                    'Numeric instability: non-finite %s at particle %d, step %d',
                    field, index, self._step,
                )
                raise NumericInstabilityError(field, index, self._step)

    ######################################################################
    # -- Accessors -- #
    ######################################################################

    def getPositions(self) -> np.ndarray:
        '''Copy of particle positions [m], shape (N, 3).'''
        return self._particles.positions.copy()

    def getVelocities(self) -> np.ndarray:
        '''Copy of particle velocities [m/s], shape (N, 3), same order as positions.'''
        return self._particles.velocities.copy()

    def getDensities(self) -> np.ndarray:
        '''Copy of particle densities from the last density pass [kg/m^3].'''
        return self._particles.densities.copy()

    def getPressures(self) -> np.ndarray:
        '''Copy of particle pressures from the last pressure pass [Pa].'''
        return self._particles.pressures.copy()

    @property
    def nParticles(self) -> int:
        '''Number of particles.'''
        return self._particles.nParticles

    @property
    def bounds(self) -> BoundingBox:
        '''Container volume.'''
        return self._bounds

    @property
    def parameters(self) -> FluidParameters:
        '''Live fluid parameters.'''
        return self._parameters

    @property
    def kernelRadius(self) -> float:
        '''Smoothing radius h [m].'''
        return self._kernelRadius

    @property
    def stiffness(self) -> float:
        '''Pressure stiffness k derived from the flow rate.'''
        return self._stiffness

    @property
    def time(self) -> float:
        '''Accumulated simulation time [s].'''
        return self._time

    @property
    def stepCount(self) -> int:
        '''Number of completed steps since construction or reset.'''
        return self._step

    @property
    def currentState(self) -> SimulationState:
        '''Current simulation state snapshot.'''
        p = self._particles
        return SimulationState(
            time=self._time,
            step=self._step,
            dt=self._dt,
            nParticles=p.nParticles,
            kineticEnergy=p.kineticEnergy(),
            maxVelocity=p.maxSpeed(),
            meanDensity=p.meanDensity(),
            maxDensityError=p.maxDensityError(self._restDensity),
        )


def _isFiniteNumber(value) -> bool:
    '''True for real, finite, non-boolean numbers.'''
    return (
        isinstance(value, numbers.Real)
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def _asBoundingBox(region) -> BoundingBox:
    '''Accept a BoundingBox or a (minCorner, maxCorner) pair.'''
    if isinstance(region, BoundingBox):
        return region
    try:
        minCorner, maxCorner = region
    except (TypeError, ValueError) as exc:
        raise InvalidParameterError(
            f'region must be a BoundingBox or (min, max) pair, got {region!r}'
        ) from exc
    return BoundingBox(minCorner, maxCorner)
