# -- SPH Engine Package -- #

'''
Core Smoothed Particle Hydrodynamics (SPH) engine.

Provides the Poly6 kernel, particle system, neighbor search,
reflective walls, time integration, and the SphEngine that runs
them in sequence.

Sean Bowman [02/12/2026]
'''

from PipeFlowSim.sph.errors import SphError, InvalidParameterError, NumericInstabilityError
from PipeFlowSim.sph.protocols import BoundingBox, FluidParameters, SimulationState
from PipeFlowSim.sph.kernels import Poly6Kernel, createKernel
from PipeFlowSim.sph.neighborSearch import SpatialHashGrid, KdTreeSearch, BruteForceSearch, createNeighborSearch
from PipeFlowSim.sph.sphEngine import SphEngine
