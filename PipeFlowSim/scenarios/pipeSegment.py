# -- Pipe Segment Scenario -- #

'''
Straight pipe segment filled partially with fluid.

The pipe is modelled by its axis-aligned bounding box, with the pipe
axis along x. A block of fluid occupying the first fillFraction of
the pipe length is seeded on a regular lattice, optionally moving
along the pipe at inletVelocity. The pressure stiffness derived from
the flow rate then spreads it along the pipe.

The scenario creates:
1. A BoundingBox for the pipe interior
2. FluidParameters from the configured fluid properties
3. An SphEngine seeded with the fluid block

Sean Bowman [02/12/2026]
'''

from __future__ import annotations

import json
from dataclasses import dataclass

from PipeFlowSim import constants as const
from PipeFlowSim.sph.protocols import BoundingBox, FluidParameters
from PipeFlowSim.sph.sphEngine import SphEngine
from PipeFlowSim.sph.errors import InvalidParameterError


######################################################################
# -- Pipe Segment Configuration -- #
######################################################################

@dataclass
class PipeSegmentConfig:
    '''
    Configuration for a pipe segment scenario.

    Parameters:
    -----------
    pipeLength : float
        Extent of the pipe along x [m]
    pipeWidth : float
        Extent of the pipe along y [m]
    pipeHeight : float
        Extent of the pipe along z [m]
    fillFraction : float
        Fraction of the pipe length initially filled with fluid (0-1]
    particleSpacing : float
        Lattice spacing of the initial fluid block [m]
    kernelRadius : float
        Smoothing radius h [m]
    viscosity : float
        Viscosity coefficient [1/s]
    density : float
        Rest density [kg/m^3]
    flowRate : float
        Flow rate driving the pressure stiffness [m^3/s]
    timeStep : float
        Time step [s]
    nSteps : int
        Number of steps to run
    outputEvery : int
        Record a frame every this many steps
    inletVelocity : float
        Initial speed of the fluid block along the pipe axis [m/s]
    '''

    pipeLength: float = 2.0
    pipeWidth: float = 0.4
    pipeHeight: float = 0.4
    fillFraction: float = 0.5
    particleSpacing: float = 0.05
    kernelRadius: float = const.kernelRadius
    viscosity: float = const.viscosityCoefficient
    density: float = const.restDensity
    flowRate: float = const.flowRate
    timeStep: float = const.timeStep
    nSteps: int = 200
    outputEvery: int = 10
    inletVelocity: float = 0.0

    def __post_init__(self) -> None:
        if not 0.0 < self.fillFraction <= 1.0:
            raise InvalidParameterError(f'fillFraction must be in (0, 1], got {self.fillFraction}')
        if self.nSteps < 0:
            raise InvalidParameterError(f'nSteps must be >= 0, got {self.nSteps}')
        if self.outputEvery < 1:
            raise InvalidParameterError(f'outputEvery must be >= 1, got {self.outputEvery}')

    @property
    def bounds(self) -> BoundingBox:
        '''Pipe interior [m].'''
        return BoundingBox.fromSize((self.pipeLength, self.pipeWidth, self.pipeHeight))

    @property
    def fluidRegion(self) -> BoundingBox:
        '''Initial fluid block at the inlet end of the pipe [m].'''
        return BoundingBox.fromSize(
            (self.pipeLength * self.fillFraction, self.pipeWidth, self.pipeHeight)
        )

    @property
    def fluidParameters(self) -> FluidParameters:
        '''Fluid parameters for the engine.'''
        return FluidParameters(
            viscosity=self.viscosity,
            density=self.density,
            flowRate=self.flowRate,
            timeStep=self.timeStep,
        )

    @classmethod
    def smallCube(cls) -> PipeSegmentConfig:
        '''
        1 m cube filled at 0.2 m spacing.

        125 particles, 10 steps of 0.01 s. Particles are farther
        apart than h, so this checks walls and bookkeeping only.
        '''
        return cls(
            pipeLength=1.0,
            pipeWidth=1.0,
            pipeHeight=1.0,
            fillFraction=1.0,
            particleSpacing=0.2,
            nSteps=10,
            outputEvery=1,
        )

    @classmethod
    def pipeSegment(cls) -> PipeSegmentConfig:
        '''
        2 m pipe segment, half filled at 0.05 m spacing.

        1280 particles with 26 lattice neighbors each.
        '''
        return cls()

    @classmethod
    def fromJson(cls, configPath: str) -> PipeSegmentConfig:
        '''
        Load configuration from a JSON file.

        Reads the 'domain', 'fluid', 'sph' and 'simulation' sections;
        missing keys fall back to the defaults.

        Parameters:
        -----------
        configPath : str
            Path to the JSON configuration file

        Returns:
        --------
        PipeSegmentConfig : Loaded configuration
        '''
        with open(configPath, 'r') as f:
            data = json.load(f)

        defaults = cls()
        domainSection = data.get('domain', {})
        fluidSection = data.get('fluid', {})
        sphSection = data.get('sph', {})
        simSection = data.get('simulation', {})

        return cls(
            pipeLength=domainSection.get('length', defaults.pipeLength),
            pipeWidth=domainSection.get('width', defaults.pipeWidth),
            pipeHeight=domainSection.get('height', defaults.pipeHeight),
            fillFraction=domainSection.get('fillFraction', defaults.fillFraction),
            particleSpacing=sphSection.get('particleSpacing', defaults.particleSpacing),
            kernelRadius=sphSection.get('kernelRadius', defaults.kernelRadius),
            viscosity=fluidSection.get('viscosity', defaults.viscosity),
            density=fluidSection.get('density', defaults.density),
            flowRate=fluidSection.get('flowRate', defaults.flowRate),
            timeStep=simSection.get('timeStep', defaults.timeStep),
            nSteps=simSection.get('nSteps', defaults.nSteps),
            outputEvery=simSection.get('outputEvery', defaults.outputEvery),
            inletVelocity=fluidSection.get('inletVelocity', defaults.inletVelocity),
        )


######################################################################
# -- Scenario Creation -- #
######################################################################

def createPipeSegment(
    pipeConfig: PipeSegmentConfig,
    neighborSearch: str = 'spatialHash',
) -> tuple[SphEngine, BoundingBox]:
    '''
    Create a seeded engine for a pipe segment.

    Parameters:
    -----------
    pipeConfig : PipeSegmentConfig
        Scenario configuration
    neighborSearch : str
        Neighbor search passed to the engine

    Returns:
    --------
    tuple[SphEngine, BoundingBox] :
        Engine with the fluid block seeded, and the fluid block region
    '''
    engine = SphEngine(
        bounds=pipeConfig.bounds,
        parameters=pipeConfig.fluidParameters,
        kernelRadius=pipeConfig.kernelRadius,
        neighborSearch=neighborSearch,
    )

    fluidRegion = pipeConfig.fluidRegion
    engine.seedParticles(fluidRegion, pipeConfig.particleSpacing)
    if pipeConfig.inletVelocity != 0.0:
        engine.setVelocities((pipeConfig.inletVelocity, 0.0, 0.0))

    return (engine, fluidRegion)
