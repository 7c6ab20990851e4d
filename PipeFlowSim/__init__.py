# -- PipeFlowSim Package -- #

'''
Pipe flow simulation using Smoothed Particle Hydrodynamics (SPH).

An SPH engine for fluid inside an axis-aligned pipe segment, with
scenario presets, a command-line runner and JSON frame export.

Sean Bowman [02/12/2026]
'''

__version__ = '0.1.0'

from PipeFlowSim.sph.sphEngine import SphEngine
from PipeFlowSim.sph.protocols import BoundingBox, FluidParameters, SimulationState
from PipeFlowSim.runner import PipeFlowRunner
from PipeFlowSim.scenarios.pipeSegment import PipeSegmentConfig
from PipeFlowSim.export.frameExporter import FrameExporter
