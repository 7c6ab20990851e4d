# -- Simulation Scenarios Package -- #

'''
Pre-configured simulation scenarios for the SPH pipe flow engine.

Each scenario provides initial conditions (bounding box, fluid
block, fluid parameters) for a specific problem.

Sean Bowman [02/12/2026]
'''

from PipeFlowSim.scenarios.pipeSegment import PipeSegmentConfig, createPipeSegment
