# -- Export Package -- #

'''
Data export utilities for SPH simulation results.

Sean Bowman [02/12/2026]
'''

from PipeFlowSim.export.frameExporter import FrameExporter
