# -- Pipe Flow Frame Exporter -- #

'''
JSON history of particle state for a pipe flow run.

The runner hands every recorded step to a FrameExporter, which keeps
positions, speeds and densities per frame plus a kinetic energy
history. export() writes everything to one compact JSON file that a
viewer or notebook can load without importing this package.

Sean Bowman [02/12/2026]
'''

from __future__ import annotations

import json
import os
from datetime import datetime

import numpy as np

from PipeFlowSim import constants as const
from PipeFlowSim.sph.protocols import SimulationState
from PipeFlowSim.sph.sphEngine import SphEngine
from PipeFlowSim.scenarios.pipeSegment import PipeSegmentConfig


class FrameExporter:
    '''
    In-memory frame store with a one-shot JSON writer.

    Usage:
        exporter = FrameExporter()
        exporter.addFrame(engine.currentState, engine)     # each recorded step
        path = exporter.export(pipeConfig, outputDir='PipeFlowSim/output')

    File layout:
    {
        "meta":   { "type": "pipeFlowSim", "nFrames": ..., "nParticles": ..., ... },
        "config": { "domainMin": [...], "domainMax": [...], "kernelRadius": ..., ... },
        "frames": [ { "time", "step", "positions", "velocityMagnitudes", "densities" }, ... ],
        "energy": { "times": [...], "kinetic": [...] }
    }
    '''

    def __init__(self) -> None:
        self._frames: list[dict] = []
        self._times: list[float] = []
        self._kinetic: list[float] = []

    @property
    def nFrames(self) -> int:
        '''Number of frames recorded so far.'''
        return len(self._frames)

    @property
    def frames(self) -> list[dict]:
        '''Recorded frames in step order.'''
        return self._frames

    def addFrame(self, state: SimulationState, engine: SphEngine) -> None:
        '''
        Snapshot the engine's particles.

        Parameters:
        -----------
        state : SimulationState
            Diagnostics returned by the step being recorded
        engine : SphEngine
            Engine whose particle arrays are copied
        '''
        speeds = np.linalg.norm(engine.getVelocities(), axis=1)
        time = round(state.time, 6)

        self._frames.append({
            'time': time,
            'step': state.step,
            'positions': engine.getPositions().tolist(),
            'velocityMagnitudes': np.round(speeds, 6).tolist(),
            'densities': np.round(engine.getDensities(), 2).tolist(),
        })
        self._times.append(time)
        self._kinetic.append(round(state.kineticEnergy, 6))

    def export(
        self,
        config: PipeSegmentConfig,
        outputDir: str = 'PipeFlowSim/output',
        scenarioName: str = 'pipeSegment',
    ) -> str:
        '''
        Write the recorded frames to pipeFlowSim_<scenario>_<timestamp>.json.

        Parameters:
        -----------
        config : PipeSegmentConfig
            Configuration the run was built from, stored as metadata
        outputDir : str
            Directory to write into (created if missing)
        scenarioName : str
            Used in the file name

        Returns:
        --------
        str : Path of the written file
        '''
        os.makedirs(outputDir, exist_ok=True)

        now = datetime.now()
        filepath = os.path.join(
            outputDir, f'pipeFlowSim_{scenarioName}_{now:%Y%m%d_%H%M%S}.json',
        )

        bounds = config.bounds
        payload = {
            'meta': {
                'type': 'pipeFlowSim',
                'dimensions': const.dimensions,
                'nFrames': self.nFrames,
                'nParticles': len(self._frames[0]['positions']) if self._frames else 0,
                'created': now.isoformat(),
            },
            'config': {
                'domainMin': bounds.minCorner.tolist(),
                'domainMax': bounds.maxCorner.tolist(),
                'fillFraction': config.fillFraction,
                'particleSpacing': config.particleSpacing,
                'kernelRadius': config.kernelRadius,
                'restDensity': config.density,
                'viscosity': config.viscosity,
                'flowRate': config.flowRate,
                'inletVelocity': config.inletVelocity,
                'timeStep': config.timeStep,
                'nSteps': config.nSteps,
            },
            'frames': self._frames,
            'energy': {'times': self._times, 'kinetic': self._kinetic},
        }

        with open(filepath, 'w') as f:
            json.dump(payload, f, separators=(',', ':'))

        return filepath
