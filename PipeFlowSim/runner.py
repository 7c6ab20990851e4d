# -- Pipe Flow Simulation Runner -- #

'''
Command-line entry point for running SPH pipe flow simulations.

Builds a pipe segment scenario, runs a fixed number of engine steps,
displays progress, and optionally exports particle frame data.

Usage:
    python -m PipeFlowSim                                  # Default pipe segment
    python -m PipeFlowSim --preset smallCube               # 1 m cube, 125 particles
    python -m PipeFlowSim --config configs/pipe.json
    python -m PipeFlowSim --steps 50 --dt 0.005 --no-export

Sean Bowman [02/12/2026]
'''

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
import time as timeModule

from PipeFlowSim.logConfig import setupLogging
from PipeFlowSim.scenarios.pipeSegment import PipeSegmentConfig, createPipeSegment
from PipeFlowSim.export.frameExporter import FrameExporter
from PipeFlowSim.sph.errors import SphError


#--------------------------------------------------------------------#
# -- CLI Argument Parser -- #
#--------------------------------------------------------------------#

def buildParser() -> argparse.ArgumentParser:
    '''Build the CLI argument parser.'''
    parser = argparse.ArgumentParser(
        description='PipeFlowSim -- SPH pipe flow simulation',
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        '--config', type=str, default=None,
        help='JSON file with domain/fluid/sph/simulation sections',
    )
    parser.add_argument(
        '--preset', type=str, default='pipeSegment',
        choices=['pipeSegment', 'smallCube'],
        help='Scenario preset (default: pipeSegment)',
    )
    parser.add_argument(
        '--steps', type=int, default=None,
        help='Override the number of steps',
    )
    parser.add_argument(
        '--dt', type=float, default=None,
        help='Override the time step [s]',
    )
    parser.add_argument(
        '--neighbor-search', type=str, default='spatialHash',
        choices=['spatialHash', 'kdTree', 'bruteForce'],
        help='Neighbor search algorithm (default: spatialHash)',
    )
    parser.add_argument(
        '--no-export', action='store_true',
        help='Run without writing the frame JSON',
    )
    parser.add_argument(
        '--output-dir', type=str, default='PipeFlowSim/output',
        help='Output directory for exported frames (default: PipeFlowSim/output)',
    )
    parser.add_argument(
        '--log-level', type=str, default='WARNING',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='Library log level (default: WARNING)',
    )

    return parser


#--------------------------------------------------------------------#
# -- Runner Class -- #
#--------------------------------------------------------------------#

class PipeFlowRunner:
    '''
    Runs an SPH pipe flow simulation and stores results.

    Builds the engine from a PipeSegmentConfig, steps it, prints a
    progress table and optionally writes the recorded frames.

    Parameters:
    -----------
    neighborSearch : str
        Neighbor search passed to the engine
    '''

    def __init__(self, neighborSearch: str = 'spatialHash') -> None:
        self._neighborSearch = neighborSearch
        self._exporter: FrameExporter = FrameExporter()

    @property
    def exporter(self) -> FrameExporter:
        '''Frame collector for the last run.'''
        return self._exporter

    def runFromConfig(
        self,
        configPath: str,
        doExport: bool = True,
        exportDir: str = 'PipeFlowSim/output',
    ) -> dict:
        '''
        Load a PipeSegmentConfig from JSON and run it.

        Parameters:
        -----------
        configPath : str
            Path to the JSON configuration file
        doExport : bool
            Write the recorded frames to JSON
        exportDir : str
            Directory for the exported JSON

        Returns:
        --------
        dict : finalState, wallClockSeconds, nFrames, exportPath, nInside
        '''
        pipeConfig = PipeSegmentConfig.fromJson(configPath)
        return self.run(pipeConfig, doExport=doExport, exportDir=exportDir)

    def run(
        self,
        pipeConfig: PipeSegmentConfig,
        doExport: bool = True,
        exportDir: str = 'PipeFlowSim/output',
        scenarioName: str = 'pipeSegment',
    ) -> dict:
        '''
        Run a pipe segment simulation.

        Parameters:
        -----------
        pipeConfig : PipeSegmentConfig
            Scenario configuration
        doExport : bool
            Write the recorded frames to JSON
        exportDir : str
            Directory for the exported JSON
        scenarioName : str
            Scenario name used in the export filename

        Returns:
        --------
        dict : finalState, wallClockSeconds, nFrames, exportPath, nInside
        '''
        self._exporter = FrameExporter()

        print()
        print('=' * 62)
        print('  PIPEFLOWSIM -- SPH PIPE SEGMENT SIMULATION')
        print('=' * 62)
        print()

        #--------------------------------------------------------------------#
        # Scenario Setup
        #--------------------------------------------------------------------#
        print('-' * 62)
        print('  SCENARIO SETUP')
        print('-' * 62)

        engine, fluidRegion = createPipeSegment(pipeConfig, neighborSearch=self._neighborSearch)

        print(f'  Pipe Length:       {pipeConfig.pipeLength:8.3f} m')
        print(f'  Pipe Width:        {pipeConfig.pipeWidth:8.3f} m')
        print(f'  Pipe Height:       {pipeConfig.pipeHeight:8.3f} m')
        print(f'  Fill Fraction:     {pipeConfig.fillFraction:8.2f}')
        print(f'  Fluid Block:       {fluidRegion.volume:8.4f} m^3')
        print(f'  Particle Spacing:  {pipeConfig.particleSpacing:8.4f} m')
        print(f'  Kernel Radius:     {engine.kernelRadius:8.4f} m')
        print(f'  Rest Density:      {pipeConfig.density:8.1f} kg/m^3')
        print(f'  Viscosity:         {pipeConfig.viscosity:8.4f}')
        print(f'  Flow Rate:         {pipeConfig.flowRate:8.4f}')
        print(f'  Inlet Velocity:    {pipeConfig.inletVelocity:8.4f} m/s')
        print(f'  Stiffness:         {engine.stiffness:8.2f}')
        print(f'  Particles:         {engine.nParticles:8d}')
        print(f'  Steps:             {pipeConfig.nSteps:8d}')
        print(f'  Time Step:         {pipeConfig.timeStep:8.4f} s')
        print()

        # Record initial frame
        self._exporter.addFrame(engine.currentState, engine)

        #--------------------------------------------------------------------#
        # Simulation Loop
        #--------------------------------------------------------------------#
        print('-' * 62)
        print('  STEPPING')
        print('-' * 62)
        print()
        print(f'  {"Time":>8}  {"Step":>8}  {"MaxVel":>10}  {"MeanRho":>12}  {"KE":>12}')
        print(f'  {"(s)":>8}  {"":>8}  {"(m/s)":>10}  {"(kg/m^3)":>12}  {"":>12}')
        print('  ' + '-' * 58)

        wallClockStart = timeModule.time()
        printEvery = max(1, pipeConfig.nSteps // 20)

        for stepIndex in range(1, pipeConfig.nSteps + 1):
            state = engine.step(pipeConfig.timeStep)

            if stepIndex % pipeConfig.outputEvery == 0:
                self._exporter.addFrame(state, engine)

            if stepIndex % printEvery == 0:
                print(
                    f'  {state.time:8.4f}  {state.step:8d}  {state.maxVelocity:10.4f}  '
                    f'{state.meanDensity:12.4e}  {state.kineticEnergy:12.4e}'
                )

        wallClockSeconds = timeModule.time() - wallClockStart
        finalState = engine.currentState

        print()
        print('  Run complete.')
        print(f'  Total steps:       {finalState.step:8d}')
        print(f'  Wall-clock time:   {wallClockSeconds:8.1f} s')
        print(f'  Frames recorded:   {self._exporter.nFrames:8d}')
        print()

        #--------------------------------------------------------------------#
        # Export
        #--------------------------------------------------------------------#
        exportPath = None
        if doExport:
            print('-' * 62)
            print('  FRAME EXPORT')
            print('-' * 62)

            exportPath = self._exporter.export(
                config=pipeConfig,
                outputDir=exportDir,
                scenarioName=scenarioName,
            )
            print(f'  Exported to: {exportPath}')
            print()

        #--------------------------------------------------------------------#
        # Summary
        #--------------------------------------------------------------------#
        nInside = int(engine.bounds.contains(engine.getPositions()).sum())

        print('=' * 62)
        print('  RUN SUMMARY')
        print('=' * 62)
        print(f'  Final KE:          {finalState.kineticEnergy:12.4e}')
        print(f'  Max Velocity:      {finalState.maxVelocity:12.4e} m/s')
        print(f'  Mean Density:      {finalState.meanDensity:12.4e} kg/m^3')
        print(f'  Particles Inside:  {nInside:8d} / {finalState.nParticles}')
        print('=' * 62)
        print()

        return {
            'finalState': finalState,
            'wallClockSeconds': wallClockSeconds,
            'nFrames': self._exporter.nFrames,
            'exportPath': exportPath,
            'nInside': nInside,
        }


#--------------------------------------------------------------------#
# -- CLI Entry Point -- #
#--------------------------------------------------------------------#

def main(argv: list[str] | None = None) -> int:
    '''CLI entry point. Returns the process exit code.'''
    parser = buildParser()
    args = parser.parse_args(argv)

    setupLogging(getattr(logging, args.log_level))

    presets = {
        'pipeSegment': PipeSegmentConfig.pipeSegment,
        'smallCube': PipeSegmentConfig.smallCube,
    }
    overrides = {}
    if args.steps is not None:
        overrides['nSteps'] = args.steps
    if args.dt is not None:
        overrides['timeStep'] = args.dt

    runner = PipeFlowRunner(neighborSearch=args.neighbor_search)

    try:
        if args.config:
            pipeConfig = PipeSegmentConfig.fromJson(args.config)
            scenarioName = 'config'
        else:
            pipeConfig = presets[args.preset]()
            scenarioName = args.preset

        if overrides:
            pipeConfig = dataclasses.replace(pipeConfig, **overrides)
        runner.run(
            pipeConfig,
            doExport=not args.no_export,
            exportDir=args.output_dir,
            scenarioName=scenarioName,
        )
    except SphError as exc:
        print(f'  SIMULATION FAILED: {exc}', file=sys.stderr)
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
