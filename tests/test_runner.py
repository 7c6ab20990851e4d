# -- Runner, Config and Export Tests -- #

'''
Scenario configuration loading, the simulation runner, JSON frame
export and the command-line entry point.

Sean Bowman [02/12/2026]
'''

import json
import logging

import pytest

from PipeFlowSim.logConfig import setupLogging
from PipeFlowSim.runner import PipeFlowRunner, buildParser, main
from PipeFlowSim.scenarios.pipeSegment import PipeSegmentConfig, createPipeSegment
from PipeFlowSim.sph.errors import InvalidParameterError


def testPresets():
    cube = PipeSegmentConfig.smallCube()
    assert cube.bounds.volume == pytest.approx(1.0)
    assert cube.nSteps == 10

    pipe = PipeSegmentConfig.pipeSegment()
    engine, fluidRegion = createPipeSegment(pipe)
    assert engine.nParticles == 20 * 8 * 8
    assert fluidRegion.maxCorner[0] == pytest.approx(1.0)


@pytest.mark.parametrize('kwargs', [
    {'fillFraction': 0.0},
    {'fillFraction': 1.5},
    {'nSteps': -1},
    {'outputEvery': 0},
])
def testInvalidConfigRejected(kwargs):
    with pytest.raises(InvalidParameterError):
        PipeSegmentConfig(**kwargs)


def testConfigFromJson(tmp_path):
    configPath = tmp_path / 'pipe.json'
    configPath.write_text(json.dumps({
        'domain': {'length': 1.5, 'width': 0.3, 'fillFraction': 0.25},
        'fluid': {'viscosity': 0.05, 'flowRate': 2.0, 'inletVelocity': 0.4},
        'sph': {'particleSpacing': 0.04},
        'simulation': {'timeStep': 0.005, 'nSteps': 12, 'outputEvery': 3},
    }))

    pipeConfig = PipeSegmentConfig.fromJson(str(configPath))

    assert pipeConfig.pipeLength == 1.5
    assert pipeConfig.pipeWidth == 0.3
    assert pipeConfig.pipeHeight == 0.4         # default
    assert pipeConfig.fillFraction == 0.25
    assert pipeConfig.viscosity == 0.05
    assert pipeConfig.density == 1000.0         # default
    assert pipeConfig.flowRate == 2.0
    assert pipeConfig.inletVelocity == 0.4
    assert pipeConfig.particleSpacing == 0.04
    assert pipeConfig.kernelRadius == 0.1       # default
    assert pipeConfig.timeStep == 0.005
    assert pipeConfig.nSteps == 12
    assert pipeConfig.outputEvery == 3


def testRunSmallCubeWithExport(tmp_path):
    runner = PipeFlowRunner()
    results = runner.run(
        PipeSegmentConfig.smallCube(),
        doExport=True,
        exportDir=str(tmp_path),
        scenarioName='smallCube',
    )

    finalState = results['finalState']
    assert finalState.step == 10
    assert finalState.time == pytest.approx(0.1)
    assert results['nInside'] == 125
    assert results['nFrames'] == 11

    with open(results['exportPath']) as f:
        data = json.load(f)

    assert data['meta']['type'] == 'pipeFlowSim'
    assert data['meta']['nFrames'] == 11
    assert data['meta']['nParticles'] == 125
    assert data['config']['domainMax'] == [1.0, 1.0, 1.0]
    assert len(data['frames']) == 11
    assert len(data['frames'][-1]['positions']) == 125
    assert data['frames'][-1]['step'] == 10
    assert len(data['energy']['times']) == 11


def testRunWithoutExport():
    runner = PipeFlowRunner(neighborSearch='bruteForce')
    pipeConfig = PipeSegmentConfig(
        pipeLength=0.4, pipeWidth=0.2, pipeHeight=0.2,
        particleSpacing=0.05, nSteps=4, outputEvery=2,
    )
    results = runner.run(pipeConfig, doExport=False)

    assert results['exportPath'] is None
    assert results['nFrames'] == 3
    assert runner.exporter.frames[-1]['step'] == 4
    assert results['nInside'] == results['finalState'].nParticles


def testRunFromConfig(tmp_path):
    configPath = tmp_path / 'cube.json'
    configPath.write_text(json.dumps({
        'domain': {'length': 0.5, 'width': 0.5, 'height': 0.5, 'fillFraction': 1.0},
        'sph': {'particleSpacing': 0.25},
        'simulation': {'nSteps': 2, 'outputEvery': 1},
    }))

    results = PipeFlowRunner().runFromConfig(str(configPath), doExport=False)
    assert results['finalState'].nParticles == 8
    assert results['nFrames'] == 3


def testParserDefaults():
    args = buildParser().parse_args([])
    assert args.preset == 'pipeSegment'
    assert args.neighbor_search == 'spatialHash'
    assert args.no_export is False
    assert args.steps is None


def testMainSmallCube(tmp_path):
    exitCode = main([
        '--preset', 'smallCube', '--steps', '3', '--output-dir', str(tmp_path),
    ])
    assert exitCode == 0
    assert len(list(tmp_path.glob('pipeFlowSim_smallCube_*.json'))) == 1


def testMainReportsInvalidTimeStep(capsys):
    exitCode = main(['--preset', 'smallCube', '--dt', '-0.01', '--no-export'])
    assert exitCode == 1
    assert 'SIMULATION FAILED' in capsys.readouterr().err


def testSetupLoggingReplacesHandlers(tmp_path):
    logFile = tmp_path / 'run.log'
    setupLogging(logging.DEBUG)
    logger = setupLogging(logging.INFO, logFile=str(logFile))

    assert logger.name == 'PipeFlowSim'
    assert logger.level == logging.INFO
    assert len(logger.handlers) == 2

    logging.getLogger('PipeFlowSim.sph.sphEngine').info('engine message')
    for handler in logger.handlers:
        handler.flush()
    assert 'engine message' in logFile.read_text()

    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
