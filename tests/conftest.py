# -- Shared Test Fixtures -- #

'''
Fixtures shared by the PipeFlowSim test modules.

Sean Bowman [02/12/2026]
'''

from __future__ import annotations

import pytest

from PipeFlowSim.sph.protocols import BoundingBox, FluidParameters
from PipeFlowSim.sph.sphEngine import SphEngine


@pytest.fixture
def unitBox() -> BoundingBox:
    '''1 m cube with its lower corner at the origin.'''
    return BoundingBox.fromSize((1.0, 1.0, 1.0))


@pytest.fixture
def defaultParameters() -> FluidParameters:
    '''Default fluid parameters (viscosity 0.1, rho0 1000, flow rate 1, dt 0.01).'''
    return FluidParameters()


@pytest.fixture
def makeEngine(unitBox, defaultParameters):
    '''Factory for engines inside the unit box.'''
    def _make(neighborSearch: str = 'spatialHash', parameters: FluidParameters | None = None, **kwargs) -> SphEngine:
        return SphEngine(
            bounds=unitBox,
            parameters=parameters or defaultParameters,
            neighborSearch=neighborSearch,
            **kwargs,
        )
    return _make
