# -- Poly6 Kernel Tests -- #

'''
Compact support, positivity and batch consistency of the Poly6 kernel.

Sean Bowman [02/12/2026]
'''

import math

import numpy as np
import pytest

from PipeFlowSim.sph.errors import InvalidParameterError
from PipeFlowSim.sph.kernels import Poly6Kernel, createKernel


H = 0.1


def testPoly6PeakValue():
    '''W(0, h) = 315 / (64 pi h^3).'''
    kernel = Poly6Kernel()
    expected = 315.0 / (64.0 * math.pi * H ** 3)
    assert kernel.evaluate(0.0, H) == pytest.approx(expected, rel=1e-12)


def testPoly6ExactlyZeroAtAndBeyondSupport():
    '''The kernel is exactly zero for r >= h.'''
    kernel = Poly6Kernel()
    for r in (H, 1.0000001 * H, 2.0 * H, 10.0):
        assert kernel.evaluate(r, H) == 0.0, f'W({r}, h) should be exactly 0'

    batch = kernel.evaluateBatch(np.array([H, 1.5 * H, 3.0]), H)
    assert np.all(batch == 0.0)


def testPoly6NonNegativeInsideSupport():
    '''No negative values anywhere in [0, h], including just below h.'''
    kernel = Poly6Kernel()
    distances = np.concatenate([
        np.linspace(0.0, H, 1001),
        H * (1.0 - np.logspace(-15, -6, 50)),
    ])

    batch = kernel.evaluateBatch(distances, H)
    assert np.all(batch >= 0.0), f'Negative kernel value: {batch.min()}'
    for r in distances:
        assert kernel.evaluate(float(r), H) >= 0.0


def testPoly6MonotonicallyDecreasing():
    kernel = Poly6Kernel()
    values = kernel.evaluateBatch(np.linspace(0.0, H, 200), H)
    assert np.all(np.diff(values) <= 0.0)


def testPoly6BatchMatchesScalar():
    '''Vectorized and scalar evaluation agree for the same distances.'''
    kernel = Poly6Kernel()
    distances = np.linspace(0.0, 1.2 * H, 97)

    batch = kernel.evaluateBatch(distances, H)
    scalar = np.array([kernel.evaluate(float(r), H) for r in distances])

    np.testing.assert_allclose(batch, scalar, rtol=1e-12, atol=0.0)


def testPoly6ScalesWithSmoothingRadius():
    '''Peak value scales as 1 / h^3.'''
    kernel = Poly6Kernel()
    ratio = kernel.evaluate(0.0, 0.05) / kernel.evaluate(0.0, 0.1)
    assert ratio == pytest.approx(8.0, rel=1e-12)


def testCreateKernel():
    assert isinstance(createKernel('poly6'), Poly6Kernel)
    with pytest.raises(InvalidParameterError):
        createKernel('cubicSpline')
