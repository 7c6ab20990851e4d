# -- SPH Smoothing Kernels -- #

'''
Smoothing kernel functions for SPH density estimation.

Implements the Poly6 kernel of Muller et al. in 3D. The kernel
provides the weighting function W(r, h) used to sum neighbor
contributions into a particle's density.

Key properties of the Poly6 kernel:
- Compact support: W = 0 for r >= h (exactly, not approximately)
- Positivity: W >= 0 within support
- Depends on r only through r^2, so no square root is needed
  inside the support

References:
-----------
Muller, Charypar & Gross (2003) -- Particle-based fluid simulation
    for interactive applications

Sean Bowman [02/12/2026]
'''

from __future__ import annotations

import math
from typing import Protocol

import numpy as np

from PipeFlowSim.sph.errors import InvalidParameterError


######################################################################
# -- Kernel Protocol -- #
######################################################################

class SphKernel(Protocol):
    '''Protocol for SPH smoothing kernel functions.'''

    def evaluate(self, r: float, h: float) -> float:
        '''
        Evaluate kernel W(r, h).

        Parameters:
        -----------
        r : float
            Distance between particles [m]
        h : float
            Smoothing radius [m]

        Returns:
        --------
        float : Kernel value [1/m^3]
        '''
        ...

    def evaluateBatch(self, distances: np.ndarray, h: float) -> np.ndarray:
        '''Evaluate W(r, h) for an array of distances.'''
        ...


######################################################################
# -- Poly6 Kernel -- #
######################################################################

class Poly6Kernel:
    '''
    Poly6 smoothing kernel in 3D.

    W(r, h) = sigma * (h^2 - r^2)^3    for 0 <= r < h
            = 0                          for r >= h

    sigma = 315 / (64 * pi * h^9)

    Rounding in (h^2 - r^2)^3 can produce tiny negative values for r
    just below h, so the result is clamped at zero.
    '''

    def _normalization(self, h: float) -> float:
        '''
        Compute normalization constant sigma for given h.

        Parameters:
        -----------
        h : float
            Smoothing radius [m]

        Returns:
        --------
        float : Normalization constant sigma [1/m^9]
        '''
        return 315.0 / (64.0 * math.pi * h ** 9)

    def evaluate(self, r: float, h: float) -> float:
        '''
        Evaluate Poly6 kernel W(r, h).

        Parameters:
        -----------
        r : float
            Distance between particles [m]
        h : float
            Smoothing radius [m]

        Returns:
        --------
        float : Kernel value [1/m^3]
        '''
        if r >= h:
            return 0.0

        diff = h * h - r * r
        return max(0.0, self._normalization(h) * diff ** 3)

    ######################################################################
    # -- Vectorized (Batch) Operations -- #
    ######################################################################

    def evaluateBatch(self, distances: np.ndarray, h: float) -> np.ndarray:
        '''
        Evaluate Poly6 kernel W(r, h) for an array of distances.

        Fully vectorized using NumPy -- no Python loops.

        Parameters:
        -----------
        distances : np.ndarray
            Array of distances [m], shape (N,)
        h : float
            Smoothing radius [m]

        Returns:
        --------
        np.ndarray : Kernel values, shape (N,)
        '''
        distances = np.asarray(distances, dtype=float)
        result = np.zeros_like(distances)

        active = distances < h
        diff = h * h - distances[active] ** 2
        result[active] = self._normalization(h) * diff ** 3

        np.maximum(result, 0.0, out=result)
        return result


######################################################################
# -- Kernel Factory -- #
######################################################################

def createKernel(kernelType: str = 'poly6') -> SphKernel:
    '''
    Create a kernel instance by type name.

    Parameters:
    -----------
    kernelType : str
        Kernel type: 'poly6'

    Returns:
    --------
    SphKernel : Kernel instance

    Raises:
    -------
    InvalidParameterError : If kernel type is unknown
    '''
    if kernelType == 'poly6':
        return Poly6Kernel()
    else:
        raise InvalidParameterError(f'Unknown kernel type: {kernelType}')
