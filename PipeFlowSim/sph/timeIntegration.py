# -- Kick-Drift Integrator -- #

'''
Semi-implicit Euler update for the pipe flow particles.

The engine accumulates one acceleration per particle from the state at
the start of the step. The integrator then applies it in two half
moves: the velocity kick first, and the position drift with the already
kicked velocity. Walls are resolved afterwards by BoxBoundary.

Sean Bowman [02/12/2026]
'''

from __future__ import annotations

from typing import Protocol

from PipeFlowSim.sph.particles import ParticleSystem


class StepIntegrator(Protocol):
    '''Anything that moves a ParticleSystem forward by dt in place.'''

    def integrate(self, particles: ParticleSystem, dt: float) -> None:
        ...


class SymplecticEuler:
    '''
    Kick then drift.

        v' = v + a * dt
        x' = x + v' * dt

    Using v' rather than v in the drift is what makes the scheme
    semi-implicit; an isolated particle with a = 0 moves by exactly
    v * dt.
    '''

    def integrate(self, particles: ParticleSystem, dt: float) -> None:
        '''
        Update velocities and positions in place.

        Parameters:
        -----------
        particles : ParticleSystem
            Particles whose accelerations are already accumulated
        dt : float
            Step size [s]
        '''
        particles.velocities += particles.accelerations * dt
        particles.positions += particles.velocities * dt
