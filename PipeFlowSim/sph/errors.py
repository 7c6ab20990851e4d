# -- SPH Engine Errors -- #

'''
Exception types raised by the SPH engine.

InvalidParameterError is raised synchronously by the call that
introduced a bad value, before any particle state is modified.
NumericInstabilityError is raised at the end of a step whose result
contains non-finite values.

Sean Bowman [02/12/2026]
'''


class SphError(Exception):
    '''Base class for all SPH engine errors.'''


class InvalidParameterError(SphError, ValueError):
    '''A parameter, region, spacing or time step is out of range or non-finite.'''


class NumericInstabilityError(SphError, RuntimeError):
    '''
    Particle state became non-finite during a step.

    Parameters:
    -----------
    field : str
        Name of the offending particle field ('positions', 'velocities', ...)
    index : int
        Index of the first particle with a non-finite value
    step : int
        Step number at which the instability was detected
    '''

    def __init__(self, field: str, index: int, step: int) -> None:
        self.field = field
        self.index = index
        self.step = step
        super().__init__(
            f'Non-finite {field} for particle {index} after step {step}'
        )
