# -- Physical Constants for SPH Pipe Flow Simulation -- #

'''
Default physical and numerical constants for the SPH pipe flow engine.
All values in SI units unless otherwise noted.

References:
-----------
Muller et al. (2003) -- Particle-based fluid simulation for
    interactive applications
Monaghan (1992) -- Smoothed Particle Hydrodynamics

Sean Bowman [02/12/2026]
'''

#--------------------------------------------------------------------#
# -- Fluid Properties -- #
#--------------------------------------------------------------------#

# Rest density (freshwater at 20C) [kg/m^3]
restDensity: float = 1000.0

# Pairwise velocity-difference viscosity coefficient [1/s]
viscosityCoefficient: float = 0.1

# Default inlet flow rate used by presets [m^3/s]
flowRate: float = 1.0

#--------------------------------------------------------------------#
# -- SPH Numerical Parameters -- #
#--------------------------------------------------------------------#

# Kernel smoothing radius h [m]
# Fixed engine constant, independent of particle spacing.
# Spacing should be <= h for particles to have neighbors.
kernelRadius: float = 0.1

# Pressure stiffness per unit flow rate
# stiffness = flowRate * stiffnessPerFlowRate
stiffnessPerFlowRate: float = 50.0

# Default time step [s]
timeStep: float = 0.01

# Velocity multiplier applied to the wall-normal component on collision
# v_n' = -wallDamping * v_n
wallDamping: float = 0.5

# Number of spatial dimensions (engine is 3D only)
dimensions: int = 3
