# Default parameters for the virtual landscape simulations.

import numpy as np

## ------------------------------------------------- GLOBAL PARAMETERS -------------------------------------------------
#region

# Environmental grid (two socio-environmental variables, each rescaled to 0-1)
GRID_MINS = (0.0, 0.0) # Minimum of e1 and e2
GRID_MAXS = (1.0, 1.0) # Maximum of e1 and e2
N_COORDS = 121 # Total grid points, must be a perfect square (11 x 11)

# Probability surface kernels
MODE_RANGE = (1, 4) # Number of kernels per surface (inclusive)
CENTER_RANGE = (0.1, 0.9) # Kernel centre, for each coordinate
LOG_SIGMA_RANGE = (-6.9, -1.87) # log(sigma), sigma ~ 0.001 to 0.155

# Landscapes
LANDSCAPE_SIZE = 50 # Patches per landscape
NUM_LANDSCAPES = 1000 # Replicate landscapes per scenario

RANDOM_SEED = 42
N_PROCESSES = 4
OUTPUT_DIR = "figures"

#endregion

## ------------------------------------------------- SERVICE DEFINITIONS -----------------------------------------------
#region

# Two hypothetical ecosystem services: (peak, optimum, covariance)
SERVICE_1 = (1.0, (0.3, 0.3), [[0.02, 0.0], [0.0, 0.02]])
SERVICE_2 = (1.0, (0.7, 0.7), [[0.02, 0.0], [0.0, 0.02]])

# Pairwise interaction coefficients, diagonal is ignored
INTERACTIONS = np.array([[0.0, -0.5],
                         [-0.5, 0.0]])

# Offsets of service 2's optimum from service 1's, one scenario per shift
OVERLAP_SHIFTS = [0.0, 0.1, 0.2, 0.3, 0.4, 0.5]

#endregion

CONFIG = {
    "LANDSCAPE_SIZE": LANDSCAPE_SIZE,
    "NUM_LANDSCAPES": NUM_LANDSCAPES,
    "GRID_MINS": GRID_MINS,
    "GRID_MAXS": GRID_MAXS,
    "N_COORDS": N_COORDS,
    "N_PROCESSES": N_PROCESSES,
}
