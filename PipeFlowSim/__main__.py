# -- PipeFlowSim CLI -- #

import sys

from PipeFlowSim.runner import main

sys.exit(main())
