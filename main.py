#!/usr/bin/env python3

"""main.py: Main logic file for Retinex PDE processing on a folder of images"""

__author__ = "Gian-Mateo (GM) Tifone"
__copyright__ = "2025, RIT MISHA"
__credits__ = ["Gian-Mateo Tifone"]
__license__ = "MIT"
__version__ = "1.0.0"
__maintainer__ = "MISHA Team"
__email__ = "mt9485@rit.edu"
__status__ = "Development" # "Development", or "Production".

# ---------------
# Useful commands
# ---------------
"""
// (Install) Package and console script
pip install -e .[test]

// (Run) Single image, 1.5% flattening per side
retinex-pde -t 5 in.png norm.png rtnx.png

// (Test)
pytest
"""


# --------------------------------------------------------------------------------------------
# Imports
# --------------------------------------------------------------------------------------------
import logging
from time import time

from retinex_pde import RetinexConfig, process_directory


# --------------------------------------------------------------------------------------------
# Driver Code
# --------------------------------------------------------------------------------------------
def main():
    logging.basicConfig(level=logging.INFO)
    start = time()
    process_directory(
        # Input information
        input_dir="data/input",
        output_dir="data/output",
        input_image_types=("png", "tif"),
        config=RetinexConfig(
            # Retinex parameters
            threshold_low=5.0,
            flatten_min=0.015,
            flatten_max=0.015,
            # Throughput
            max_workers=3,
            # Debug
            verbose=True,
        ),
    )
    print(f"\n[main] - Execution finished -\nRuntime = {(time() - start):.2f}")



# --------------------------------------------------------------------------------------------
# Executing Main
# --------------------------------------------------------------------------------------------
if __name__ == "__main__":
    main()
