"""Configuration for the sculpt compiler.

Settings come from the environment, or from a .env file found from the
working directory upwards. Variables already set in the environment win.
"""

import os
from dotenv import find_dotenv, load_dotenv

load_dotenv(find_dotenv(usecwd=True))

# Ray-marching step size used unless the program calls setStepSize()
DEFAULT_STEP_SIZE = float(os.getenv("SCULPT_STEP_SIZE", "0.85"))

# Initial value of every scope distance: far enough to lose any min()
SENTINEL_DISTANCE = "100.0"

# Digits after the decimal point when numbers are written into GLSL
NUMBER_PRECISION = 8

# One level of indentation in emitted GLSL
INDENT = "    "

# Base indentation of emitted statements inside the function templates
BASE_INDENT_LEVEL = 1

# Alternate binding catalogue (YAML); None means the packaged bindings.yaml
BINDINGS_PATH = os.getenv("SCULPT_BINDINGS") or None

# Names the base scope falls back to when there is no parent scope
ROOT_POSITION = "p"
ROOT_MATERIAL = "material"
