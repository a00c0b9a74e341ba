import os
import sys
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import dcrscript
from dcrscript import (
    addresses,
    classes,
    errors,
    functions,
    interfaces,
    parsing,
    standard,
    tools,
)
