"""Entry point for running WorkflowDraw as a module: python -m workflowdraw"""

import sys
from .ui import main

if __name__ == "__main__":
    sys.exit(main())
