"""Allow ``python -m agentseenoevil``."""

import sys

from agentseenoevil.cli.app import main


sys.exit(main())
