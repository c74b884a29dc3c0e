"""Allow running as: python -m rps_dapp"""

import sys

from .cli import main

sys.exit(main())
