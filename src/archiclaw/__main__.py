"""Allow ``python -m archiclaw``."""

import sys

from archiclaw.cli import main

sys.exit(main())
