"""Allow ``python -m vast_stitch``."""

import sys

from .cli import main


sys.exit(main())
