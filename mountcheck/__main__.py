"""Allow running as python -m mountcheck."""

import sys

from mountcheck.cli import main

sys.exit(main())
