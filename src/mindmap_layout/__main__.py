"""Allow running as ``python -m mindmap_layout``."""

import sys

from mindmap_layout.cli import main

sys.exit(main())
