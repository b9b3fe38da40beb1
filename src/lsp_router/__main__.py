"""Allow `python -m lsp_router`."""

import sys

from lsp_router.cli import main

sys.exit(main())
