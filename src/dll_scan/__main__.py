"""Allow ``python -m dll_scan``."""

from dll_scan.cli import main

raise SystemExit(main())
