"""Allow ``python -m mayberun``."""

from mayberun.cli import main

raise SystemExit(main())
