"""Allow `python -m worksheet_studio`."""

from worksheet_studio.cli import main

raise SystemExit(main())
