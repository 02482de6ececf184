from __future__ import annotations

from mpd_fzf.cli import main

raise SystemExit(main())
