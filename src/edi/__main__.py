from __future__ import annotations

from .editor import main

main()
