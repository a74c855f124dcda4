"""Allow ``python -m scm_versioning``."""

from __future__ import annotations

from .cli import main

main()
