#!/usr/bin/env python3
"""CLI wrapper for running the fileshare tool from a source checkout."""

from __future__ import annotations

import sys

from fileshare_tool.main import main


if __name__ == "__main__":
    sys.exit(main())
