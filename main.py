#!/usr/bin/env python3
"""
Game Boy CPU core
Runs a raw LR35902 program image through the processor and memory core.
"""

import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(os.path.abspath(__file__)), 'src'))

from gbcore.cli import main


if __name__ == "__main__":
    sys.exit(main())
