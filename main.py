#!/usr/bin/env python3
"""
Development entry point for the study assistant.
For installed use: study-assistant
"""
import sys
from pathlib import Path

# Add src directory to path for development mode
current_dir = Path(__file__).parent
src_dir = current_dir / "src"
sys.path.insert(0, str(src_dir))

from study_assistant.cli import main

if __name__ == "__main__":
    sys.exit(main())
