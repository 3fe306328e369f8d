#!/usr/bin/env python3
"""
Wrapper script to run the audio browse server from a source checkout.
Ensures the project root is importable before starting uvicorn.
"""
import sys
import os
from pathlib import Path

project_root = Path(__file__).parent.resolve()

# Relative MP3_PATH / .env lookups resolve against the project root
os.chdir(str(project_root))

if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

if __name__ == "__main__":
    from audio_server.server import main
    main()
