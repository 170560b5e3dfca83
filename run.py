#!/usr/bin/env python3
"""
Wrapper to run the headless demo from the repository root
without installing the package first.
"""
import sys
import os

# Add src to path FIRST
sys.path.insert(0, os.path.join(os.path.dirname(__file__), 'src'))

if __name__ == "__main__":
    from main import main, main_consent

    if len(sys.argv) > 1:
        mode = sys.argv[1].lower()

        if mode == "consent":
            main_consent()
        elif mode == "test":
            # Quick test mode: 120 frames only
            from utils.config import Config
            Config.DEMO_MAX_FRAMES = 120
            main()
        else:
            print(f"Unknown mode '{mode}'")
            print("Available modes: consent, test (120 frames)")
            sys.exit(1)
    else:
        main()
