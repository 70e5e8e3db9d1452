#!/usr/bin/env python3
"""typeforge: type-specialized C container generator.

Thin entry point that delegates to src.typeforge.main.
"""

from src.typeforge.main import main

if __name__ == "__main__":
    main()
