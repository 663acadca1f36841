"""
Entry point for ``python -m pipeline_simulator``.
"""

from pipeline_simulator.main import main

if __name__ == "__main__":
    main()
