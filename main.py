# main.py

"""Run bike_tracker from a source checkout: ``python main.py --help``."""

from bike_tracker.cli.main import main

if __name__ == "__main__":
    main()
