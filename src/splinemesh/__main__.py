"""Command-line interface."""
from splinemesh.main import main

if __name__ == "__main__":
    main()
