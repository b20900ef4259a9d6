"""Allow running mockrig as a module: python -m mockrig."""

from mockrig.cli import main

if __name__ == "__main__":
    main()
