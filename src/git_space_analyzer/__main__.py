"""Allow running as `python -m git_space_analyzer`."""

from .cli import main

if __name__ == "__main__":
    main()
