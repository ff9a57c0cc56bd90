"""Allow ``python -m liquidator``."""
from .cli import main

if __name__ == "__main__":
    main()
