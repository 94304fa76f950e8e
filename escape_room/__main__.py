"""Allow running as: python -m escape_room"""

from .cli import main

if __name__ == "__main__":
    main()
