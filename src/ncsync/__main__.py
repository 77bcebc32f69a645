"""Allow ``python -m ncsync``."""

from ncsync.cli import main

if __name__ == "__main__":
    main()
