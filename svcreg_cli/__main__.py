"""console script entrypoint for the svcreg CLI."""

from .main import main

if __name__ == "__main__":
    raise SystemExit(main())
