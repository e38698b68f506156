"""CLI entrypoint for `python -m logview`."""

from logview.cli.main import app, main

__all__ = ["app", "main"]


if __name__ == "__main__":
    main()
