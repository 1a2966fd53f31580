"""Module entrypoint for the project-model CLI."""

from __future__ import annotations

from cli.app import app


def main() -> None:
    """Run the project-model CLI."""
    app.meta()


if __name__ == "__main__":
    main()
