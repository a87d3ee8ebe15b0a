"""Module entrypoint for ``python -m filelauncher``.

All argument parsing and launcher setup happen in ``filelauncher.cli``.
"""

from .cli import main


if __name__ == "__main__":
    main()
