#!/usr/bin/env python3
"""Entry point for the triangle peg solitaire solver."""

from tripeg.cli import main


if __name__ == "__main__":
    main()
