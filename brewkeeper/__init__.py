"""brewkeeper — converge installed Homebrew packages to a declared set."""

__version__ = "0.1.0"
