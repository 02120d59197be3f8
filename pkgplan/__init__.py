"""pkgplan — compile package-management intents into shell scripts."""

__version__ = "0.1.0"
