"""ignorectl - find and delete files excluded by layered .gitignore rules."""

__version__ = "0.1.0"
