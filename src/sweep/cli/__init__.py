"""sweep command-line interface."""
