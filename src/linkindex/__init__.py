# Licensed under the Apache License, Version 2.0
"""Record hardlink groups of a directory tree and replay them elsewhere."""

__version__ = "0.1.0"
