"""gradle-select builder module.

Turns a selection into Gradle runs: bounded batches, generated settings
files and the Gradle process itself.

Key pieces:
    partition       - Order-preserving batches of at most N projects
    write_manifest  - Gradle settings file including a set of projects
    GradleRunner    - Gradle process spawning and exit-code checking
"""

from .batches import partition
from .gradle import GradleRunner
from .manifest import HEADER, format_entry, write_manifest

__all__ = [
    "partition",
    "write_manifest",
    "format_entry",
    "HEADER",
    "GradleRunner",
]
