"""gradle-select: build only the Gradle projects you care about.

Scans a modular source tree for Gradle projects, narrows them down by name,
shell predicate and git changes, then runs Gradle on the selection in
bounded batches or writes a settings file including just those projects.

Usage::

    from gradle_select.config import SelectionOptions
    from gradle_select.pipeline import Pipeline

    stats = await Pipeline(SelectionOptions(regexp="^app")).run()
"""

__version__ = "0.3.0"
