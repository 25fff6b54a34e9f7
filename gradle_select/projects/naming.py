"""Project identifiers derived from directory nesting.

``app/feature/android`` becomes the Gradle project ``app:feature-android``
living at ``app/feature/android``.
"""

from __future__ import annotations

import os
from collections.abc import Sequence

from gradle_select.config import RESERVED_SEGMENTS

IDENTIFIER_SEP = ":"
RESERVED_SEP = "-"


def project_coordinates(segments: Sequence[str]) -> tuple[str, str]:
    """Return ``(identifier, relative_path)`` for a project directory.

    Args:
        segments: Directory names from the scan root down to the directory
            holding the build descriptor. Segments are used verbatim, so
            they must not contain ``:`` themselves.

    Examples::

        project_coordinates(["a", "b", "android"]) -> ("a:b-android", "a/b/android")
        project_coordinates(["core"])              -> ("core", "core")
        project_coordinates([])                    -> ("", "")
    """
    relative_path = os.sep.join(segments)
    if len(segments) > 1 and segments[-1] in RESERVED_SEGMENTS:
        identifier = (
            IDENTIFIER_SEP.join(segments[:-1]) + RESERVED_SEP + segments[-1]
        )
    else:
        identifier = IDENTIFIER_SEP.join(segments)
    return identifier, relative_path
