"""gradle-select project discovery and selection.

Finds Gradle projects in a source tree and narrows them down to the set that
should be built.

Key classes:
    DirectoryScanner   - Depth-bounded walk registering build-file directories
    ProjectRegistry    - Projects of one run and their selection state
    PatternMatcher     - POSIX ERE name matching
    ChangeSetResolver  - Directories changed in git since a commit
"""

from .changes import ChangeSetResolver, collect_prefixes, find_vc_root
from .matcher import PatternMatcher
from .naming import project_coordinates
from .registry import SELECTED_STATES, Project, ProjectRegistry, ProjectState
from .scanner import DirectoryScanner

__all__ = [
    # Naming
    "project_coordinates",
    # Scanning
    "DirectoryScanner",
    # Registry
    "Project",
    "ProjectRegistry",
    "ProjectState",
    "SELECTED_STATES",
    # Matching
    "PatternMatcher",
    # Changes
    "ChangeSetResolver",
    "collect_prefixes",
    "find_vc_root",
]
