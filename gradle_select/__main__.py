"""Allow ``python -m gradle_select``."""

from gradle_select.pipeline import main

main()
