"""
Default configuration and library scaffolding.

Used by ``prompter init``. Existing files are never overwritten.
"""

import logging
from pathlib import Path
from typing import List, Optional, Tuple

from prompter.core.config import default_config_path, default_library_path


logger = logging.getLogger(__name__)

DEFAULT_CONFIG = """\
# prompter configuration
#
# Every table with a depends_on array is a profile. Entries ending in .md
# are files in the library directory; anything else names another profile.
#
# library = "~/.local/prompter/library"
# separator = "\\n"
# post_prompt = ""

[general.style]
depends_on = ["general/style.md"]

[python.api]
depends_on = ["general.style", "python/api.md"]
"""

DEFAULT_LIBRARY_FILES = {
    "general/style.md": "# Style\n\n- Prefer small, focused changes.\n- Keep commits reviewable.\n",
    "python/api.md": "# Python APIs\n\n- Type public functions.\n- Raise specific exceptions.\n",
}


def init_scaffold(
    config_path: Optional[Path] = None,
    library_path: Optional[Path] = None
) -> Tuple[List[Path], List[Path]]:
    """
    Create the default config file and library files.

    Args:
        config_path: Config file to create (default: ~/.config/prompter/config.toml)
        library_path: Library directory to populate (default: ~/.local/prompter/library)

    Returns:
        Tuple of (created paths, skipped existing paths)
    """
    config_path = config_path or default_config_path()
    library_path = library_path or default_library_path()

    created: List[Path] = []
    skipped: List[Path] = []

    targets = [(config_path, DEFAULT_CONFIG)]
    targets.extend(
        (library_path / rel, body) for rel, body in DEFAULT_LIBRARY_FILES.items()
    )

    for path, body in targets:
        if path.exists():
            logger.debug(f"Keeping existing {path}")
            skipped.append(path)
            continue
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(body, encoding="utf-8")
        created.append(path)

    return created, skipped
