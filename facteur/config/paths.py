"""Where facteur keeps its configuration (XDG layout).

- Config: ~/.config/facteur/config.toml
"""

from pathlib import Path

CONFIG_DIR = Path.home() / ".config" / "facteur"
CONFIG_FILE = CONFIG_DIR / "config.toml"


def ensure_config_dir() -> Path:
    """Create the config directory, readable by its owner only (700).

    Returns the config directory path.
    """
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    # config.toml may hold mailbox passwords
    CONFIG_DIR.chmod(0o700)
    return CONFIG_DIR
