"""Built-in default configuration for the source provider."""

# Default configuration that serves as the base for all other configs
DEFAULT_CONFIG = {
    "version": "1.0",
    "settings": {
        "workspace_dir": "~/.cache/source-provider",
        "target_dirs": ["build/sources"],
        "registry_url": "https://static.crates.io/crates",
        "user_agent": "source-provider",
        "timeout": 30.0,
        "git_executable": "git",
    },
    "sources": {},
}
