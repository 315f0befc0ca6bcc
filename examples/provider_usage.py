"""Example demonstrating SourceProvider usage.

Fetches one source of each kind into a shared workspace and materializes
throwaway build directories from them.
"""

import sys
from pathlib import Path

from source_provider import SourceError, SourceProvider, Workspace


def main() -> int:
    """Fetch three sources and copy each into ./build."""
    workspace = Workspace(Path.home() / ".cache" / "source-provider")
    build_root = Path("build")

    providers = {
        "serde": SourceProvider.from_registry("serde", "1.0.197"),
        "rand": SourceProvider.from_repository("https://github.com/rust-random/rand"),
        "local": SourceProvider.from_local_directory(Path(__file__).parent),
    }

    for name, provider in providers.items():
        print(f"Fetching {provider}...")
        try:
            provider.fetch(workspace)

            # Anything at the destination is deleted first
            dest = build_root / name
            provider.materialize(workspace, dest)
        except SourceError as e:
            print(f"✗ {e}")
            return 1

        print(f"✓ {provider} -> {dest}")
        if commit := provider.commit(workspace):
            print(f"  at commit {commit}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
