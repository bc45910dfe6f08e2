#!/usr/bin/env python3
"""
Schema Review Runner - reviews the current pull request from a CI job
"""

import sys
from pathlib import Path
from dotenv import load_dotenv

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


def main():
    """Run the schema review pipeline"""
    # Local runs read credentials from .env; CI provides them in the environment
    env_path = Path(__file__).parent.parent / ".env"
    if env_path.exists():
        load_dotenv(env_path)
        print(f"✅ Environment variables loaded from {env_path}")

    from schema_review.cli import main as cli_main

    return cli_main(sys.argv[1:])


if __name__ == "__main__":
    sys.exit(main())
