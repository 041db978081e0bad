"""Entry point for running avsh as a module.

This allows running the CLI with:
    python -m avsh
"""

from avsh.cli.main import main

if __name__ == "__main__":
    main()
