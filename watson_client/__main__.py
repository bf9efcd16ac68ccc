"""Package entry point for ``python -m watson_client``.

Delegates straight to the CLI's main() function.
"""

from watson_client.cli import main

if __name__ == "__main__":
    main()
