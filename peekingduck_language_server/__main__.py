"""Run the language server with ``python -m peekingduck_language_server``."""

from .server.run_server import main

if __name__ == '__main__':
    main()
