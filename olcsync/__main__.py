"""Permite ejecutar: python -m olcsync"""

from olcsync.cli.app import main

if __name__ == "__main__":
    main()
