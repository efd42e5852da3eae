"""
CLI entry point, when used as a module: `python -m crkit`.
"""
from crkit import cli

if __name__ == '__main__':
    cli.main()
