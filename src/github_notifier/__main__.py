"""Entry point for `python -m github_notifier`."""

import sys


def main():
    from github_notifier.app import run
    sys.exit(run())


if __name__ == "__main__":
    main()
