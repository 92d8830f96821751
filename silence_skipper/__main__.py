"""Package entry point for ``python -m silence_skipper``.

WHY: Python's ``-m`` flag looks for ``__main__.py`` inside the package
and executes it. Users run ``python -m silence_skipper simulate file.json``.

HOW: Delegates to the CLI's main() function.
"""

if __name__ == "__main__":
    from silence_skipper.cli import main
    main()
