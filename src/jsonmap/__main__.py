"""Module entry point to run the code without modifications."""

from jsonmap.cli import run_main

if __name__ == "__main__":
    run_main()
