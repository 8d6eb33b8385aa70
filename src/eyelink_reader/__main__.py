"""
Entry point for running eyelink_reader as a module.

Usage:
    python -m eyelink_reader convert recording.jsonl --output ./tables
    python -m eyelink_reader preamble recording.jsonl
    python -m eyelink_reader fields
"""

from .cli import main

if __name__ == "__main__":
    main()
