"""
CLI to delete every indexed chunk of a session.

Example:
    python -m scripts.wipe_session --session-id demo
"""

from __future__ import annotations

import argparse
from contextlib import closing

from pdf_assistant.config import setup_logging
from pdf_assistant.vector_store import get_vector_store


def main() -> None:
    setup_logging()
    parser = argparse.ArgumentParser(description="Wipe all chunks of a session.")
    parser.add_argument("--session-id", "-s", required=True, help="Session to wipe")
    args = parser.parse_args()

    with closing(get_vector_store()) as store:
        deleted = store.delete_by_session(args.session_id)

    print(f"Deleted {deleted} chunks for session {args.session_id}")


if __name__ == "__main__":
    main()
