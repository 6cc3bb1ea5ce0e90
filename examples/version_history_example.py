"""
Example demonstrating provenance tracking across document versions.

This example edits a short document through a Workspace and then asks the
version history where each part of the latest text came from:
- Which spans of the first version survive
- Where pasted text was copied from
- What a span looked like a given number of edits ago
"""

import logging

from python_hyperdoc import Selection, Workspace


def main():
    """Walk through a few edits and query their history."""
    logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    ws = Workspace()
    notes = ws.load("The quick brown fox\n\njumps over the dog")
    quotes = ws.load("lazy")

    print("=" * 60)
    print("Version history example")
    print("=" * 60)

    # Example 1: Edit the notes
    print("\n1. Editing:")
    ws.paste(ws.copy(quotes, 0, 4), Selection.caret(34), target=notes)
    ws.insert_char(Selection.caret(38), " ")
    ws.delete_selection(Selection(4, 10))
    latest = ws.current
    for version in ws.history():
        print(f"   {version.id}: {version.flatten()}")

    # Example 2: Provenance of the latest version
    print("\n2. Provenance of the latest edit:")
    print(f"   {latest.provenance}")

    # Example 3: What survives from the first version of the notes
    history = ws.history()
    print("\n3. Surviving spans of the first version:")
    for addr in history.survivors(notes):
        print(f"   {addr}: {notes.read_range(addr.start, addr.end)!r}")

    # Example 4: Where the latest text came from, back to the root
    print("\n4. Origins of the latest text:")
    for addr in history.origin_of(latest.full_address(), steps=len(history) - 1):
        source = ws.get(addr.basis)
        print(f"   {addr}: {source.read_range(addr.start, addr.end)!r}")


if __name__ == "__main__":
    main()
