"""Demo that exercises :class:`ollama_tag.TagStore` against a scratch database.

Run with the virtual environment activated::

    python examples/demo_tags.py

Pass a path as the first argument to keep the database around instead of
using a temporary directory.
"""

import logging
import os
import sys
import tempfile
from pprint import pprint

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
SRC_DIR = os.path.join(PROJECT_ROOT, "src")
if SRC_DIR not in sys.path:
    sys.path.insert(0, SRC_DIR)

from ollama_tag import AlreadyExistsError, TagStore, new_tag

logging.basicConfig(level=logging.INFO)


def run(db_path: str) -> None:
    store = TagStore(db_path)

    for tag in (
        new_tag("llama3", category="llm", description="General purpose chat model"),
        new_tag("nomic-embed", category="embedding", description="Text embeddings for llama pipelines"),
        new_tag("llava", category="vision", metadata={"modalities": "image,text"}),
    ):
        try:
            store.add(tag)
        except AlreadyExistsError as exc:
            print(f"Skipping: {exc}")

    print(f"\nAll tags in {store.path}:")
    for tag in store.list():
        print(f"  - {tag['name']} [{tag.get('category', '')}]")

    print("\nSearch 'llama':")
    pprint(store.search("llama"))

    print("\nSearch 'llama' in category 'llm':")
    pprint(store.search("llama", "llm"))

    store.update("llava", description="Vision-language model")
    pprint(store.get("llava"))

    print(f"\nBackup written to {store.backup()}")


def main() -> None:
    if len(sys.argv) > 1:
        run(sys.argv[1])
        return
    with tempfile.TemporaryDirectory() as tmp:
        run(os.path.join(tmp, "tags.json"))


if __name__ == "__main__":
    main()
