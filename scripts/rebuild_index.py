#!/usr/bin/env python3
"""
Index Rebuild Utility
Re-embeds every stored memory with a freshly trained corpus model.

Stored embeddings are frozen at the model snapshot they were written with;
run this after bulk imports or an EMBED_DIM change to bring them all onto
the current model.
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add repository root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from agent_memories.core.config import VERSION, get_db_path, get_memory_config, validate_memory_config
from agent_memories.core.errors import MemoryStoreError
from agent_memories.core.repository import MemoryRepository
from agent_memories.vector.sqlite_store import SqliteVectorIndex


async def rebuild(db_path: str) -> int:
    config = get_memory_config()
    repository = MemoryRepository(SqliteVectorIndex(db_path, config.embedding_dimension), config)
    await repository.initialize()

    count = await repository.reindex()
    stats = repository.get_corpus_statistics()
    print(f"✓ Re-embedded {count} memories")
    print(f"Corpus: {stats.corpus_size} documents, {stats.vocabulary_size} terms, "
          f"latent basis: {'yes' if stats.has_latent_basis else 'no'}")
    print(f"Quality: {stats.quality} - {stats.recommendation}")
    return count


def main():
    """Rebuild vector embeddings for every memory in the SQLite index."""
    parser = argparse.ArgumentParser(description="Re-embed all stored memories")
    parser.add_argument("--db-path", default=None, help="SQLite index path (defaults to DB_PATH)")
    args = parser.parse_args()

    issues = validate_memory_config()
    if issues:
        for issue in issues:
            print(f"ERROR: {issue}")
        sys.exit(1)

    db_path = args.db_path or get_db_path()

    print(f"Starting memory re-embedding for {db_path} (agent-memories {VERSION})...")
    try:
        asyncio.run(rebuild(db_path))
    except MemoryStoreError as e:
        print(f"ERROR: Rebuild failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
