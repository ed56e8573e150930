"""
Term statistics and TF-IDF weighting.

Tokenization is lower-case + whitespace split. The vocabulary keeps first-seen
order so matrix columns are reproducible within one retrain cycle.
"""

import math
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Sequence

import numpy as np

from ..core.errors import EmptyCorpusError


def tokenize(text: str) -> List[str]:
    """Split text into lower-case whitespace-delimited terms."""
    return text.lower().split()


@dataclass
class TfIdfModel:
    """Vocabulary, document frequencies and the dense N x |V| weight matrix."""

    vocabulary: List[str]
    document_frequencies: Dict[str, int]
    n_documents: int
    matrix: np.ndarray
    term_index: Dict[str, int] = field(default_factory=dict)

    def __post_init__(self):
        if not self.term_index:
            self.term_index = {term: i for i, term in enumerate(self.vocabulary)}

    @property
    def vocabulary_size(self) -> int:
        return len(self.vocabulary)

    def idf(self, term: str) -> float:
        """ln(N / df) for an in-corpus term, 0.0 for unknown terms."""
        df = self.document_frequencies.get(term, 0)
        if df < 1:
            return 0.0
        return math.log(self.n_documents / df)


class TfIdfVectorizer:
    """Builds TF-IDF models from documents and weights new text against them."""

    def compute(self, texts: Sequence[str]) -> TfIdfModel:
        """
        Build vocabulary, document frequencies and the TF-IDF matrix.

        Args:
            texts: Raw document texts, one row per document

        Returns:
            TfIdfModel with rows in input order

        Raises:
            EmptyCorpusError: if texts is empty
        """
        if not texts:
            raise EmptyCorpusError()

        term_counts = [Counter(tokenize(text)) for text in texts]

        vocabulary: List[str] = []
        term_index: Dict[str, int] = {}
        document_frequencies: Dict[str, int] = Counter()
        for counts in term_counts:
            for term in counts:
                if term not in term_index:
                    term_index[term] = len(vocabulary)
                    vocabulary.append(term)
                document_frequencies[term] += 1

        n_documents = len(texts)
        idf = np.array(
            [math.log(n_documents / document_frequencies[term]) for term in vocabulary],
            dtype=np.float64,
        )

        matrix = np.zeros((n_documents, len(vocabulary)), dtype=np.float64)
        for row, counts in enumerate(term_counts):
            length = sum(counts.values())
            if length == 0:
                continue
            for term, count in counts.items():
                column = term_index[term]
                matrix[row, column] = (count / length) * idf[column]

        return TfIdfModel(
            vocabulary=vocabulary,
            document_frequencies=dict(document_frequencies),
            n_documents=n_documents,
            matrix=matrix,
            term_index=term_index,
        )

    def vectorize(self, text: str, model: TfIdfModel) -> np.ndarray:
        """
        Weight a text that is not (or not yet) part of the trained corpus.

        The text is treated as one extra document, so IDF uses N + 1 and each
        term's document frequency counts the text itself. Terms outside the
        vocabulary are appended after it in first-seen order; they only survive
        into an embedding on the fallback path, since the latent basis has no
        rows for them.

        Returns:
            Vector of length |vocabulary| + |unseen terms|
        """
        tokens = tokenize(text)
        if not tokens:
            return np.zeros(model.vocabulary_size, dtype=np.float64)

        counts = Counter(tokens)
        positions = dict(model.term_index)
        for term in counts:
            if term not in positions:
                positions[term] = len(positions)

        effective_size = model.n_documents + 1
        length = len(tokens)
        vector = np.zeros(len(positions), dtype=np.float64)
        for term, count in counts.items():
            df = model.document_frequencies.get(term, 0) + 1
            vector[positions[term]] = (count / length) * math.log(effective_size / df)

        return vector
