from __future__ import annotations

"""
Optional dense-similarity signal for the matcher.

The engine is handed an ``EmbeddingProvider`` at construction: anything with
``embed(texts) -> (N, D) array`` satisfies the protocol, and
``NullEmbeddingProvider`` is the explicit "no embeddings" state. Whatever goes wrong on this path (library missing, model download
failing, provider raising, bad shapes) the scorer returns an empty ranking
and the matcher carries on keyword-only.
"""

import os
import threading
from collections import OrderedDict
from typing import Dict, List, Optional, Protocol, Sequence, runtime_checkable

import numpy as np
from loguru import logger

from .config import EMBEDDING_CACHE_SIZE, ENCODER_BATCH_SIZE, ENCODER_MODEL, HF_ENV_VARS
from .pipeline_types import RankingEntry, assign_ranks
from .schemas import Candidate, DetectedTechnology

# sentence-transformers is an optional extra; without it the bundled
# provider simply reports itself unavailable.
try:
    from sentence_transformers import SentenceTransformer  # type: ignore[import-not-found]
except ImportError:
    SentenceTransformer = None  # type: ignore


class EmbeddingUnavailable(RuntimeError):
    """Raised by providers that cannot produce vectors."""


@runtime_checkable
class EmbeddingProvider(Protocol):
    def embed(self, texts: Sequence[str]) -> np.ndarray:
        """Return one vector per input text, shape (len(texts), dim)."""


class NullEmbeddingProvider:
    """The absent state: never produces vectors, never gets called by the scorer."""

    def embed(self, texts: Sequence[str]) -> np.ndarray:
        raise EmbeddingUnavailable("no embedding provider configured")


def _ensure_hf_env() -> None:
    for key, val in HF_ENV_VARS.items():
        os.environ.setdefault(key, val)


class SentenceTransformerProvider:
    """
    Lazily loads a sentence-transformers encoder on first use.

    A failed load is remembered, so later calls fail fast instead of retrying
    a model download on every match.
    """

    def __init__(self, model_name: str = ENCODER_MODEL, device: str = "cpu"):
        self.model_name = model_name
        self.device = device
        self._model = None
        self._load_error: Optional[str] = None
        self._lock = threading.Lock()

    def _load(self):
        with self._lock:
            if self._model is not None:
                return self._model
            if self._load_error is not None:
                raise EmbeddingUnavailable(self._load_error)
            if SentenceTransformer is None:
                self._load_error = "sentence_transformers is not installed"
                logger.info("sentence_transformers not available; embedding signal disabled")
                raise EmbeddingUnavailable(self._load_error)

            _ensure_hf_env()
            logger.info("Loading dense encoder model: {}", self.model_name)
            try:
                self._model = SentenceTransformer(self.model_name, device=self.device)
            except Exception as e:
                self._load_error = f"failed to load {self.model_name}: {e}"
                logger.warning("Failed to load SentenceTransformer model: {}", e)
                raise EmbeddingUnavailable(self._load_error) from e
            return self._model

    def embed(self, texts: Sequence[str]) -> np.ndarray:
        model = self._load()
        return model.encode(
            list(texts),
            batch_size=ENCODER_BATCH_SIZE,
            convert_to_numpy=True,
            normalize_embeddings=True,
            show_progress_bar=False,
        )


# -------------------------------------------------------------------
# Text builders
# -------------------------------------------------------------------

def query_text(technologies: Sequence[DetectedTechnology]) -> str:
    return " ".join(t.name.strip() for t in technologies if t.name and t.name.strip())


def candidate_text(candidate: Candidate) -> str:
    bits = [candidate.description.strip(), " ".join(candidate.sorted_tags)]
    return " ".join(b for b in bits if b)


def _l2_normalise(arr: np.ndarray) -> np.ndarray:
    norms = np.linalg.norm(arr, axis=1, keepdims=True)
    norms[norms == 0] = 1.0
    return arr / norms


# -------------------------------------------------------------------
# Scorer
# -------------------------------------------------------------------

class EmbeddingScorer:
    """
    Ranks candidates by cosine similarity to the detected-stack query.

    Candidate vectors are cached by their embedding text, which depends
    only on catalog content. The cache keeps at most ``cache_size`` vectors
    and evicts the least recently used first.
    """

    def __init__(
        self,
        provider: Optional[EmbeddingProvider] = None,
        cache_size: int = EMBEDDING_CACHE_SIZE,
    ):
        self.provider: EmbeddingProvider = provider if provider is not None else NullEmbeddingProvider()
        self.cache_size = cache_size
        self._vectors: OrderedDict[str, np.ndarray] = OrderedDict()
        self._cache_lock = threading.Lock()

    @property
    def enabled(self) -> bool:
        return not isinstance(self.provider, NullEmbeddingProvider)

    def _embed(self, texts: List[str]) -> np.ndarray:
        arr = np.asarray(self.provider.embed(texts), dtype="float32")
        if arr.ndim != 2 or arr.shape[0] != len(texts):
            raise ValueError(
                f"Embedding provider returned shape {arr.shape} for {len(texts)} texts"
            )
        return _l2_normalise(arr)

    def _candidate_vectors(self, catalog: Sequence[Candidate]) -> np.ndarray:
        texts = [candidate_text(c) for c in catalog]
        found: Dict[str, np.ndarray] = {}
        with self._cache_lock:
            for text in dict.fromkeys(texts):
                vec = self._vectors.get(text)
                if vec is not None:
                    self._vectors.move_to_end(text)
                    found[text] = vec

        missing = sorted(set(texts) - found.keys())
        if missing:
            fresh = dict(zip(missing, self._embed(missing)))
            found.update(fresh)
            with self._cache_lock:
                for text, vec in fresh.items():
                    self._vectors[text] = vec
                    self._vectors.move_to_end(text)
                while len(self._vectors) > self.cache_size:
                    self._vectors.popitem(last=False)
        return np.vstack([found[t] for t in texts])

    def rank(
        self,
        catalog: Sequence[Candidate],
        technologies: Sequence[DetectedTechnology],
    ) -> List[RankingEntry]:
        if not self.enabled or not catalog:
            return []
        query = query_text(technologies)
        if not query:
            return []

        try:
            query_vec = self._embed([query])[0]
            cand_vecs = self._candidate_vectors(catalog)
        except EmbeddingUnavailable as e:
            logger.info("Embedding signal unavailable; keyword only: {}", e)
            return []
        except Exception as e:
            logger.warning("Embedding scoring failed; keyword only: {}", e)
            return []

        if cand_vecs.shape[1] != query_vec.shape[0]:
            logger.warning(
                "Embedding dims disagree (query={}, candidates={}); keyword only",
                query_vec.shape[0], cand_vecs.shape[1],
            )
            return []

        sims = cand_vecs @ query_vec
        rows = [
            (cand, float(sim), (), ())
            for cand, sim in zip(catalog, sims)
            if np.isfinite(sim) and sim > 0
        ]
        return assign_ranks(rows)
