"""Cosine similarity and in-process ranking used by the vector store fallback path."""

import numpy as np


def cosine_similarity(a: list[float], b: list[float]) -> float:
    """Cosine similarity of two vectors.

    Vectors of different length never match (0.0). A zero vector has no
    direction, so its similarity to anything is 0.0 as well.

    Args:
        a (list[float]): First vector.
        b (list[float]): Second vector.

    Returns:
        float: dot(a, b) / (|a| * |b|), in [-1, 1].
    """
    if len(a) != len(b) or len(a) == 0:
        return 0.0
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    denom = np.linalg.norm(va) * np.linalg.norm(vb)
    if denom == 0.0:
        return 0.0
    return float(np.dot(va, vb) / denom)


def rank_by_similarity(
    query: list[float],
    vectors: list[list[float]],
    top_k: int,
    threshold: float,
) -> list[tuple[int, float]]:
    """Score every candidate against the query and keep the best matches.

    Args:
        query (list[float]): Query embedding.
        vectors (list[list[float]]): Candidate embeddings.
        top_k (int): Maximum number of results.
        threshold (float): Exclusive lower bound; scores <= threshold are dropped.

    Returns:
        list[tuple[int, float]]: (candidate index, similarity) sorted by
            descending similarity. Ties keep candidate order.
    """
    if top_k <= 0 or not vectors:
        return []

    q = np.asarray(query, dtype=np.float64)
    q_norm = np.linalg.norm(q)
    scores = np.zeros(len(vectors), dtype=np.float64)

    # score all same-length candidates in one matrix product
    same_dim = [i for i, v in enumerate(vectors) if len(v) == len(query)]
    if same_dim and q_norm > 0.0:
        matrix = np.asarray([vectors[i] for i in same_dim], dtype=np.float64)
        norms = np.linalg.norm(matrix, axis=1) * q_norm
        dots = matrix @ q
        with np.errstate(divide="ignore", invalid="ignore"):
            sims = np.where(norms > 0.0, dots / norms, 0.0)
        scores[same_dim] = sims

    order = sorted(range(len(vectors)), key=lambda i: -scores[i])
    ranked = [(i, float(scores[i])) for i in order if scores[i] > threshold]
    return ranked[:top_k]
