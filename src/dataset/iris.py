"""
Iris dataset loading for the decision tree and random forest essays.

The dataset is a static JSON array of records:
    {"sepalLength": float, "sepalWidth": float, "species": str}

Only the two sepal measurements are used as features. Species map to
class indices 0=setosa, 1=versicolor, 2=virginica.
"""

import json
import logging
import numpy as np
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from config import IRIS_PATH, IRIS_SPECIES

logger = logging.getLogger(__name__)

LABEL_MAP = {name: idx for idx, name in enumerate(IRIS_SPECIES)}


class DatasetLoadError(RuntimeError):
    """The dataset file is missing or malformed."""


@dataclass(frozen=True)
class IrisSample:
    """One flower: two sepal measurements and its species."""
    sepal_length: float
    sepal_width: float
    species: str

    @property
    def label(self) -> int:
        return LABEL_MAP[self.species]

    @property
    def features(self) -> Tuple[float, float]:
        return (self.sepal_length, self.sepal_width)


def parse_iris(records: Sequence[dict]) -> List[IrisSample]:
    """
    Validate raw JSON records and convert them to samples.

    Raises:
        DatasetLoadError: on the first malformed record
    """
    if not isinstance(records, list):
        raise DatasetLoadError(f"Expected a JSON array, got {type(records).__name__}")

    samples = []
    for idx, record in enumerate(records):
        try:
            species = record["species"]
            if species not in LABEL_MAP:
                raise DatasetLoadError(f"Record {idx}: unknown species {species!r}")
            samples.append(IrisSample(
                sepal_length=float(record["sepalLength"]),
                sepal_width=float(record["sepalWidth"]),
                species=species,
            ))
        except (KeyError, TypeError, ValueError) as e:
            raise DatasetLoadError(f"Record {idx}: {e!r}") from e

    if not samples:
        raise DatasetLoadError("Dataset is empty")
    return samples


def load_iris(path: str = IRIS_PATH) -> List[IrisSample]:
    """
    Load the Iris dataset from a JSON file.

    Args:
        path: Location of the JSON array

    Returns:
        List of validated samples

    Raises:
        DatasetLoadError: if the file cannot be read or parsed
    """
    try:
        with open(path, 'r') as f:
            records = json.load(f)
        samples = parse_iris(records)
    except (OSError, json.JSONDecodeError, DatasetLoadError) as e:
        logger.error("Failed to load dataset from %s: %s", path, e)
        if isinstance(e, DatasetLoadError):
            raise
        raise DatasetLoadError(f"Failed to load dataset from {path}: {e}") from e

    logger.debug("Loaded %d iris samples from %s", len(samples), path)
    return samples


def iris_to_arrays(samples: Sequence[IrisSample]) -> Tuple[np.ndarray, np.ndarray]:
    """
    Convert samples to (X, y) arrays for the tree engines.

    Returns:
        X of shape (n, 2) with [sepal_length, sepal_width], y class indices
    """
    X = np.array([s.features for s in samples], dtype=np.float64)
    y = np.array([s.label for s in samples], dtype=np.int64)
    return X, y
