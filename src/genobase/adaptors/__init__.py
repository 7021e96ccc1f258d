"""
Adaptor registry: storage-agnostic read access to built datasets.
"""

from .api import ADAPTOR_CONTRACTS, FeatureAdaptor, GeneAdaptor, GenomeSequenceAdaptor
from .factory import AdaptorFactory
from .json_store import JsonFeatureAdaptor, JsonStoreAdaptorFactory, StoreConnection

__all__ = [
    "ADAPTOR_CONTRACTS",
    "FeatureAdaptor",
    "GeneAdaptor",
    "GenomeSequenceAdaptor",
    "AdaptorFactory",
    "JsonFeatureAdaptor",
    "JsonStoreAdaptorFactory",
    "StoreConnection",
]
