"""Pick the generation profile for the current serving cell."""

import logging

from cellband.core.network_oracle import NetworkGenerationOracle
from cellband.parsers.layout import DEFAULT_PROFILE, PROFILES, GenerationProfile

logger = logging.getLogger(__name__)


def select_generation(oracle: NetworkGenerationOracle) -> GenerationProfile:
    """Ask the oracle for the serving generation and return its profile.

    Any oracle failure, or an answer with no registered profile, falls back
    to the older generation (LTE).
    """
    try:
        generation = oracle.query_network_generation()
    except Exception as e:
        logger.warning(f"Network generation query failed, assuming {DEFAULT_PROFILE.label}: {e}")
        return DEFAULT_PROFILE

    profile = PROFILES.get(generation)
    if profile is None:
        logger.warning(f"No layout for generation {generation!r}, assuming {DEFAULT_PROFILE.label}")
        return DEFAULT_PROFILE

    logger.debug(f"Serving cell generation: {profile.label}")
    return profile
