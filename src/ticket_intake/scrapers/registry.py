# ============================================================================
# src/ticket_intake/scrapers/registry.py
# ============================================================================
"""
Jurisdiction registry: source id -> JurisdictionProfile.
"""

import logging
from typing import Dict, Iterable, List, Optional, Tuple

from ..constants import BUILTIN_JURISDICTIONS, JurisdictionProfile
from ..utils.exceptions import ConfigurationError, UnknownSourceError

logger = logging.getLogger(__name__)


class JurisdictionRegistry:
    """
    Catalogue of supported court portals.

    Built with the built-in jurisdictions unless a profile list is given;
    more profiles can be registered at construction time or later.
    """

    def __init__(
        self,
        profiles: Optional[Iterable[JurisdictionProfile]] = None,
        extra_profiles: Iterable[JurisdictionProfile] = (),
    ):
        self._profiles: Dict[str, JurisdictionProfile] = {}
        for profile in (BUILTIN_JURISDICTIONS if profiles is None else profiles):
            self.register(profile)
        for profile in extra_profiles:
            self.register(profile)

    def register(self, profile: JurisdictionProfile) -> None:
        key = profile.source_id.strip().lower()
        if not key:
            raise ConfigurationError("Jurisdiction profile needs a source id")
        if key in self._profiles:
            raise ConfigurationError(f"Jurisdiction already registered: {key}")
        self._profiles[key] = profile
        logger.debug(f"Registered jurisdiction {key}")

    def get(self, source_id: str) -> JurisdictionProfile:
        try:
            return self._profiles[source_id.strip().lower()]
        except KeyError:
            raise UnknownSourceError(source_id) from None

    def has(self, source_id: str) -> bool:
        return source_id.strip().lower() in self._profiles

    def __contains__(self, source_id: str) -> bool:
        return self.has(source_id)

    @property
    def source_ids(self) -> Tuple[str, ...]:
        return tuple(self._profiles)

    def list_sources(self) -> List[Dict[str, object]]:
        """Catalogue entries for every registered jurisdiction, in registration order."""
        return [profile.describe() for profile in self._profiles.values()]
