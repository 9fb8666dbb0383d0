from typing import List, Optional, Tuple
from schemas.service import Service
from config.database import Database
from crud import service_crud
from crud.errors import StoreError
import logging

logger = logging.getLogger(__name__)

BUILTIN_SERVICES: Tuple[Service, ...] = (
    Service(
        id='swedish',
        name='Swedish Massage',
        duration='60 min',
        price='$85',
        icon='🍃',
        description='A gentle full-body massage ideal for relaxation and stress management.',
        benefits=['Stress reduction', 'Improved circulation', 'Muscle tension relief']
    ),
    Service(
        id='deeptissue',
        name='Deep Tissue',
        duration='90 min',
        price='$120',
        icon='💪',
        description='Targeted pressure to reach deeper layers of muscle and connective tissue.',
        benefits=['Chronic pain relief', 'Injury rehabilitation', 'Lowered blood pressure']
    ),
    Service(
        id='aromatherapy',
        name='Aromatherapy',
        duration='60 min',
        price='$95',
        icon='🌸',
        description='Combines soft pressure with therapeutic essential oils for emotional well-being.',
        benefits=['Boosts mood', 'Reduces anxiety', 'Improves sleep quality']
    ),
    Service(
        id='sports',
        name='Sports Therapy',
        duration='75 min',
        price='$110',
        icon='🏃',
        description='Focused on preventing and treating injuries for active individuals.',
        benefits=['Greater flexibility', 'Pre-event prep', 'Faster recovery']
    ),
)

DEFAULT_SERVICE_ID = 'swedish'


class CatalogProvider:
    """Two-tier service catalog.

    The built-in tier is always available and answers immediately. The stored
    tier, once fetched with at least one entry, replaces it wholesale; there is
    no field-level merge. A failed or empty fetch leaves whatever is currently
    effective in place.
    """

    def __init__(self, db: Database, defaults: Tuple[Service, ...] = BUILTIN_SERVICES):
        self.db = db
        self.defaults = tuple(defaults)
        self._override: Optional[List[Service]] = None

    def list_services(self) -> List[Service]:
        if self._override:
            return list(self._override)
        return list(self.defaults)

    def get(self, service_id: str) -> Optional[Service]:
        return next((s for s in self.list_services() if s.id == service_id), None)

    def apply(self, fetched: List[Service]) -> bool:
        """Install a fetched list if it is non-empty. Returns True when applied."""
        if not fetched:
            return False
        self._override = list(fetched)
        return True

    async def refresh(self) -> List[Service]:
        try:
            fetched = await service_crud.get_all_services(self.db)
        except StoreError as e:
            logger.warning(f"Service catalog fetch failed, keeping current list: {e.message}")
            return self.list_services()

        if not self.apply(fetched):
            logger.info("Stored service catalog is empty, keeping current list")
        return self.list_services()
