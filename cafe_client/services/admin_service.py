"""
LOT 5: Services - Administration
"""

from ..network.api_client import unwrap
from .base import BaseService
from .interfaces import DashboardStats

DASHBOARD_ENDPOINT = "/api/admin/dashboard/"


class AdminService(BaseService):
    async def get_dashboard_stats(self) -> DashboardStats:
        """
        Indicateurs du tableau de bord admin.

        Raises:
            ApiError: Erreur serveur ou corps vide
        """
        data = unwrap(await self._api.get(DASHBOARD_ENDPOINT))
        return self._parse(DashboardStats.from_dict, data, "dashboard data")
