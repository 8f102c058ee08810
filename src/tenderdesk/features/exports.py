"""Tender exports, available on paid plans."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from tenderdesk.features.subscription import SubscriptionService
from tenderdesk.features.tenders import TenderService
from tenderdesk.query.client import QueryClient
from tenderdesk.shared.constants import Messages
from tenderdesk.shared.errors import create_plan_feature_error
from tenderdesk.shared.models.database import Tender
from tenderdesk.utils.export import export_tenders

logger = logging.getLogger(__name__)


class ExportService:
    def __init__(
        self,
        client: QueryClient,
        tenders: TenderService,
        subscription: SubscriptionService,
    ) -> None:
        self.client = client
        self.tenders = tenders
        self.subscription = subscription

    async def export_tenders(
        self,
        directory: Path,
        *,
        excel: bool = False,
        tenders: Optional[list[Tender]] = None,
    ) -> Path:
        """Export ``tenders``, or all tenders of the active company.

        Raises:
            PreconditionError: If the plan does not include exports
            OSError: If the file cannot be written
        """
        limits = await self.subscription.plan_limits()
        if not limits.can_export:
            raise create_plan_feature_error("tender exports", "export_tenders")

        if tenders is None:
            tenders = await self.tenders.list_tenders()
        try:
            path = export_tenders(tenders, directory, excel=excel)
        except OSError:
            logger.exception("Writing the tender export to %s failed", directory)
            self.client.notify_failure(Messages.EXPORT_FAILED)
            raise

        logger.info("Exported %d tenders to %s", len(tenders), path)
        self.client.notify_success(Messages.EXPORTED_EXCEL if excel else Messages.EXPORTED_CSV)
        return path
