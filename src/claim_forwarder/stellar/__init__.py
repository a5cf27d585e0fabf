"""Horizon integration components."""

from claim_forwarder.stellar.paging import Page, PageLink, Paginator
from claim_forwarder.stellar.horizon import HorizonClient
from claim_forwarder.stellar.submitter import SubmissionCoordinator

__all__ = ["Page", "PageLink", "Paginator", "HorizonClient", "SubmissionCoordinator"]
