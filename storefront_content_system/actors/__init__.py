"""Long-running pipeline actors: poller, scheduler and ad hoc document service."""
from storefront_content_system.actors.ad_hoc import AdHocDocumentService
from storefront_content_system.actors.poller import CompletionPoller, PollHandle
from storefront_content_system.actors.scheduler import BackgroundScheduler

__all__ = ["AdHocDocumentService", "CompletionPoller", "PollHandle", "BackgroundScheduler"]
