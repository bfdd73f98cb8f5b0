# Application context: the long-lived collaborators a request may need.
# Built once at startup (see app.main lifespan), stored on app.state and
# handed to routes through dependencies.

import logging

from fastapi import Depends, Request

from app.core.storage import R2Storage
from app.modules.notifications.services.mailer import SmtpMailer

logger = logging.getLogger("app")


class AppContext:
    def __init__(self, storage: R2Storage, mailer: SmtpMailer):
        self.storage = storage
        self.mailer = mailer

    def close(self) -> None:
        self.storage = None
        self.mailer = None


def create_context() -> AppContext:
    logger.info("Initializing application context")
    return AppContext(storage=R2Storage(), mailer=SmtpMailer())


def get_context(request: Request) -> AppContext:
    context = getattr(request.app.state, "context", None)
    if context is None:
        # Started without lifespan (e.g. a bare TestClient); build lazily
        context = create_context()
        request.app.state.context = context
    return context


def get_storage(context: AppContext = Depends(get_context)) -> R2Storage:
    return context.storage


def get_mailer(context: AppContext = Depends(get_context)) -> SmtpMailer:
    return context.mailer
