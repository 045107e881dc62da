# Overview: Per-application service wiring; builds request-scoped managers.

from __future__ import annotations

from dataclasses import dataclass

from flask import Flask, current_app

from ..repositories.sqlalchemy_repository import SqlAlchemyOrderRepository
from .lifecycle_service import OrderLifecycleManager
from .notification_service import NotificationDispatcher, build_notifier
from .order_service import OrderIntakeService
from .pipeline import Pipeline


EXTENSION_KEY = "repairtrack"


@dataclass
class AppServices:
    pipeline: Pipeline
    dispatcher: NotificationDispatcher
    serial_prefix: str


def init_services(app: Flask) -> AppServices:
    services = AppServices(
        pipeline=Pipeline.from_config(app.config),
        dispatcher=NotificationDispatcher(
            build_notifier(app.config, app.logger),
            app.logger,
            max_workers=app.config.get("NOTIFY_WORKERS", 2),
        ),
        serial_prefix=app.config.get("SERIAL_PREFIX", "LW"),
    )
    app.extensions[EXTENSION_KEY] = services
    return services


def app_services() -> AppServices:
    return current_app.extensions[EXTENSION_KEY]


def repository() -> SqlAlchemyOrderRepository:
    return SqlAlchemyOrderRepository()


def lifecycle_manager() -> OrderLifecycleManager:
    services = app_services()
    return OrderLifecycleManager(repository(), services.pipeline, services.dispatcher)


def intake_service() -> OrderIntakeService:
    services = app_services()
    return OrderIntakeService(
        repository(),
        services.pipeline,
        services.dispatcher,
        serial_prefix=services.serial_prefix,
    )
