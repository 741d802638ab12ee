from fastapi import Depends, Request

from relay.core.services import Services
from relay.services.enrollment import EnrollmentService
from relay.services.payment import PaymentService
from relay.services.webhook import WebhookService


def get_services(request: Request) -> Services:
    """Service container built in the application lifespan."""
    return request.app.state.services


def get_payment_service(services: Services = Depends(get_services)) -> PaymentService:
    return PaymentService(services.gateway, services.settings)


def get_webhook_service(services: Services = Depends(get_services)) -> WebhookService:
    return WebhookService(services.store, services.settings.flw_secret_hash)


def get_enrollment_service(
    services: Services = Depends(get_services),
) -> EnrollmentService:
    return EnrollmentService(
        services.store,
        services.storage,
        services.mailer,
        services.receipt_validator,
    )
