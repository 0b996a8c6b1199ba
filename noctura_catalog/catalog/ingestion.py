"""Product ingestion pipeline.

Validates a creation request, uploads its image attachments to the
object store and persists the assembled product. Either a complete
product with every image exists afterwards, or nothing was persisted.
"""

import asyncio
from dataclasses import dataclass
from typing import Any

import structlog
from pydantic import ValidationError as PydanticValidationError

from noctura_catalog.catalog.models import Product
from noctura_catalog.catalog.repository import ProductRepository
from noctura_catalog.catalog.schemas import ProductCreate, to_validation_error
from noctura_catalog.domain.exceptions import (
    MissingFieldsError,
    UploadFailureError,
    ValidationError,
)
from noctura_catalog.infrastructure.config import settings
from noctura_catalog.infrastructure.object_store import ObjectStore

logger = structlog.get_logger()

REQUIRED_FIELDS = ("name", "description", "price", "category")
OPTIONAL_TEXT_FIELDS = ("width", "height", "thickness", "material")


@dataclass
class Attachment:
    """Binary attachment of a creation request.

    ``declared_size`` is set when the content was left unread because the
    upload already reported a size over the cap.
    """

    filename: str
    content: bytes
    content_type: str | None = None
    declared_size: int | None = None

    @property
    def size(self) -> int:
        if self.declared_size is not None:
            return self.declared_size
        return len(self.content)


def missing_fields(fields: dict[str, Any]) -> list[str]:
    """Names of mandatory fields that are absent or blank."""
    missing = []
    for name in REQUIRED_FIELDS:
        value = fields.get(name)
        if value is None or (isinstance(value, str) and not value.strip()):
            missing.append(name)
    return missing


class ProductIngestionPipeline:
    """Creates products from form fields plus image attachments.

    Uploads run concurrently and are joined before anything is written.
    The ``images`` list follows attachment order, not completion order.

    Example usage:
        pipeline = ProductIngestionPipeline(ProductRepository(session), store)
        product = await pipeline.create_product(
            {"name": "Silla Nórdica", "description": "...", "price": "120", "category": "sillas"},
            [Attachment("front.jpg", data, "image/jpeg")],
        )
    """

    def __init__(
        self,
        repository: ProductRepository,
        object_store: ObjectStore,
        max_file_bytes: int | None = None,
    ) -> None:
        """Initialize pipeline.

        Args:
            repository: Product repository used for the final insert.
            object_store: Destination of the image attachments.
            max_file_bytes: Per-attachment size cap, defaults to settings.
        """
        self.repository = repository
        self.object_store = object_store
        self.max_file_bytes = (
            max_file_bytes if max_file_bytes is not None else settings.max_upload_file_bytes
        )

    async def create_product(
        self,
        fields: dict[str, Any],
        attachments: list[Attachment] | None = None,
    ) -> Product:
        """Validate, upload and persist a new product.

        Args:
            fields: Scalar fields of the request.
            attachments: Image attachments in submission order.

        Returns:
            The created product with id, timestamps and image URLs.

        Raises:
            MissingFieldsError: If a mandatory field is absent or blank.
            ValidationError: If a field or attachment violates a constraint.
            UploadFailureError: If any upload fails; nothing is persisted.
        """
        attachments = attachments or []
        payload = self._validate(fields, attachments)

        urls = await self._upload_all(payload.name, attachments)
        payload = payload.model_copy(update={"images": urls})

        product = await self.repository.create(payload)
        logger.info(
            "Product created",
            product_id=product.id,
            name=product.name,
            image_count=len(urls),
        )
        return product

    def _validate(self, fields: dict[str, Any], attachments: list[Attachment]) -> ProductCreate:
        missing = missing_fields(fields)
        if missing:
            raise MissingFieldsError(missing)

        oversized = [a.filename for a in attachments if a.size > self.max_file_bytes]
        if oversized:
            raise ValidationError(
                f"Attachments exceed {self.max_file_bytes} bytes",
                errors=[
                    {"field": settings.upload_field_name, "message": f"{name} is too large"}
                    for name in oversized
                ],
            )

        data = {name: fields.get(name) for name in REQUIRED_FIELDS}
        data["colors"] = fields.get("colors")
        for name in OPTIONAL_TEXT_FIELDS:
            data[name] = fields.get(name) or ""

        try:
            return ProductCreate.model_validate(data)
        except PydanticValidationError as e:
            raise to_validation_error(e, "Invalid product") from e

    async def _upload_all(self, product_name: str, attachments: list[Attachment]) -> list[str]:
        if not attachments:
            return []

        results = await asyncio.gather(
            *(
                self.object_store.upload(a.filename, a.content, a.content_type)
                for a in attachments
            ),
            return_exceptions=True,
        )

        failures = [
            (attachment, result)
            for attachment, result in zip(attachments, results)
            if isinstance(result, BaseException)
        ]
        if failures:
            logger.error(
                "Image upload failed, product not created",
                name=product_name,
                failed=[a.filename for a, _ in failures],
                uploaded_and_orphaned=len(attachments) - len(failures),
            )
            attachment, error = failures[0]
            if isinstance(error, UploadFailureError):
                raise error
            raise UploadFailureError(attachment.filename, str(error)) from error

        return list(results)
