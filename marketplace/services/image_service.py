"""
ProductImageService - Product Image Ordering

Lets a product's seller reorder its images and choose the primary one.
Reordering is a batch: every entry is attempted and all failures are
reported together.
"""

import logging
from typing import Dict, List

from infrastructure.store import ProductRecord, StoreException, StoreInterface

from .base import BaseService, ErrorCodes, ServiceResult, service_err, service_ok

logger = logging.getLogger(__name__)


class ProductImageService(BaseService):
    """
    Service for managing the images of a product.
    """

    def __init__(self, store: StoreInterface):
        super().__init__()
        self.store = store

    def _owned_product(self, user, product_id: str) -> ServiceResult[ProductRecord]:
        product = self.store.get_product(product_id)
        if product is None:
            return service_err(ErrorCodes.NOT_FOUND, "Product not found")
        if product.seller_id != str(user.id):
            return service_err(ErrorCodes.FORBIDDEN, "Only the seller can manage this product's images")
        return service_ok(product)

    @staticmethod
    def _serialize(images) -> List[Dict]:
        return [
            {
                "id": image.id,
                "url": image.url,
                "alt_text": image.alt_text,
                "display_order": image.display_order,
                "is_primary": image.is_primary,
            }
            for image in images
        ]

    @BaseService.log_performance
    def reorder_images(self, user, product_id: str, ordering: List[Dict]) -> ServiceResult[List[Dict]]:
        """
        Apply new display orders to a product's images.

        Each entry is validated and written on its own; a bad entry does not
        stop the others.

        Args:
            user: Seller of the product
            product_id: UUID of the product
            ordering: [{"id": image_id, "display_order": int}, ...]

        Returns:
            ServiceResult with the product's images in their new order, or
            bad_request with details={"errors": [...]} listing every entry
            that failed

        Example:
            >>> result = image_service.reorder_images(
            ...     user, product_id, [{"id": "12", "display_order": 0}, {"id": "7", "display_order": 1}]
            ... )
            >>> if not result.ok:
            ...     print(result.details["errors"])
        """
        try:
            owned = self._owned_product(user, product_id)
            if not owned.ok:
                return owned
            image_ids = {image.id for image in self.store.list_product_images(product_id)}
        except StoreException as e:
            return self.store_error(e, f"loading images of product {product_id}")
        except Exception as e:
            return self.unexpected_error(e, f"loading images of product {product_id}")

        errors = []
        for index, entry in enumerate(ordering or []):
            image_id = str(entry.get("id") or "")
            display_order = entry.get("display_order")

            if not image_id:
                errors.append({"index": index, "id": None, "message": "Image id is required"})
                continue
            if not isinstance(display_order, int) or isinstance(display_order, bool) or display_order < 0:
                errors.append(
                    {"index": index, "id": image_id, "message": "display_order must be a non-negative integer"}
                )
                continue
            if image_id not in image_ids:
                errors.append({"index": index, "id": image_id, "message": "Image not found for this product"})
                continue

            try:
                self.store.update_product_image(image_id, display_order=display_order)
            except StoreException as e:
                self.logger.error(f"Failed to reorder image {image_id}: {e.message} (code={e.code})")
                errors.append({"index": index, "id": image_id, "message": e.message})

        if errors:
            self.logger.warning(f"Reorder of product {product_id} images had {len(errors)} failure(s)")
            return service_err(
                ErrorCodes.BAD_REQUEST,
                f"Failed to reorder {len(errors)} image(s)",
                details={"errors": errors},
            )

        try:
            images = self.store.list_product_images(product_id)
        except StoreException as e:
            return self.store_error(e, f"loading images of product {product_id}")

        self.logger.info(f"Reordered {len(ordering or [])} image(s) of product {product_id}")
        return service_ok(self._serialize(images))

    @BaseService.log_performance
    def set_primary_image(self, user, product_id: str, image_id: str) -> ServiceResult[List[Dict]]:
        """
        Make one image the product's primary image and clear the flag on the rest.

        Returns:
            ServiceResult with the product's images, or not_found if the image
            does not belong to the product
        """
        try:
            owned = self._owned_product(user, product_id)
            if not owned.ok:
                return owned

            images = self.store.list_product_images(product_id)
            if str(image_id) not in {image.id for image in images}:
                return service_err(ErrorCodes.NOT_FOUND, "Image not found for this product")

            for image in images:
                should_be_primary = image.id == str(image_id)
                if image.is_primary != should_be_primary:
                    self.store.update_product_image(image.id, is_primary=should_be_primary)

            images = self.store.list_product_images(product_id)
        except StoreException as e:
            return self.store_error(e, f"setting primary image of product {product_id}")
        except Exception as e:
            return self.unexpected_error(e, f"setting primary image of product {product_id}")

        return service_ok(self._serialize(images))
