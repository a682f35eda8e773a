"""
RatingService - Product Ratings

Stores one rating per (user, product) and keeps the product's aggregate
``rating`` / ``rating_count`` equal to the mean and count of its stored
ratings. The aggregate is recomputed after every mutation, as a separate
step that runs once the mutation has been written.
"""

import logging
from typing import Dict, Optional

from django.conf import settings

from infrastructure.store import UNIQUE_VIOLATION, RatingRecord, StoreException, StoreInterface
from marketplace.infra.observability.metrics import rating_recalculations_total

from .base import BaseService, ErrorCodes, ServiceResult, parse_int, service_err, service_ok

logger = logging.getLogger(__name__)


def serialize_rating(rating: RatingRecord) -> Dict:
    return {
        "id": rating.id,
        "product_id": rating.product_id,
        "user_id": rating.user_id,
        "rating": rating.rating,
        "comment": rating.comment,
        "created_at": rating.created_at,
        "updated_at": rating.updated_at,
        "user": {"full_name": rating.user_full_name} if rating.user_full_name else None,
    }


class RatingService(BaseService):
    """
    Service for product ratings and their aggregate on the product.

    Responsibilities:
    - Add or update the caller's rating of a product
    - Delete the caller's rating
    - Recalculate product rating aggregates
    - List a product's ratings, newest first
    """

    def __init__(self, store: StoreInterface):
        """
        Initialize RatingService.

        Args:
            store: Store client handle
        """
        super().__init__()
        self.store = store
        self.default_page_size = getattr(settings, "RATINGS_PAGE_SIZE", 10)
        self.max_page_size = getattr(settings, "RATINGS_MAX_PAGE_SIZE", 50)

    @BaseService.log_performance
    def add_rating(self, user, product_id: str, rating: int, comment: Optional[str] = None) -> ServiceResult[Dict]:
        """
        Rate a product, replacing the user's previous rating if there is one.

        Args:
            user: User rating the product
            product_id: UUID of the product
            rating: Integer from 1 to 5
            comment: Optional free-text comment

        Returns:
            ServiceResult with the persisted rating, or:
            - validation_error if rating is not an integer in [1, 5]
            - not_found if the product does not exist

        Example:
            >>> result = rating_service.add_rating(user, product_id, 5, "Great!")
            >>> if result.ok:
            ...     print(result.value["rating"])
        """
        if not isinstance(rating, int) or isinstance(rating, bool) or not 1 <= rating <= 5:
            return service_err(ErrorCodes.VALIDATION_ERROR, "Rating must be an integer between 1 and 5")

        user_id = str(user.id)
        try:
            if self.store.get_product(product_id) is None:
                return service_err(ErrorCodes.NOT_FOUND, "Product not found")

            existing = self.store.find_rating(user_id, product_id=product_id)
            if existing is not None:
                saved = self.store.update_rating(existing.id, rating, comment)
                self.logger.info(f"User {user_id} updated rating {saved.id} on product {product_id} to {rating}")
            else:
                try:
                    saved = self.store.insert_rating(user_id, product_id, rating, comment)
                except StoreException as e:
                    if e.code != UNIQUE_VIOLATION:
                        raise
                    # A concurrent request created the row first
                    existing = self.store.find_rating(user_id, product_id=product_id)
                    if existing is None:
                        raise
                    saved = self.store.update_rating(existing.id, rating, comment)
                self.logger.info(f"User {user_id} rated product {product_id}: {rating}")
        except StoreException as e:
            return self.store_error(e, f"saving rating of user {user_id} on product {product_id}")
        except Exception as e:
            return self.unexpected_error(e, f"saving rating of user {user_id} on product {product_id}")

        recalculated = self.recalculate_product_rating(product_id)
        if not recalculated.ok:
            return recalculated

        return service_ok(serialize_rating(saved))

    @BaseService.log_performance
    def delete_rating(self, user, rating_id: str) -> ServiceResult[bool]:
        """
        Delete one of the user's ratings and refresh the product aggregate.

        Args:
            user: User owning the rating
            rating_id: Rating id

        Returns:
            ServiceResult with True, or not_found if the rating is not the user's
        """
        user_id = str(user.id)
        try:
            existing = self.store.find_rating(user_id, rating_id=rating_id)
            if existing is None:
                return service_err(ErrorCodes.NOT_FOUND, "Rating not found")

            self.store.delete_rating(existing.id)
            self.logger.info(f"User {user_id} deleted rating {existing.id} on product {existing.product_id}")
        except StoreException as e:
            return self.store_error(e, f"deleting rating {rating_id}")
        except Exception as e:
            return self.unexpected_error(e, f"deleting rating {rating_id}")

        recalculated = self.recalculate_product_rating(existing.product_id)
        if not recalculated.ok:
            return recalculated

        return service_ok(True)

    @BaseService.log_performance
    def recalculate_product_rating(self, product_id: str) -> ServiceResult[Dict]:
        """
        Recalculate and persist a product's aggregate rating.

        With no ratings left both fields are reset to 0.

        Args:
            product_id: UUID of the product

        Returns:
            ServiceResult with {"rating": float, "rating_count": int}
        """
        try:
            aggregate = self.store.calculate_product_rating(product_id)
            average, count = aggregate if aggregate is not None else (0.0, 0)
            self.store.set_product_rating(product_id, float(average), count)
        except StoreException as e:
            rating_recalculations_total.labels(status="error").inc()
            return self.store_error(e, f"recalculating rating of product {product_id}")
        except Exception as e:
            rating_recalculations_total.labels(status="error").inc()
            return self.unexpected_error(e, f"recalculating rating of product {product_id}")

        rating_recalculations_total.labels(status="success").inc()
        self.logger.info(f"Recalculated rating for product {product_id}: avg={average:.2f}, count={count}")
        return service_ok({"rating": float(average), "rating_count": count})

    @BaseService.log_performance
    def get_product_ratings(self, product_id: str, page=1, limit=None) -> ServiceResult[Dict]:
        """
        List a product's ratings, newest first, with the rater's display name.

        ``page`` is floored to 1. ``limit`` falls back to the default page
        size when missing or below 1 and is capped at the maximum page size.

        Args:
            product_id: UUID of the product
            page: 1-based page number
            limit: Ratings per page

        Returns:
            ServiceResult with {"ratings": [...], "total", "page", "limit"}
        """
        page = parse_int(page)
        if page is None or page < 1:
            page = 1
        limit = parse_int(limit)
        if limit is None or limit < 1:
            limit = self.default_page_size
        limit = min(limit, self.max_page_size)

        try:
            rows, total = self.store.list_product_ratings(product_id, (page - 1) * limit, limit)
        except StoreException as e:
            return self.store_error(e, f"listing ratings of product {product_id}")
        except Exception as e:
            return self.unexpected_error(e, f"listing ratings of product {product_id}")

        return service_ok(
            {
                "ratings": [serialize_rating(row) for row in rows],
                "total": total,
                "page": page,
                "limit": limit,
            }
        )

    @BaseService.log_performance
    def get_user_rating(self, user, product_id: str) -> ServiceResult[Optional[Dict]]:
        """
        Get the user's own rating of a product.

        Returns:
            ServiceResult with the rating, or None if the user has not rated it
        """
        try:
            rating = self.store.find_rating(str(user.id), product_id=product_id)
        except StoreException as e:
            return self.store_error(e, f"loading rating of user {user.id} on product {product_id}")
        except Exception as e:
            return self.unexpected_error(e, f"loading rating of user {user.id} on product {product_id}")

        return service_ok(serialize_rating(rating) if rating else None)
