"""
Item registry used by the booking engine.

The booking engine never reads listings directly. It asks an ItemRegistry
for the daily rate and owner of an item, which keeps listing management
outside the engine and lets tests substitute their own registry.
"""

from .models import Item


class ItemRegistry:
    """Read-only view of listed items."""

    def lock(self, item_id):
        """
        Serialize reservation writers for an item until the current
        database transaction ends.
        """
        raise NotImplementedError

    def lock_many(self, item_ids):
        return [self.lock(item_id) for item_id in sorted(item_ids, key=str)]

    def get_daily_rate(self, item_id):
        raise NotImplementedError

    def get_owner_id(self, item_id):
        raise NotImplementedError


class DjangoItemRegistry(ItemRegistry):
    """ItemRegistry backed by the Item model."""

    def lock(self, item_id):
        # Raises Item.DoesNotExist for unknown items.
        return Item.objects.select_for_update().get(pk=item_id)

    def lock_many(self, item_ids):
        # Lock in primary key order so concurrent batches cannot deadlock.
        return list(
            Item.objects.select_for_update().filter(pk__in=item_ids).order_by('pk')
        )

    def get_daily_rate(self, item_id):
        return Item.objects.values_list('price_per_day', flat=True).get(pk=item_id)

    def get_owner_id(self, item_id):
        return Item.objects.values_list('owner_id', flat=True).get(pk=item_id)
