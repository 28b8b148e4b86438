"""Django ORM models (persistence layer).

These models handle database concerns only. Domain logic lives in
domain/models.py.
"""

from django.db import models


class StoredBlob(models.Model):
    """Opaque payload stored under a unique key."""

    key = models.CharField(max_length=255, unique=True)
    payload = models.BinaryField()
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["key"]

    def __str__(self) -> str:
        return self.key
