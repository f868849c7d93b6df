"""Signal handlers for learning domain (e.g., update submission lateness on assignment change)."""

import logging
from typing import Any

from django.db.models.signals import post_save
from django.dispatch import receiver

from LearningHubApp.learning.models import Assignment, Submission

logger = logging.getLogger(__name__)

@receiver(post_save, sender=Assignment)
def recompute_submission_lateness(
    sender: type[Assignment],
    instance: Assignment,
    created: bool,
    **kwargs: Any,
) -> None:
    """Recalculate is_late flag for all submissions when the assignment due date changes."""
    if created:
        return
    due_date = instance.due_date
    subs = Submission.objects.filter(assignment=instance)
    if due_date is None:
        cleared = subs.filter(is_late=True).update(is_late=False)
        if cleared:
            logger.info("Assignment %s has no due date; cleared %d late flags", instance.pk, cleared)
        return
    marked = subs.filter(submitted_at__gt=due_date, is_late=False).update(is_late=True)
    cleared = subs.filter(submitted_at__lte=due_date, is_late=True).update(is_late=False)
    if marked or cleared:
        logger.info("Assignment %s lateness recomputed: %d marked, %d cleared", instance.pk, marked, cleared)
