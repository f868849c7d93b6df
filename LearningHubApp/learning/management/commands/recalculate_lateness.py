from django.core.management.base import BaseCommand
from django.db.models import F, Q

from LearningHubApp.learning.models import Submission

LATE = Q(assignment__due_date__isnull=False, submitted_at__gt=F("assignment__due_date"))


class Command(BaseCommand):
    help = "Recompute the is_late flag of submissions from their assignment's due date."

    def add_arguments(self, parser):
        parser.add_argument("--assignment", type=int, help="Only recompute submissions of this assignment.")

    def handle(self, *args, **options):
        subs = Submission.objects.all()
        if options.get("assignment"):
            subs = subs.filter(assignment_id=options["assignment"])
        marked = subs.filter(LATE, is_late=False).update(is_late=True)
        cleared = subs.filter(is_late=True).exclude(LATE).update(is_late=False)
        self.stdout.write(self.style.SUCCESS(f"Updated {marked + cleared} submissions"))
