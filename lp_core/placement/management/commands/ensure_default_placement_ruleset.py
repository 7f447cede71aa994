# lp_core/placement/management/commands/ensure_default_placement_ruleset.py

from django.core.management.base import BaseCommand

from lp_core.placement.services import ensure_default_placement_ruleset


class Command(BaseCommand):
    help = "Seed and activate the stock placement rule set if none exists (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument(
            "--levels",
            nargs=3,
            type=int,
            default=[1, 2, 3],
            metavar=("LOW", "MID", "HIGH"),
            help="Level numbers used by the stock branches.",
        )

    def handle(self, *args, **options):
        result = ensure_default_placement_ruleset(levels=tuple(options["levels"]))
        if result.created:
            self.stdout.write(self.style.SUCCESS(f"Placement rule set created and activated: {result.ruleset.id}"))
        else:
            self.stdout.write(self.style.SUCCESS(f"Placement rule set already present: {result.ruleset.id}"))
