"""Management command to fetch live conditions using the same stack as the API."""
from __future__ import annotations

import json
from typing import Any

from django.core.management.base import BaseCommand, CommandError

from backend.api.views import fetch_live_payload


class Command(BaseCommand):
    help = "Fetch live conditions for the provided station"

    def add_arguments(self, parser) -> None:  # noqa: D401
        parser.add_argument("--station", type=int, help="Station identifier")

    def handle(self, *args: Any, **options: Any) -> None:  # noqa: D401
        station_id = options.get("station")
        if station_id is None:
            raise CommandError("--station is required")
        if station_id <= 0:
            raise CommandError("--station must be a positive integer")

        payload = fetch_live_payload(station_id)
        if payload["conditions"] is None:
            self.stderr.write(f"No live conditions available for station {station_id}")
        self.stdout.write(json.dumps(payload))
