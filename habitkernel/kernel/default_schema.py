"""Built-in tracking schema — used when no schema file is configured.

Shape: section name -> field name -> field definition. "Daily Goals" and
"Monthly Goals" are reserved sections of checkbox goals; every other
section holds custom tracked fields.
"""

from __future__ import annotations

from typing import Any

DEFAULT_SCHEMA: dict[str, dict[str, dict[str, Any]]] = {
    "Daily Goals": {
        "Workout at least 10 minutes": {"type": "checkbox"},
        "Drink 2L of water": {"type": "checkbox"},
        "Read for 30 minutes": {"type": "checkbox"},
        "No junk food": {"type": "checkbox"},
        "Gym session": {
            "type": "checkbox",
            "schedule": {"type": "weekdays", "days": [1, 3, 5]},
        },
    },
    "Daily Log": {
        "Wake Up Time": {"type": "time"},
        "Running Time": {"type": "number", "unit": "min", "chartGroup": "Running"},
        "Running Distance": {"type": "number", "unit": "km", "chartGroup": "Running"},
        "Running Pace": {
            "type": "velocity",
            "unit": "km/h",
            "calculation": "Running Distance / (Running Time / 60)",
            "chartGroup": "Running",
        },
        "Calories Consumed": {"type": "number", "unit": "kcal"},
        "Protein Powder Intake": {"type": "number", "unit": "g"},
        "Creatine Intake": {"type": "number", "unit": "g"},
        "Bench Press": {
            "type": "number",
            "unit": "kg",
            "chartGroup": "Lifts",
            "schedule": {"type": "weekdays", "days": [1, 3, 5]},
        },
        "Squat": {
            "type": "number",
            "unit": "kg",
            "chartGroup": "Lifts",
            "schedule": {"type": "weekdays", "days": [1, 3, 5]},
        },
        "Deadlift": {
            "type": "number",
            "unit": "kg",
            "chartGroup": "Lifts",
            "schedule": {"type": "interval", "startDate": "2026-01-05", "every": 7},
        },
        "Notes": {"type": "text"},
    },
    "Monthly Goals": {
        "Complete online course": {"type": "checkbox"},
        "Read 2 books": {"type": "checkbox"},
        "Hit gym 20 times": {"type": "checkbox"},
    },
}
